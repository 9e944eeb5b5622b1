"""
App prompt builders: build system prompts for the tutor using library core template.
All prompt content and templates live here; the streamer receives built prompts.
"""

from api.prompt_builders.tutor import BASE_SYSTEM_PROMPT, assemble_tutor_context, render_knowledge

__all__ = [
    "BASE_SYSTEM_PROMPT",
    "assemble_tutor_context",
    "render_knowledge",
]
