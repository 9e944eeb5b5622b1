"""
Knowledge documents and the lesson -> documents selector.

KnowledgeBase reads every markdown file under a root directory once. The
selector is a pure mapping over that in-memory snapshot:

  1. documents mapped to the lesson id,
  2. else every document in the module's knowledge directories,
  3. else a single fallback document telling the tutor to use general knowledge.

It never raises; unknown ids end up at step 3.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional, Sequence

logger = logging.getLogger(__name__)

FALLBACK_KNOWLEDGE_TEXT = (
    "No specific knowledge base content available for this lesson. "
    "Use your general knowledge of AI agents and AWS services to help the student."
)


@dataclass(frozen=True)
class KnowledgeDocument:
    path: str
    content: str
    fallback: bool = False


FALLBACK_DOCUMENT = KnowledgeDocument(path="", content=FALLBACK_KNOWLEDGE_TEXT, fallback=True)


@dataclass(frozen=True)
class KnowledgeBase:
    """Snapshot of knowledge files keyed by POSIX path relative to the root."""

    documents: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def load(cls, root: str | Path) -> "KnowledgeBase":
        root = Path(root)
        docs: dict[str, str] = {}
        if not root.is_dir():
            logger.warning("knowledge base directory missing path=%s", root)
            return cls(documents=docs)
        for path in sorted(root.rglob("*.md")):
            rel = path.relative_to(root).as_posix()
            try:
                docs[rel] = path.read_text(encoding="utf-8")
            except OSError as e:
                logger.warning("could not read knowledge file path=%s error=%s", rel, e)
        logger.info("knowledge base loaded root=%s files=%s", root, len(docs))
        return cls(documents=docs)

    def get(self, rel_path: str) -> Optional[KnowledgeDocument]:
        content = self.documents.get(rel_path)
        if content is None:
            return None
        return KnowledgeDocument(path=rel_path, content=content)

    def directory(self, dir_name: str) -> list[KnowledgeDocument]:
        """Markdown files directly inside dir_name, in path order."""
        prefix = dir_name.rstrip("/") + "/"
        return [
            KnowledgeDocument(path=p, content=c)
            for p, c in sorted(self.documents.items())
            if p.startswith(prefix) and "/" not in p[len(prefix):]
        ]

    def summary(self) -> dict:
        """Per-directory file names plus a total count, for coverage checks."""
        modules: dict[str, list[str]] = {}
        for p in sorted(self.documents):
            if "/" not in p:
                continue
            dir_name, _, name = p.rpartition("/")
            modules.setdefault(dir_name, []).append(name)
        return {"modules": modules, "total_files": sum(len(v) for v in modules.values())}


class KnowledgeSelector:
    def __init__(
        self,
        knowledge_base: KnowledgeBase,
        lesson_files: Mapping[str, Sequence[str]],
        module_dirs: Mapping[str, Sequence[str]],
    ):
        self.knowledge_base = knowledge_base
        self.lesson_files = lesson_files
        self.module_dirs = module_dirs

    def select(self, module_id: str, lesson_id: str) -> list[KnowledgeDocument]:
        docs: list[KnowledgeDocument] = []
        for rel in self.lesson_files.get(lesson_id) or ():
            doc = self.knowledge_base.get(rel)
            if doc is None:
                logger.warning("mapped knowledge file not found lesson_id=%s path=%s", lesson_id, rel)
                continue
            docs.append(doc)

        if not docs:
            docs = self.module_documents(module_id)
            if docs:
                logger.debug("knowledge from module directories module_id=%s count=%s", module_id, len(docs))

        if not docs:
            logger.info("no knowledge for module_id=%s lesson_id=%s; using fallback", module_id, lesson_id)
            return [FALLBACK_DOCUMENT]
        return docs

    def module_documents(self, module_id: str) -> list[KnowledgeDocument]:
        docs: list[KnowledgeDocument] = []
        for dir_name in self.module_dirs.get(module_id) or ():
            docs.extend(self.knowledge_base.directory(dir_name))
        return docs
