#!/usr/bin/env python3
"""
Knowledge base coverage: which files exist per directory, which mapped files
are missing, and which curriculum lessons fall back to module directories or
to general knowledge.

Run: python scripts/knowledge_report.py
     python scripts/knowledge_report.py --content-dir ./content -o report.json

Exit status is 1 when a mapped file is missing.
"""
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

_project_root = Path(__file__).resolve().parent.parent
for _p in (_project_root, _project_root / "src"):
    if str(_p) not in sys.path:
        sys.path.insert(0, str(_p))


def build_report(catalog, knowledge_base, lesson_files, module_dirs) -> dict:
    from academy.curriculum.knowledge import KnowledgeSelector

    selector = KnowledgeSelector(knowledge_base, lesson_files, module_dirs)
    missing = sorted(
        {f for files in lesson_files.values() for f in files if knowledge_base.get(f) is None}
    )
    unmapped: list[str] = []
    fallback: list[str] = []
    for module in catalog.modules:
        for lesson in module.lessons:
            key = f"{module.id}/{lesson.id}"
            if lesson.id not in lesson_files:
                unmapped.append(key)
            if selector.select(module.id, lesson.id)[0].fallback:
                fallback.append(key)

    return {
        **knowledge_base.summary(),
        "missing_files": missing,
        "unmapped_lessons": unmapped,
        "fallback_lessons": fallback,
    }


def main() -> int:
    parser = argparse.ArgumentParser(description="Report knowledge base coverage of the curriculum.")
    parser.add_argument("--content-dir", default=None, help="Content root (default from settings)")
    parser.add_argument("--output", "-o", default=None, help="Write report to JSON file")
    args = parser.parse_args()

    from academy.curriculum.catalog import CurriculumCatalog
    from academy.curriculum.knowledge import KnowledgeBase
    from api.config import get_settings
    from api.knowledge_map import LESSON_TO_KNOWLEDGE_FILES, MODULE_TO_KNOWLEDGE_DIRS

    content_dir = Path(args.content_dir) if args.content_dir else get_settings().content_dir
    catalog = CurriculumCatalog.load(content_dir / "curriculum.json")
    kb = KnowledgeBase.load(content_dir / "knowledge-base")
    report = build_report(catalog, kb, LESSON_TO_KNOWLEDGE_FILES, MODULE_TO_KNOWLEDGE_DIRS)

    print(f"knowledge files: {report['total_files']}")
    for dir_name, files in report["modules"].items():
        print(f"  {dir_name}: {len(files)}")
    print(f"missing mapped files: {len(report['missing_files'])}")
    for f in report["missing_files"]:
        print(f"  {f}")
    print(f"lessons on general-knowledge fallback: {len(report['fallback_lessons'])}")

    if args.output:
        Path(args.output).write_text(json.dumps(report, indent=2), encoding="utf-8")
        print(f"\nSaved to {args.output}")

    return 1 if report["missing_files"] else 0


if __name__ == "__main__":
    sys.exit(main())
