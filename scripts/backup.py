"""Export, import or wipe the configured study log store.

Storage is selected through the usual STUDYLOG_* environment variables
(see studylog/config.py).

Usage:
    python scripts/backup.py export [--out DIR]
    python scripts/backup.py import FILE [--yes]
    python scripts/backup.py wipe [--yes]
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from studylog.config import settings
from studylog.errors import StudyLogError
from studylog.journal import Journal

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
)
logger = logging.getLogger("studylog.backup")


def confirm(prompt: str) -> bool:
    """Ask on stdin; anything but y/yes declines."""
    answer = input(f"  {prompt} [y/N] ").strip().lower()
    return answer in {"y", "yes"}


def cmd_export(journal: Journal, args: argparse.Namespace) -> int:
    out_dir = Path(args.out)
    out_dir.mkdir(parents=True, exist_ok=True)
    path = out_dir / journal.backups.filename()
    document = journal.export()
    path.write_text(journal.backups.dumps(document), encoding="utf-8")
    print(f"  Exported {len(document.data)} days to {path}")
    return 0


def cmd_import(journal: Journal, args: argparse.Namespace) -> int:
    doc = journal.backups.read_file(Path(args.file))
    plan = journal.plan_import(doc)
    print(f"  {plan.summary}")
    if not args.yes and not confirm("Importing overwrites the current data. Continue?"):
        print("  Import cancelled.")
        return 1
    store = journal.import_document(doc)
    print(f"  Imported {store.note_count} notes on {len(store.root)} days.")
    return 0


def cmd_wipe(journal: Journal, args: argparse.Namespace) -> int:
    plan = journal.plan_wipe()
    print(f"  {plan.summary}")
    if not args.yes and not confirm("Really delete everything? Export first if unsure."):
        print("  Wipe cancelled.")
        return 1
    journal.wipe()
    print("  All data deleted.")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Parse arguments and run one backup command."""
    parser = argparse.ArgumentParser(description="Study log backup tool")
    sub = parser.add_subparsers(dest="command", required=True)

    p_export = sub.add_parser("export", help="Write a backup document")
    p_export.add_argument("--out", default=".", help="Target directory (default: .)")
    p_export.set_defaults(func=cmd_export)

    p_import = sub.add_parser("import", help="Replace all data with a backup")
    p_import.add_argument("file", help="Backup JSON file")
    p_import.add_argument("--yes", action="store_true", help="Skip the confirmation prompt")
    p_import.set_defaults(func=cmd_import)

    p_wipe = sub.add_parser("wipe", help="Delete all data")
    p_wipe.add_argument("--yes", action="store_true", help="Skip the confirmation prompt")
    p_wipe.set_defaults(func=cmd_wipe)

    args = parser.parse_args(argv)
    journal = Journal.from_settings(settings)
    try:
        return args.func(journal, args)
    except StudyLogError as e:
        print(f"  FAIL: {e.message}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
