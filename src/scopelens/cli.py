import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Optional, Sequence

from dotenv import load_dotenv

from .api import ExtractOptions, extract_file
from .config import ScopeLensConfig, load_config
from .errors import ExtractionError
from .history import HistoryStore
from .reporting import SortOption, filter_milestones, make_summary_text, sort_milestones

logger = logging.getLogger(__name__)


def _history(cfg: ScopeLensConfig) -> HistoryStore:
    return HistoryStore(cfg.history.path, cfg.history.max_entries)


def run_extract(args: argparse.Namespace, cfg: ScopeLensConfig) -> int:
    path = Path(args.path).expanduser()
    if not path.exists():
        logger.error("File not found: %s", path)
        return 1
    options = ExtractOptions(
        mime_type=args.mime_type,
        disable_ai=bool(args.disable_ai),
        save_to_history=bool(args.save),
        config=cfg,
    )
    try:
        project = extract_file(path, options)
    except ExtractionError as exc:
        logger.error("%s", exc)
        return 1

    milestones = project.milestones
    if args.search:
        milestones = filter_milestones(milestones, args.search)
    milestones = sort_milestones(milestones, SortOption(args.sort))

    if args.json:
        payload = project.to_dict()
        payload["milestones"] = [milestone.to_dict() for milestone in milestones]
        sys.stdout.write(json.dumps(payload, indent=2) + "\n")
    else:
        sys.stdout.write(make_summary_text(project, milestones))
    return 0


def run_history(args: argparse.Namespace, cfg: ScopeLensConfig) -> int:
    store = _history(cfg)
    if args.action == "list":
        for entry in store.list():
            total = entry.project.total_ballpark
            price = f"${total.price:,.2f}" if total else "-"
            sys.stdout.write(
                f"{entry.id}\t{entry.created_at}\t{entry.project.file_name}\t"
                f"{len(entry.project.milestones)} milestone(s)\t{price}\n"
            )
        return 0
    if args.action == "clear":
        store.clear()
        logger.info("History cleared")
        return 0

    if not args.entry_id:
        logger.error("history %s requires an entry id", args.action)
        return 2
    if args.action == "show":
        project = store.get(args.entry_id)
        if project is None:
            logger.error("No history entry with id %s", args.entry_id)
            return 1
        sys.stdout.write(json.dumps(project.to_dict(), indent=2) + "\n")
        return 0
    if not store.delete(args.entry_id):
        logger.error("No history entry with id %s", args.entry_id)
        return 1
    logger.info("Deleted %s", args.entry_id)
    return 0


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Extract milestones, effort and cost from project scope documents")
    parser.add_argument("--config", help="Path to a JSON/YAML configuration file")
    parser.add_argument("--history-file", help="Override the history file location")
    parser.add_argument("-v", "--verbose", action="store_true", help="Increase logging verbosity")
    subparsers = parser.add_subparsers(dest="command", required=True)

    extract = subparsers.add_parser("extract", help="Extract milestones from a spreadsheet or PDF")
    extract.add_argument("path", help="Spreadsheet (.xlsx, .xls) or PDF file")
    extract.add_argument("--mime-type", help="Declared MIME type of the file")
    extract.add_argument("--disable-ai", action="store_true", help="Skip the remote model and use heuristics only")
    extract.add_argument("--model", help="Override the remote extraction model")
    extract.add_argument("--save", action="store_true", help="Save the result to history")
    extract.add_argument(
        "--sort",
        choices=[option.value for option in SortOption],
        default=SortOption.ORDER.value,
        help="Order milestones by document order, hours or price",
    )
    extract.add_argument("--search", help="Only show milestones whose label or title contains this text")
    extract.add_argument("--json", action="store_true", help="Print the project record as JSON")

    history = subparsers.add_parser("history", help="Inspect saved extractions")
    history.add_argument("action", choices=["list", "show", "delete", "clear"])
    history.add_argument("entry_id", nargs="?", help="History entry id for show/delete")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    load_dotenv()
    args = parse_args(argv)
    try:
        cfg = load_config(os.environ, args)
    except FileNotFoundError as exc:
        logging.basicConfig(level=logging.INFO, format="%(message)s")
        logger.error("%s", exc)
        return 1
    log_level = logging.DEBUG if cfg.verbose else logging.INFO
    logging.basicConfig(level=log_level, format="%(message)s")
    try:
        if args.command == "extract":
            return run_extract(args, cfg)
        return run_history(args, cfg)
    except Exception:  # pragma: no cover
        logger.exception("Fatal error during extraction")
        return 1


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
