from __future__ import annotations

"""Command line entry point for scanning and batch-downloading tracker pages."""

import argparse
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Sequence

from . import config
from .browser import open_page
from .config_validation import coerce_delay_ms, validate_runtime_config
from .controller import BatchController
from .document import PageDocument, StaticDocument
from .export_excel import export_latest_run_to_excel
from .followup import handle_detail_page
from .utils import ensure_dirs, log_line, setup_run_logger


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Scan NexusPHP listing pages and download their torrents one by one.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    def _page_arguments(sub: argparse.ArgumentParser) -> None:
        sub.add_argument("url", help="Tracker page URL (also used as the page location offline).")
        sub.add_argument(
            "--html",
            type=Path,
            default=None,
            help="Read the page from a saved HTML file instead of opening a browser.",
        )
        sub.add_argument("--headful", action="store_true", help="Show the browser window.")

    scan = subparsers.add_parser("scan", help="List the torrents found on a page.")
    _page_arguments(scan)

    run = subparsers.add_parser("run", help="Download every torrent found on a page.")
    _page_arguments(run)
    run.add_argument(
        "--delay-ms",
        default=None,
        help=(
            f"Delay between torrents in milliseconds "
            f"({config.MIN_DOWNLOAD_DELAY_MS}-{config.MAX_DOWNLOAD_DELAY_MS}, "
            f"default {config.DOWNLOAD_DELAY_MS})."
        ),
    )

    follow = subparsers.add_parser(
        "follow", help="Wait for the download link on a batch-opened detail page."
    )
    _page_arguments(follow)
    follow.add_argument("--referrer", default="", help="Referrer the detail page was opened from.")

    export = subparsers.add_parser("export", help="Export the latest run report to Excel.")
    export.add_argument("--dest", default=None, help="Destination .xlsx path.")

    return parser


@contextmanager
def _open_document(args: argparse.Namespace, *, referrer: str = "") -> Iterator[PageDocument]:
    if args.html is not None:
        yield StaticDocument.from_file(args.html, args.url, referrer=referrer)
        return
    with open_page(args.url, referrer=referrer or None, headless=not args.headful) as doc:
        yield doc


def _print_offline_activations(document: PageDocument) -> None:
    for activation in getattr(document, "activations", []):
        print(f"{activation.kind}\t{activation.url}\t{activation.filename or ''}")


def _cmd_scan(args: argparse.Namespace) -> int:
    with _open_document(args) as document:
        items = BatchController(document, write_reports=False).scan()
    print(f"Found {len(items)} torrent(s)")
    for index, item in enumerate(items, start=1):
        print(f"{index}. [{item.id}] {item.title}")
    return 0


def _cmd_run(args: argparse.Namespace) -> int:
    delay_ms = args.delay_ms
    setup_run_logger()
    with _open_document(args) as document:
        controller = BatchController(document, delay_provider=lambda: delay_ms)
        try:
            snapshot = controller.start_run()
        except KeyboardInterrupt:
            controller.stop_run()
            log_line("[RUN] Interrupted by user")
            snapshot = controller.snapshot()
        _print_offline_activations(document)
    print(
        f"Status: {snapshot.status.value}, processed: {snapshot.processed_count}, "
        f"succeeded: {snapshot.success_count}, failed: {snapshot.failure_count}"
    )
    if snapshot.total_count == 0:
        return 1
    return 0 if snapshot.failure_count == 0 else 1


def _cmd_follow(args: argparse.Namespace) -> int:
    with _open_document(args, referrer=args.referrer) as document:
        outcome = handle_detail_page(document)
        _print_offline_activations(document)
    if outcome is None:
        print("Not a batch-opened detail page; nothing to do.")
        return 0
    print("Download triggered." if outcome.ok else f"Download failed: {outcome.error_code}")
    return 0 if outcome.ok else 1


def _cmd_export(args: argparse.Namespace) -> int:
    try:
        path = export_latest_run_to_excel(args.dest)
    except FileNotFoundError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    print(path)
    return 0


_COMMANDS = {
    "scan": _cmd_scan,
    "run": _cmd_run,
    "follow": _cmd_follow,
    "export": _cmd_export,
}


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    ensure_dirs()
    try:
        validate_runtime_config("cli")
        if args.command == "run":
            args.delay_ms = coerce_delay_ms(args.delay_ms, entrypoint="cli")
    except ValueError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2
    return _COMMANDS[args.command](args)


if __name__ == "__main__":  # pragma: no cover - CLI entry
    raise SystemExit(main())
