"""Command line entry point for inspecting ROFL replays."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from ..analysis import analyze_segment, select_segments
from ..config import Settings, parse_jobs, parse_log_level
from ..exceptions import FormatError, RoflError
from ..iter.sections import SectionDecoder
from ..logging_config import debug_trace, setup_logging
from ..model.section import GenericSection
from ..model.segment import SegmentKind
from ..rofl import Rofl
from .reporting import (
    export_filename,
    format_break,
    format_detail,
    format_info,
    format_payload_fields,
    format_stats,
    format_verify,
)

LOG = logging.getLogger(__name__)

_KINDS = {"chunk": SegmentKind.CHUNK, "keyframe": SegmentKind.KEYFRAME}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="lolrofl", description="Inspect League of Legends ROFL replay files")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose report output")
    parser.add_argument("--jobs", default=None, help="Worker threads used to decode segments")
    parser.add_argument("--log-level", default=None, help="Logging level (DEBUG, INFO, WARNING, ...)")
    sub = parser.add_subparsers(dest="command", required=True)

    get = sub.add_parser("get", help="Get information on the file")
    get_sub = get.add_subparsers(dest="target", required=True)

    info = get_sub.add_parser("info", aliases=["i"], help="Print high-level info on the file")
    info.add_argument("file", type=Path)
    info.add_argument("--signature", action="store_true", help="Print the internal file signature")

    metadata = get_sub.add_parser("metadata", aliases=["m"], help="Print the game's metadata")
    metadata.add_argument("file", type=Path)
    metadata.add_argument("--stats", action="store_true", help='Print only the "statsJson" value')

    payload = get_sub.add_parser("payload", aliases=["p"], help="Print technical information on the file")
    payload.add_argument("file", type=Path)
    payload.add_argument("--id", dest="match_id", action="store_true", help="Print the game's ID")
    payload.add_argument("--duration", action="store_true", help="Print the game's duration")
    payload.add_argument("--count", nargs="+", choices=sorted(_KINDS), default=[], help="Print segment counts")
    payload.add_argument("--loadid", action="store_true", help="Print the ID of the last loading chunk")
    payload.add_argument("--startid", action="store_true", help="Print the ID of the first game chunk")
    payload.add_argument("--interval", action="store_true", help="Print the keyframe interval")
    payload.add_argument("--key", action="store_true", help="Print the stored encryption key")

    analyze = sub.add_parser("analyze", help="Low-level segment analysis")
    analyze.add_argument("file", type=Path)
    analyze.add_argument("-i", "--id", dest="ids", type=int, action="append", default=[], help="Segment IDs to analyze")
    analyze.add_argument("--mode", choices=["bytes", "detail", "stats", "verify"], default="stats")
    analyze.add_argument("--only", choices=sorted(_KINDS), default=None, help="Restrict to one segment kind")
    analyze.add_argument("--type", dest="typed", type=int, default=None, help="Record size statistics for one type")
    analyze.add_argument("-H", "--human-readable", dest="human", action="store_true")

    export = sub.add_parser("export", help="Export decoded chunk or keyframe data")
    export_sub = export.add_subparsers(dest="target", required=True)
    for name, alias, help_text in (
        ("chunk", "c", "Export chunks"),
        ("keyframe", "k", "Export keyframes"),
        ("all", "a", "Export everything"),
    ):
        target = export_sub.add_parser(name, aliases=[alias], help=help_text)
        target.set_defaults(export_kind=_KINDS.get(name))
        target.add_argument("file", type=Path)
        target.add_argument("-d", "--directory", type=Path, default=None, help="Output directory")
        if name != "all":
            target.add_argument("-i", "--id", dest="ids", type=int, action="append", default=[])
    return parser


def _load(path: Path) -> Rofl:
    return Rofl.from_bytes(path.read_bytes())


def _collect_sections(data: bytes) -> Tuple[List[GenericSection], Optional[FormatError]]:
    sections: List[GenericSection] = []
    try:
        for section in SectionDecoder(data):
            sections.append(section)
    except FormatError as exc:
        return sections, exc
    return sections, None


def _cmd_get(args: argparse.Namespace, rofl: Rofl) -> int:
    if args.target in ("info", "i"):
        print(format_info(rofl.head, signature=args.signature))
    elif args.target in ("metadata", "m"):
        text = rofl.metadata()
        if not args.stats:
            print(text)
            return 0
        try:
            document = json.loads(text)
        except ValueError as exc:
            print(f"metadata is not valid JSON: {exc}", file=sys.stderr)
            return 1
        stats = document.get("statsJson") if isinstance(document, dict) else None
        if stats is None:
            print("metadata has no statsJson entry", file=sys.stderr)
            return 1
        print(stats if isinstance(stats, str) else json.dumps(stats))
    else:
        print(
            format_payload_fields(
                rofl.payload(),
                match_id=args.match_id,
                duration=args.duration,
                count=[_KINDS[name] for name in args.count],
                loadid=args.loadid,
                startid=args.startid,
                interval=args.interval,
                key=args.key,
            )
        )
    return 0


def _cmd_analyze(args: argparse.Namespace, rofl: Rofl, settings: Settings) -> int:
    only = _KINDS.get(args.only) if args.only else None
    selected = list(select_segments(rofl.segments(), args.ids, only))
    failures = 0
    for result in rofl.decode_segments(selected, jobs=settings.jobs):
        segment = result.segment
        if not result.ok:
            failures += 1
            if args.mode == "verify":
                print(format_verify(segment, False))
            print(f"{segment.kind.label} {segment.id}: {result.error}", file=sys.stderr)
            continue
        data = result.data or b""
        if args.mode == "bytes":
            print(f"{segment.kind.label} {segment.id}: {data.hex()}")
            continue
        if args.mode == "detail":
            sections, error = _collect_sections(data)
            if error is not None:
                failures += 1
                offset = sections[-1].end if sections else 0
                print(f"BROKE at index {offset} of {segment.kind.label} {segment.id} ({error})", file=sys.stderr)
            print(format_detail(segment, sections, human=args.human))
            continue
        report = analyze_segment(segment, data, typed=args.typed)
        if not report.ok:
            failures += 1
            if args.mode == "stats" or args.verbose:
                print(format_break(report, data), file=sys.stderr)
        if args.mode == "stats":
            print(format_stats(report, verbose=args.verbose))
        else:
            print(format_verify(segment, report.ok))
    if failures:
        LOG.info("%d of %d segments failed to decode", failures, len(selected))
    return 1 if failures and args.mode == "verify" else 0


def _cmd_export(args: argparse.Namespace, rofl: Rofl, settings: Settings) -> int:
    directory = args.directory or settings.out_dir
    directory.mkdir(parents=True, exist_ok=True)
    ids = getattr(args, "ids", [])
    selected = list(select_segments(rofl.segments(), ids, args.export_kind))
    match_id = rofl.payload().match_id
    status = 0
    for result in rofl.decode_segments(selected, jobs=settings.jobs):
        if not result.ok:
            print(f"{result.segment.kind.label} {result.segment.id}: {result.error}", file=sys.stderr)
            status = 1
            continue
        target = directory / export_filename(match_id, result.segment)
        target.write_bytes(result.data or b"")
        LOG.info("wrote %s", target)
    return status


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = Settings.from_env().with_overrides(
            jobs=parse_jobs(args.jobs, source="--jobs") if args.jobs is not None else None,
            log_level=parse_log_level(args.log_level, source="--log-level") if args.log_level is not None else None,
        )
    except ValueError as exc:
        parser.error(str(exc))

    setup_logging(settings.log_level)
    if not args.file.is_file():
        print(f"Source file does not exist: {args.file}", file=sys.stderr)
        return 1

    if settings.debug_log is None:
        return _run(parser, args, settings)
    with debug_trace(settings.debug_log):
        return _run(parser, args, settings)


def _run(parser: argparse.ArgumentParser, args: argparse.Namespace, settings: Settings) -> int:
    try:
        rofl = _load(args.file)
        if args.command == "get":
            return _cmd_get(args, rofl)
        if args.command == "analyze":
            return _cmd_analyze(args, rofl, settings)
        if args.command == "export":
            return _cmd_export(args, rofl, settings)
    except RoflError as exc:
        print(f"{args.file}: {exc}", file=sys.stderr)
        return 1

    parser.error("Unhandled command")
    return 2


if __name__ == "__main__":  # pragma: no cover - CLI wrapper
    raise SystemExit(main())
