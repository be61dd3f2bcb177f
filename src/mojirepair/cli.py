"""
CLI: decode, repair, check.
"""
from __future__ import annotations

import argparse
import logging
import sys

from mojirepair.errors import ConfigError


def _setup_logging(verbose: bool, level: str = "WARNING") -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else getattr(logging, str(level).upper(), logging.WARNING),
        format="%(levelname)s: %(message)s",
    )


def cmd_decode(args: argparse.Namespace, config: dict) -> int:
    from mojirepair.repair.engine import RepairEngine
    from mojirepair.repair.report import print_candidate_table, write_repairs_json
    if not args.strings:
        print("At least one string is required", file=sys.stderr)
        return 1
    engine = RepairEngine.from_config(config)
    from_enc = [args.from_enc] if args.from_enc else config["decode_encodings"]
    to_enc = [args.to_enc] if args.to_enc else config["decode_encodings"]
    threshold = config["verbose_threshold"] if args.verbose else config["quiet_threshold"]
    print(f"  fromEnc: {from_enc}")
    print(f"  toEnc:   {to_enc}")
    rows = []
    for s in args.strings:
        results = engine.rank_all(s, from_enc, to_enc, threshold)
        print_candidate_table(s, results, engine.detector, show_hints=args.verbose)
        print(f"  INPUT:  {s!r}")
        print(f"  OUTPUT: {results[0].text!r}")
        rows.extend({"input": s, **c.to_row()} for c in results)
    if args.out_json:
        write_repairs_json(rows, args.out_json)
        print(f"Wrote {len(rows)} candidates to {args.out_json}")
    return 0


def cmd_repair(args: argparse.Namespace, config: dict) -> int:
    from mojirepair.repair.engine import RepairEngine
    from mojirepair.repair.report import write_repairs_csv, write_repairs_json
    paths = list(args.paths)
    if args.stdin:
        paths.extend(line.rstrip("\r\n") for line in sys.stdin if line.strip())
    if not paths:
        print("No paths given", file=sys.stderr)
        return 1
    engine = RepairEngine.from_config(config)
    rows = []
    changed = corrupt = 0
    for i, p in enumerate(paths):
        r = engine.repair_path(p)
        rows.append(r.to_row())
        if r.corrupt:
            corrupt += 1
            print(f"  BadEnc: {i} {r.new}")
        elif r.changed:
            changed += 1
            print(f"  FR: {i} {r.old}")
            print(f"  TO: {i} {r.new}")
    print(f"Total {len(paths)} paths, {changed} to rename, {corrupt} still corrupt (dry run, nothing renamed)")
    if args.out_csv:
        write_repairs_csv(rows, args.out_csv)
        print(f"Wrote {len(rows)} rows to {args.out_csv}")
    if args.out_json:
        write_repairs_json(rows, args.out_json)
        print(f"Wrote {len(rows)} rows to {args.out_json}")
    return 0


def cmd_check(args: argparse.Namespace, config: dict) -> int:
    from mojirepair.repair.engine import RepairEngine
    engine = RepairEngine.from_config(config)
    for s in args.strings:
        tags = sorted(t.value for t in engine.classifier.classify(s))
        markers = engine.detector.detect_markers(s)
        print(f"{s!r}")
        print(f"  tags:    {', '.join(tags) or '-'}")
        print(f"  markers: {', '.join(f'{m.code.value}({m.severity.name})' for m in markers) or '-'}")
        print(f"  corrupt: {engine.detector.has_corruption(s)}")
    return 0


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(prog="mojirepair", description="Recover CJK text garbled by encoding mismatches")
    p.add_argument("--config", help="YAML config (optional)")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging; show all candidates")
    sub = p.add_subparsers(dest="command", required=True)
    # decode
    d = sub.add_parser("decode", aliases=["dc"], help="Show ranked decode candidates for strings")
    d.add_argument("strings", nargs="*", help="Strings to decode")
    d.add_argument("-f", "--from_enc", help="Only re-encode under this encoding (default: all)")
    d.add_argument("-t", "--to_enc", help="Only decode as this encoding (default: all)")
    d.add_argument("--out_json", help="Write ranked candidates as JSON")
    d.set_defaults(func=cmd_decode)
    # repair
    r = sub.add_parser("repair", aliases=["fixname"], help="Dry-run repair of path strings")
    r.add_argument("paths", nargs="*", help="Paths to repair (strings only, nothing is renamed)")
    r.add_argument("--stdin", action="store_true", help="Also read paths from stdin, one per line")
    r.add_argument("--out_csv", help="Write a CSV report")
    r.add_argument("--out_json", help="Write a JSON report")
    r.set_defaults(func=cmd_repair)
    # check
    c = sub.add_parser("check", help="Show script tags and corruption markers")
    c.add_argument("strings", nargs="+", help="Strings to check")
    c.set_defaults(func=cmd_check)
    args = p.parse_args(argv)

    from mojirepair.config import load_config
    try:
        config = load_config(args.config)
    except ConfigError as e:
        print(f"Config error: {e}", file=sys.stderr)
        return 1
    _setup_logging(args.verbose, config.get("log_level", "WARNING"))
    return args.func(args, config)


if __name__ == "__main__":
    sys.exit(main())
