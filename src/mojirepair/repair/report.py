"""
Print ranked candidate tables; write path-repair reports as CSV or JSON.
"""
from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Any

from mojirepair.errors import CodecFailure
from mojirepair.repair.candidates import Candidate
from mojirepair.repair.codecs import encode_as, guess_encodings
from mojirepair.script.markers import CorruptionDetector

REPAIR_COLUMNS = ["old", "new", "changed", "corrupt"]


def write_repairs_csv(
    rows: list[dict[str, Any]],
    out_path: str | Path,
    *,
    columns: list[str] | None = None,
) -> None:
    """Write path repair rows to CSV."""
    cols = columns or REPAIR_COLUMNS
    Path(out_path).parent.mkdir(parents=True, exist_ok=True)
    with open(out_path, "w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=cols, extrasaction="ignore")
        w.writeheader()
        w.writerows(rows)


def write_repairs_json(rows: list[dict[str, Any]], out_path: str | Path) -> None:
    Path(out_path).parent.mkdir(parents=True, exist_ok=True)
    with open(out_path, "w", encoding="utf-8") as f:
        json.dump(rows, f, indent=2, ensure_ascii=False)


def candidate_hints(c: Candidate) -> list[tuple[str, float]]:
    """chardet's view of the intermediate bytes of a transformed candidate."""
    if not c.transform_path:
        return []
    try:
        raw = encode_as(c.text, c.transform_path.target_encoding)
    except CodecFailure:
        return []
    return guess_encodings(raw)


def print_candidate_table(
    text: str,
    candidates: list[Candidate],
    detector: CorruptionDetector | None = None,
    *,
    show_hints: bool = False,
) -> None:
    """Pretty-print ranked candidates for one input string."""
    print(f"\n{'='*50}")
    print(f"  {text!r} ({len(text)} chars)")
    print(f"{'='*50}")
    for c in candidates:
        path = str(c.transform_path) if c.transform_path else "-"
        print(f"  {c.score:>3}  {c.reason_code:<16} {path:<22} {c.text}")
        if detector is not None:
            markers = detector.detect_markers(c.text)
            if markers:
                print(f"{'':>7}markers: {', '.join(m.code.value for m in markers)}")
        if show_hints:
            hints = candidate_hints(c)
            if hints:
                print(f"{'':>7}bytes look like: {', '.join(f'{e} ({p:.2f})' for e, p in hints)}")
