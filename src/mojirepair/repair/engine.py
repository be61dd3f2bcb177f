"""
RepairEngine: short-circuit check -> generate -> score -> rank.
Each call is independent and side-effect free; the only shared state is the
read-only reference tables, so one engine can serve any number of threads.
"""
from __future__ import annotations

import logging
import posixpath
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Iterable, Sequence

from mojirepair.data.tables import ReferenceTables, default_tables, load_reference_tables
from mojirepair.repair.candidates import (
    REASON_FALLBACK,
    Candidate,
    CandidateGenerator,
    TransformPath,
)
from mojirepair.repair.codecs import DEFAULT_SOURCE_ENCODINGS, DEFAULT_TARGET_ENCODINGS
from mojirepair.repair.scoring import CandidateScorer
from mojirepair.script.classify import ScriptClassifier, is_ascii_only
from mojirepair.script.markers import CorruptionDetector

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class RepairResult:
    text: str
    transformed: bool
    score: int
    reason_code: str
    transform_path: TransformPath | None = None

    @classmethod
    def from_candidate(cls, c: Candidate) -> RepairResult:
        return cls(c.text, c.transformed, c.score, c.reason_code, c.transform_path)


@dataclass(frozen=True)
class PathRepair:
    old: str
    new: str
    changed: bool
    corrupt: bool

    def to_row(self) -> dict[str, Any]:
        return {"old": self.old, "new": self.new, "changed": self.changed, "corrupt": self.corrupt}


class RepairEngine:
    def __init__(
        self,
        tables: ReferenceTables | None = None,
        *,
        source_encodings: Sequence[str] | None = None,
        target_encodings: Sequence[str] | None = None,
        max_workers: int | None = None,
        threshold: int = 0,
    ) -> None:
        self.tables = tables if tables is not None else default_tables()
        self.source_encodings = list(DEFAULT_SOURCE_ENCODINGS if source_encodings is None else source_encodings)
        self.target_encodings = list(DEFAULT_TARGET_ENCODINGS if target_encodings is None else target_encodings)
        self.max_workers = max_workers
        self.threshold = threshold
        self.classifier = ScriptClassifier(self.tables)
        self.detector = CorruptionDetector(self.tables)
        self.scorer = CandidateScorer(self.classifier, self.detector)
        self.generator = CandidateGenerator(self.classifier, self.detector, self.scorer)

    @classmethod
    def from_config(cls, config: dict[str, Any] | None = None) -> RepairEngine:
        """Engine from a config dict (see mojirepair.config.DEFAULT_CONFIG)."""
        config = config or {}
        table_cfg = config.get("tables") or {}
        if any(table_cfg.get(k) for k in ("common_han", "japanese_han", "rare_han")):
            tables = load_reference_tables(
                table_cfg.get("common_han"),
                table_cfg.get("japanese_han"),
                table_cfg.get("rare_han"),
            )
        else:
            tables = default_tables()
        return cls(
            tables,
            source_encodings=config.get("source_encodings"),
            target_encodings=config.get("target_encodings"),
            max_workers=config.get("max_workers"),
            threshold=config.get("threshold") or 0,
        )

    def rank_all(
        self,
        text: str,
        from_encodings: Sequence[str] | None = None,
        to_encodings: Sequence[str] | None = None,
        threshold: int | None = None,
    ) -> list[Candidate]:
        """
        All candidates scoring >= threshold (default: the engine's), best first.
        Ties keep generation order. None for an encoding list selects the engine's
        list; an empty list tries no pairs.
        Never empty: if the threshold removes everything the best candidate is kept.
        """
        sources = self.source_encodings if from_encodings is None else from_encodings
        targets = self.target_encodings if to_encodings is None else to_encodings
        if threshold is None:
            threshold = self.threshold
        scored = [self.scorer.score(c) for c in self.generator.generate(text, sources, targets)]
        ranked = sorted(scored, key=lambda c: -c.score)
        kept = [c for c in ranked if c.score >= threshold]
        for c in ranked:
            log.debug("%3d %-16s %-22s %r", c.score, c.reason_code, c.transform_path or "", c.text)
        return kept or ranked[:1]

    def repair(self, text: str) -> RepairResult:
        """Best candidate for text. Never raises."""
        if not text:
            return RepairResult(text, False, 0, REASON_FALLBACK)
        best = self.rank_all(text)[0]
        if best.transformed and best.score <= 0:
            return RepairResult(text, False, 0, REASON_FALLBACK)
        return RepairResult.from_candidate(best)

    def repair_many(self, texts: Iterable[str], max_workers: int | None = None) -> list[RepairResult]:
        """repair() for each item on a thread pool; results keep input order."""
        with ThreadPoolExecutor(max_workers=max_workers or self.max_workers) as pool:
            return list(pool.map(self.repair, texts))

    def _repair_segment(self, segment: str) -> str:
        if not segment or is_ascii_only(segment):
            return segment
        r = self.repair(segment)
        return r.text.strip() if r.transformed else segment

    def repair_path(self, path: str) -> PathRepair:
        """
        Repair every directory segment and the file stem of a path string.
        The extension, root/drive/UNC prefix and separator style are kept.
        Pure string work: nothing on disk is read or renamed.
        """
        sep = "\\" if "\\" in path and "/" not in path else "/"
        *dirs, name = path.split(sep)
        stem, ext = posixpath.splitext(name)
        if not is_ascii_only(ext):
            stem, ext = name, ""
        new_dirs = [self._repair_segment(d) for d in dirs]
        new_name = self._repair_segment(stem) + ext
        new_path = sep.join([*new_dirs, new_name])
        return PathRepair(
            old=path,
            new=new_path,
            changed=new_path != path,
            corrupt=self.detector.has_corruption(new_path),
        )


@lru_cache(maxsize=1)
def default_engine() -> RepairEngine:
    return RepairEngine()


def repair(text: str) -> RepairResult:
    return default_engine().repair(text)


def rank_all(
    text: str,
    from_encodings: Sequence[str] | None = None,
    to_encodings: Sequence[str] | None = None,
    threshold: int | None = None,
) -> list[Candidate]:
    return default_engine().rank_all(text, from_encodings, to_encodings, threshold)
