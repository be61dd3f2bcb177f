"""
Candidates: hypotheses for the original string, one per encoding round trip,
plus the untransformed input as a guaranteed fallback.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, NamedTuple, Sequence

from mojirepair.errors import CodecFailure, UnsupportedEncoding
from mojirepair.repair.codecs import round_trip, same_codec
from mojirepair.script.classify import ScriptClassifier, is_ascii_only, is_hangul_only
from mojirepair.script.markers import CorruptionDetector

if TYPE_CHECKING:
    from mojirepair.repair.scoring import CandidateScorer

log = logging.getLogger(__name__)

REASON_UNRECOVERABLE = "unrecoverable"
REASON_ASCII = "ascii"
REASON_ORIGINAL = "original"
REASON_FALLBACK = "fallback"


class TransformPath(NamedTuple):
    source_encoding: str
    target_encoding: str

    def __str__(self) -> str:
        return f"{self.source_encoding}=>{self.target_encoding}"


@dataclass(frozen=True)
class Candidate:
    text: str
    transformed: bool
    score: int = 0
    reason_code: str = ""
    transform_path: TransformPath | None = None

    def to_row(self) -> dict[str, Any]:
        return {
            "text": self.text,
            "transformed": self.transformed,
            "score": self.score,
            "reason_code": self.reason_code,
            "transform_path": str(self.transform_path) if self.transform_path else "",
        }


class CandidateGenerator:
    def __init__(
        self,
        classifier: ScriptClassifier,
        detector: CorruptionDetector,
        scorer: CandidateScorer,
    ) -> None:
        self.classifier = classifier
        self.detector = detector
        self.scorer = scorer

    def short_circuit(self, text: str) -> list[Candidate] | None:
        """Final candidate list when no search is needed, else None."""
        if not text or self.detector.is_unrecoverable(text):
            return [Candidate(text, False, 0, REASON_UNRECOVERABLE)]
        if is_ascii_only(text):
            return [Candidate(text, False, 99, REASON_ASCII)]
        if self.detector.has_corruption(text):
            return None
        if (self.classifier.is_common_use_only(text)
                or self.classifier.is_japanese_likely(text)
                or is_hangul_only(text)):
            score, reason = self.scorer.score_text(text)
            return [Candidate(text, False, score, f"clean_{reason}")]
        return None

    def transforms(
        self,
        text: str,
        source_encodings: Sequence[str],
        target_encodings: Sequence[str],
    ) -> list[Candidate]:
        """One unscored candidate per (source, target) pair that round-trips without error."""
        out: list[Candidate] = []
        for src in source_encodings:
            for dst in target_encodings:
                try:
                    if same_codec(src, dst):
                        continue
                    decoded = round_trip(text, src, dst)
                except (UnsupportedEncoding, CodecFailure) as e:
                    log.debug("skip %s=>%s for %r: %s", src, dst, text, e)
                    continue
                log.debug("%s=>%s %r -> %r", src, dst, text, decoded)
                out.append(Candidate(decoded, True, transform_path=TransformPath(src, dst)))
        return out

    def generate(
        self,
        text: str,
        source_encodings: Sequence[str],
        target_encodings: Sequence[str],
    ) -> list[Candidate]:
        done = self.short_circuit(text)
        if done is not None:
            return done
        candidates = self.transforms(text, source_encodings, target_encodings)
        candidates.append(Candidate(text, False, reason_code=REASON_ORIGINAL))
        return candidates
