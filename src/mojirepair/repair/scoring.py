"""
Candidate scoring: an ordered chain of guard clauses, first match wins.
Scores are fixed bands, never summed, so rankings stay deterministic and
every score can be explained by a single reason code.
"""
from __future__ import annotations

from dataclasses import replace

from mojirepair.repair.candidates import REASON_ORIGINAL, Candidate
from mojirepair.script.classify import (
    ScriptClassifier,
    has_halfwidth_kana,
    has_kana,
    is_ascii_only,
    is_han_only,
    is_hangul_only,
)
from mojirepair.script.markers import CorruptionDetector

SCORE_CORRUPT = 0
SCORE_ASCII = 99
SCORE_COMMON = 99
SCORE_JAPANESE = 78
SCORE_HAN = 76
SCORE_ORIGINAL = 70
SCORE_HALFWIDTH_KANA = 65
SCORE_HANGUL = 62
SCORE_NEUTRAL = 60
SCORE_RARE_HAN = 51


class CandidateScorer:
    def __init__(self, classifier: ScriptClassifier, detector: CorruptionDetector) -> None:
        self.classifier = classifier
        self.detector = detector

    def score_text(self, text: str) -> tuple[int, str]:
        """(score, reason) for a decoded string."""
        if self.detector.has_hard_corruption(text):
            return SCORE_CORRUPT, "corrupt"
        if is_ascii_only(text) and "?" not in text:
            return SCORE_ASCII, "ascii"
        if self.classifier.is_common_use_only(text):
            return SCORE_COMMON, "common"
        rare = self.classifier.has_rare_han(text)
        if self.classifier.is_japanese_likely(text) and has_kana(text):
            return SCORE_JAPANESE, "japanese"
        if is_han_only(text) and not rare:
            return SCORE_HAN, "han"
        if has_halfwidth_kana(text):
            return SCORE_HALFWIDTH_KANA, "halfwidth_kana"
        if is_hangul_only(text):
            return SCORE_HANGUL, "hangul"
        if rare:
            return SCORE_RARE_HAN, "rare_han"
        return SCORE_NEUTRAL, "neutral"

    def score(self, candidate: Candidate) -> Candidate:
        """
        Score one candidate. The untransformed fallback is pinned at SCORE_ORIGINAL;
        other untransformed candidates were scored when generated and pass through.
        """
        if candidate.reason_code == REASON_ORIGINAL and not candidate.transformed:
            return replace(candidate, score=SCORE_ORIGINAL)
        if not candidate.transformed:
            return candidate
        score, reason = self.score_text(candidate.text)
        return replace(candidate, score=score, reason_code=reason)
