"""
Tests for candidate generation, scoring, ranking and repair.

Run: pytest tests/test_engine.py -v
"""
from __future__ import annotations

import pytest

from mojirepair.data.tables import ReferenceTables
from mojirepair.repair.candidates import Candidate, TransformPath
from mojirepair.repair.engine import (
    RepairEngine,
    RepairResult,
    default_engine,
    rank_all,
    repair,
)
from mojirepair.repair.scoring import (
    SCORE_COMMON,
    SCORE_CORRUPT,
    SCORE_HAN,
    SCORE_ORIGINAL,
)
from mojirepair.script.markers import MarkerCode, has_private_use

# GBK bytes of common Chinese read back as Shift-JIS
ORIGINAL = "学习资料"
GARBLED = ORIGINAL.encode("gbk").decode("shift_jis")
ORIGINAL_2 = "中文测试"
GARBLED_2 = ORIGINAL_2.encode("gbk").decode("shift_jis")
# UTF-8 bytes read back as Latin-1
GARBLED_LATIN = "中文".encode("utf-8").decode("latin-1")


@pytest.fixture(scope="module")
def engine():
    return RepairEngine()


def _is_sorted_desc(cands: list[Candidate]) -> bool:
    return all(a.score >= b.score for a, b in zip(cands, cands[1:]))


# ---------------------------------------------------------------------------
# A) Short circuits
# ---------------------------------------------------------------------------

class TestShortCircuit:
    @pytest.mark.parametrize("s", ["readme.txt", "IMG_0001.JPG", "a b-c_d (1)"])
    def test_ascii_only(self, engine, s):
        assert engine.repair(s) == RepairResult(s, False, 99, "ascii")
        assert engine.rank_all(s) == [Candidate(s, False, 99, "ascii")]

    @pytest.mark.parametrize("s", ["文件?名", "abc\ufffd", GARBLED + "?"])
    def test_replacement_is_unrecoverable(self, engine, s):
        assert engine.repair(s) == RepairResult(s, False, 0, "unrecoverable")

    def test_empty_string(self, engine):
        assert engine.repair("") == RepairResult("", False, 0, "fallback")
        assert engine.rank_all("") == [Candidate("", False, 0, "unrecoverable")]

    def test_clean_common_skips_search(self, engine):
        ranked = engine.rank_all(ORIGINAL)
        assert ranked == [Candidate(ORIGINAL, False, SCORE_COMMON, "clean_common")]

    def test_clean_japanese_and_hangul(self, engine):
        assert engine.repair("テスト") == RepairResult("テスト", False, 78, "clean_japanese")
        assert engine.repair("한국어") == RepairResult("한국어", False, 62, "clean_hangul")


# ---------------------------------------------------------------------------
# B) Recovery scenarios
# ---------------------------------------------------------------------------

class TestRecovery:
    def test_gbk_as_shift_jis_candidate(self, engine):
        encs = ["GBK", "SHIFT_JIS", "UTF8"]
        ranked = engine.rank_all(GARBLED, encs, encs)
        hits = [c for c in ranked if c.text == ORIGINAL]
        assert hits
        hit = hits[0]
        assert hit.score == 99
        assert hit.transformed
        assert hit.transform_path == TransformPath("SHIFT_JIS", "GBK")
        assert GARBLED.encode("shift_jis").decode("gbk") == hit.text

    @pytest.mark.parametrize("garbled,original", [(GARBLED, ORIGINAL), (GARBLED_2, ORIGINAL_2)])
    def test_repair_gbk_as_shift_jis(self, engine, garbled, original):
        r = engine.repair(garbled)
        assert r.text == original
        assert r.transformed
        assert r.score == 99
        assert r.reason_code == "common"

    def test_repair_utf8_as_latin1(self, engine):
        r = engine.repair(GARBLED_LATIN)
        assert r == RepairResult("中文", True, 99, "common", TransformPath("ISO-8859-1", "UTF8"))

    def test_module_level_api(self):
        assert repair(GARBLED).text == ORIGINAL
        assert rank_all(GARBLED)[0].text == ORIGINAL
        assert default_engine() is default_engine()


# ---------------------------------------------------------------------------
# C) Ranking properties
# ---------------------------------------------------------------------------

INPUTS = ["", "?", "abc", ORIGINAL, GARBLED, GARBLED_2, GARBLED_LATIN,
          "文件\ue000", "\udc80\udc81", "鍙戦", "ﾃｽﾄ", "Привет"]


class TestRanking:
    @pytest.mark.parametrize("s", INPUTS)
    def test_never_empty(self, engine, s):
        assert engine.rank_all(s)
        assert engine.rank_all(s, threshold=1000)

    @pytest.mark.parametrize("s", INPUTS)
    def test_sorted_descending(self, engine, s):
        assert _is_sorted_desc(engine.rank_all(s))

    @pytest.mark.parametrize("s", [GARBLED, GARBLED_LATIN, "鍙戦", "Привет"])
    def test_stable_on_ties(self, engine, s):
        encs = ["ISO-8859-1", "UTF8", "UTF-16", "GBK", "BIG5", "SHIFT_JIS", "EUC-JP", "EUC-KR"]
        generated = [engine.scorer.score(c)
                     for c in engine.generator.generate(s, encs, encs)]
        ranked = engine.rank_all(s, encs, encs)
        assert len(ranked) == len(generated)
        positions = [generated.index(c) for c in ranked]
        for (a, pa), (b, pb) in zip(zip(ranked, positions), zip(ranked[1:], positions[1:])):
            if a.score == b.score:
                assert pa < pb

    def test_threshold_filters(self, engine):
        encs = ["ISO-8859-1", "UTF8", "GBK", "BIG5", "SHIFT_JIS"]
        ranked = engine.rank_all(GARBLED, encs, encs, threshold=70)
        assert all(c.score >= 70 for c in ranked)
        assert any(not c.transformed and c.reason_code == "original" for c in ranked)

    def test_fallback_always_present(self, engine):
        ranked = engine.rank_all(GARBLED)
        fallback = [c for c in ranked if c.reason_code == "original"]
        assert fallback == [Candidate(GARBLED, False, SCORE_ORIGINAL, "original")]

    def test_no_same_to_same_pairs(self, engine):
        ranked = engine.rank_all(GARBLED, ["UTF8", "UTF-8", "GBK"], ["UTF8", "GBK"])
        for c in ranked:
            if c.transform_path:
                src, dst = c.transform_path
                assert {src, dst} != {"UTF8", "UTF-8"} and src != dst

    def test_unsupported_encoding_is_skipped(self, engine):
        ranked = engine.rank_all(GARBLED, ["KLINGON", "SHIFT_JIS"], ["GBK", "NOPE"])
        assert ranked[0].text == ORIGINAL
        assert all(c.transform_path is None or "KLINGON" not in c.transform_path
                   for c in ranked)

    def test_empty_encoding_lists_leave_fallback(self, engine):
        assert engine.rank_all(GARBLED, [], []) == [
            Candidate(GARBLED, False, SCORE_ORIGINAL, "original")]
        assert engine.rank_all(GARBLED, [], None)[0].transform_path is None

    def test_engine_threshold_is_default(self):
        strict = RepairEngine(threshold=100)
        ranked = strict.rank_all(GARBLED)
        assert [c.text for c in ranked] == [ORIGINAL]
        assert len(strict.rank_all(GARBLED, threshold=0)) >= 2
        assert strict.repair(GARBLED).text == ORIGINAL

    @pytest.mark.parametrize("s", [ORIGINAL, "readme.txt", GARBLED, GARBLED_LATIN])
    def test_idempotent(self, engine, s):
        once = engine.repair(s).text
        assert engine.repair(once).text == once


# ---------------------------------------------------------------------------
# D) Corrupted inputs degrade to "unchanged"
# ---------------------------------------------------------------------------

class TestCorruptInputs:
    def test_private_use_visible_and_zero(self, engine):
        s = "文件\ue000"
        assert MarkerCode.PRIVATE_USE in {m.code for m in engine.detector.detect_markers(s)}
        assert engine.detector.has_corruption(s)
        scored = engine.scorer.score(Candidate(s, True, transform_path=TransformPath("GBK", "UTF8")))
        assert scored.score == SCORE_CORRUPT
        ranked = engine.rank_all(s)
        assert any(c.text == s for c in ranked)
        for c in ranked:
            if c.transformed and has_private_use(c.text):
                assert c.score == 0

    def test_lone_surrogates_never_raise(self, engine):
        s = "\udc80\udc81"
        r = engine.repair(s)
        assert r.text == s
        assert not r.transformed

    def test_rare_han_not_preferred(self, engine):
        score, reason = engine.scorer.score_text("鍙戦")
        assert (score, reason) == (51, "rare_han")
        r = engine.repair("鍙戦")
        assert r.score >= SCORE_ORIGINAL

    def test_stray_latin_letter_is_not_han(self, engine):
        # Shift-JIS bytes of valid Chinese read as UTF-8 leave one Han plus "I"
        assert engine.scorer.score_text("啖I") == (60, "neutral")
        assert engine.repair("蝠蜂") == RepairResult("蝠蜂", False, SCORE_ORIGINAL, "original")


# ---------------------------------------------------------------------------
# E) Scoring bands
# ---------------------------------------------------------------------------

class TestScoringBands:
    @pytest.mark.parametrize("text,expected", [
        ("Ã©", (0, "corrupt")),
        ("㍻", (0, "corrupt")),
        ("readme.txt", (99, "ascii")),
        ("学习资料", (99, "common")),
        ("東京タワー", (78, "japanese")),
        ("東京", (76, "han")),
        ("ﾃｽﾄ", (65, "halfwidth_kana")),
        ("한국어", (62, "hangul")),
        ("鍙戦", (51, "rare_han")),
        ("中文テスト한국어", (60, "neutral")),
    ])
    def test_bands(self, engine, text, expected):
        assert engine.scorer.score_text(text) == expected

    def test_untransformed_fallback_pinned(self, engine):
        c = engine.scorer.score(Candidate("Ã©", False, reason_code="original"))
        assert c.score == SCORE_ORIGINAL


# ---------------------------------------------------------------------------
# F) Injected tables, path repair and bulk repair
# ---------------------------------------------------------------------------

def test_injected_tables_change_classification():
    small = RepairEngine(ReferenceTables.from_chars(common=ORIGINAL))
    assert small.repair(GARBLED) == RepairResult(ORIGINAL, True, SCORE_COMMON, "common",
                                                 TransformPath("SHIFT_JIS", "GBK"))
    empty = RepairEngine(ReferenceTables.from_chars())
    r = empty.repair(GARBLED)
    assert r.text == ORIGINAL
    assert (r.score, r.reason_code) == (SCORE_HAN, "han")


class TestRepairPath:
    def test_unchanged(self, engine):
        r = engine.repair_path("docs/readme.txt")
        assert r.new == "docs/readme.txt"
        assert not r.changed and not r.corrupt

    def test_segments_and_extension(self, engine):
        r = engine.repair_path(f"/music/{GARBLED}/{GARBLED_2}.mp3")
        assert r.new == f"/music/{ORIGINAL}/{ORIGINAL_2}.mp3"
        assert r.changed and not r.corrupt

    def test_windows_separators(self, engine):
        r = engine.repair_path(f"C:\\data\\{GARBLED}\\a.txt")
        assert r.new == f"C:\\data\\{ORIGINAL}\\a.txt"

    def test_still_corrupt(self, engine):
        r = engine.repair_path("x/\ue000\ue001.txt")
        assert r.corrupt
        assert not r.changed


def test_repair_many_keeps_order(engine):
    items = [GARBLED, "readme.txt", GARBLED_LATIN, "", GARBLED_2] * 4
    results = engine.repair_many(items, max_workers=4)
    assert [r.text for r in results] == [engine.repair(s).text for s in items]
