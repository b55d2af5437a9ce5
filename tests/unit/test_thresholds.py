"""
Unit Tests for the guideline threshold table and guideline parsing.
"""
import dataclasses

import pytest

from gdm_assist.core.gdm import GUIDELINE_THRESHOLDS, Guideline, get_thresholds
from gdm_assist.utils import GdmAssistError, UnknownGuidelineError


class TestGuidelineThresholds:

    def test_who_cutoffs(self):
        who = get_thresholds(Guideline.WHO)
        assert (who.fasting, who.one_hour, who.two_hour) == (5.1, 10.0, 8.5)

    def test_nice_cutoffs(self):
        nice = get_thresholds(Guideline.NICE)
        assert (nice.fasting, nice.one_hour, nice.two_hour) == (5.6, None, 7.8)

    def test_every_guideline_has_a_row(self):
        assert set(GUIDELINE_THRESHOLDS) == set(Guideline)
        for guideline, row in GUIDELINE_THRESHOLDS.items():
            assert row.guideline == guideline
            assert row.references

    def test_table_is_read_only(self):
        with pytest.raises(TypeError):
            GUIDELINE_THRESHOLDS[Guideline.WHO] = GUIDELINE_THRESHOLDS[Guideline.NICE]

    def test_rows_are_frozen(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            GUIDELINE_THRESHOLDS[Guideline.WHO].fasting = 4.0

    def test_to_dict(self):
        data = get_thresholds("NICE").to_dict()
        assert data["guideline"] == "NICE"
        assert data["one_hour"] is None
        assert isinstance(data["references"], list)


class TestGuidelineParse:

    @pytest.mark.parametrize("raw,expected", [
        ("WHO", Guideline.WHO),
        ("who", Guideline.WHO),
        (" Nice ", Guideline.NICE),
        (Guideline.NICE, Guideline.NICE),
    ])
    def test_parse(self, raw, expected):
        assert Guideline.parse(raw) == expected

    def test_unknown_guideline(self):
        with pytest.raises(UnknownGuidelineError) as exc_info:
            get_thresholds("ADA")

        err = exc_info.value
        assert isinstance(err, GdmAssistError)
        assert err.code == "UNKNOWN_GUIDELINE"
        assert err.to_dict()["details"]["valid"] == ["WHO", "NICE"]
