"""Tests for energy estimation."""

from datetime import date

from calorie_ledger.domain.settings import ActivityLevel, DaySettings, Gender
from calorie_ledger.services.energy import age, bmr, estimate_rmr, tdee


def test_bmr_male_example() -> None:
    assert bmr(80, 180, 36, Gender.MALE) == 1750
    assert bmr(75, 180, 30, "male") == 1730


def test_bmr_female_rounds_to_nearest() -> None:
    assert bmr(60, 165, 28, Gender.FEMALE) == 1330


def test_bmr_missing_inputs_return_zero() -> None:
    assert bmr(None, 180, 30, Gender.MALE) == 0
    assert bmr(80, 0, 30, Gender.MALE) == 0
    assert bmr(80, 180, 0, Gender.MALE) == 0
    assert bmr(80, 180, 30, None) == 0


def test_tdee_uses_activity_factor() -> None:
    assert tdee(1750, ActivityLevel.SEDENTARY) == 2100
    assert tdee(1000, ActivityLevel.LIGHT) == 1375
    assert tdee(1000, "moderate") == 1550
    assert tdee(1000, ActivityLevel.ACTIVE) == 1725
    assert tdee(1000, ActivityLevel.EXTRA) == 1900


def test_tdee_unknown_level_defaults_to_sedentary() -> None:
    assert tdee(1000, None) == 1200
    assert tdee(1000, "couch") == 1200


def test_age_counts_whole_calendar_years() -> None:
    dob = date(1990, 6, 15)
    assert age(dob, today=date(2023, 6, 14)) == 32
    assert age(dob, today=date(2023, 6, 15)) == 33
    assert age(date(1990, 1, 1), today=date(2023, 1, 1)) == 33


def test_age_without_dob_is_zero() -> None:
    assert age(None) == 0


def test_estimate_rmr_requires_complete_profile() -> None:
    profile = DaySettings(
        id=None,
        day=date(2024, 1, 1),
        weight=80,
        height=180,
        gender=Gender.MALE,
        dob=date(1988, 1, 1),
        activity_level=ActivityLevel.SEDENTARY,
    )

    assert estimate_rmr(profile, today=date(2024, 6, 1)) == 2100
    incomplete = DaySettings(id=None, day=date(2024, 1, 1), weight=80, height=180)
    assert estimate_rmr(incomplete, today=date(2024, 6, 1)) is None
