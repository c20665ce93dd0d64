"""Resting metabolic rate and daily energy expenditure estimates.

BMR uses the Mifflin-St Jeor equation. TDEE multiplies it by an activity
factor. Results are whole calories rounded half up.
"""

from datetime import date

from calorie_ledger.domain.settings import ActivityLevel, DaySettings, Gender
from calorie_ledger.numbers import round_half_up

ACTIVITY_FACTORS: dict[ActivityLevel, float] = {
    ActivityLevel.SEDENTARY: 1.2,
    ActivityLevel.LIGHT: 1.375,
    ActivityLevel.MODERATE: 1.55,
    ActivityLevel.ACTIVE: 1.725,
    ActivityLevel.EXTRA: 1.9,
}


def bmr(
    weight_kg: float | None,
    height_cm: float | None,
    age_years: int | None,
    gender: Gender | str | None,
) -> int:
    """Return the Mifflin-St Jeor BMR, or 0 when an input is missing."""
    if not weight_kg or not height_cm or not age_years or not gender:
        return 0
    value = 10 * weight_kg + 6.25 * height_cm - 5 * age_years
    value += 5 if str(gender).lower() == Gender.MALE else -161
    return round_half_up(value)


def tdee(bmr_value: int, activity_level: ActivityLevel | str | None) -> int:
    """Scale a BMR by the activity factor, defaulting to sedentary."""
    try:
        level = ActivityLevel(activity_level) if activity_level else None
    except ValueError:
        level = None
    factor = ACTIVITY_FACTORS.get(level, ACTIVITY_FACTORS[ActivityLevel.SEDENTARY])
    return round_half_up(bmr_value * factor)


def age(dob: date | None, today: date | None = None) -> int:
    """Return whole calendar years elapsed since ``dob``."""
    if dob is None:
        return 0
    today = today or date.today()
    years = today.year - dob.year
    if (today.month, today.day) < (dob.month, dob.day):
        years -= 1
    return max(years, 0)


def profile_complete(settings: DaySettings) -> bool:
    """Return True when every input of the RMR estimate is present."""
    return bool(
        settings.weight
        and settings.height
        and settings.gender
        and settings.dob
        and settings.activity_level
    )


def estimate_rmr(settings: DaySettings, today: date | None = None) -> int | None:
    """Return the activity-adjusted RMR for a complete profile, else None."""
    if not profile_complete(settings):
        return None
    base = bmr(
        settings.weight,
        settings.height,
        age(settings.dob, today),
        settings.gender,
    )
    if base == 0:
        return None
    return tdee(base, settings.activity_level)
