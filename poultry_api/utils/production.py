"""Flock performance arithmetic.

Pure functions over dates and counts.  Nothing here touches the database;
services feed in aggregates they have already queried and attach the
results to read responses.
"""

from datetime import date, timedelta

# Days from placement to expected harvest / point of lay
GROWTH_PERIOD_DAYS = {
    "broiler": 35,
    "layer": 120,
}


def _round2(value: float) -> float:
    return round(value, 2)


def calculate_bird_age(placement_date: date, today: date | None = None) -> int:
    """Whole days elapsed since placement."""
    today = today or date.today()
    return abs((today - placement_date).days)


def calculate_expected_harvest_date(
    placement_date: date,
    bird_type: str,
    placement_age_days: int = 0,
) -> date | None:
    growth_days = GROWTH_PERIOD_DAYS.get(bird_type)
    if growth_days is None:
        return None
    return placement_date + timedelta(days=growth_days - placement_age_days)


def days_in_production(
    placement_date: date,
    actual_harvest_date: date | None = None,
    today: date | None = None,
) -> int:
    end = actual_harvest_date or today or date.today()
    return (end - placement_date).days


def mortality_count(initial_count: int, current_count: int) -> int:
    return initial_count - current_count


def calculate_fcr(total_feed_kg: float, weight_gain_kg: float) -> float | None:
    """Feed conversion ratio: kg of feed per kg of live weight gained.

    Returns None when no weight gain is known.
    """
    if not weight_gain_kg or weight_gain_kg <= 0:
        return None
    return _round2(total_feed_kg / weight_gain_kg)


def calculate_feed_efficiency(fcr: float | None) -> float | None:
    if not fcr:
        return None
    return _round2(1 / fcr * 100)


def calculate_weight_gain_kg(
    first_avg_weight_grams: float | None,
    last_avg_weight_grams: float | None,
    bird_count: int,
) -> float | None:
    """Flock-level weight gain between the first and last weighed records."""
    if first_avg_weight_grams is None or last_avg_weight_grams is None:
        return None
    return (last_avg_weight_grams - first_avg_weight_grams) * bird_count / 1000


def calculate_survival_rate(initial_count: int, current_count: int) -> float:
    if initial_count == 0:
        return 0.0
    return _round2(current_count / initial_count * 100)


def calculate_hen_day_production(eggs_produced: float, hen_count: int) -> float:
    """Eggs produced per hen per day, as a percentage."""
    if hen_count == 0:
        return 0.0
    return _round2(eggs_produced / hen_count * 100)
