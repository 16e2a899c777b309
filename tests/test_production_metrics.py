"""Unit tests for flock performance arithmetic."""

from datetime import date

import pytest

from poultry_api.utils.production import (
    calculate_bird_age,
    calculate_expected_harvest_date,
    calculate_fcr,
    calculate_feed_efficiency,
    calculate_hen_day_production,
    calculate_survival_rate,
    calculate_weight_gain_kg,
    days_in_production,
    mortality_count,
)


@pytest.mark.unit
class TestHarvestDates:
    def test_broiler_growth_period(self):
        assert calculate_expected_harvest_date(date(2026, 1, 1), "broiler") == date(2026, 2, 5)

    def test_layer_growth_period(self):
        assert calculate_expected_harvest_date(date(2026, 1, 1), "layer") == date(2026, 5, 1)

    def test_placement_age_shortens_growth(self):
        assert calculate_expected_harvest_date(date(2026, 1, 1), "broiler", 5) == date(2026, 1, 31)

    def test_unknown_bird_type(self):
        assert calculate_expected_harvest_date(date(2026, 1, 1), "duck") is None

    def test_bird_age(self):
        assert calculate_bird_age(date(2026, 9, 1), today=date(2026, 9, 15)) == 14

    def test_days_in_production_uses_harvest_date(self):
        assert days_in_production(date(2026, 9, 1), date(2026, 10, 6)) == 35
        assert days_in_production(date(2026, 9, 1), today=date(2026, 9, 11)) == 10


@pytest.mark.unit
class TestFlockRatios:
    def test_fcr(self):
        gain = calculate_weight_gain_kg(100.0, 2100.0, 800)

        assert gain == 1600.0
        assert calculate_fcr(2400.0, gain) == 1.5

    def test_fcr_without_weights(self):
        assert calculate_weight_gain_kg(None, 2100.0, 800) is None
        assert calculate_fcr(2400.0, None) is None
        assert calculate_fcr(2400.0, 0) is None

    def test_feed_efficiency(self):
        assert calculate_feed_efficiency(1.5) == 66.67
        assert calculate_feed_efficiency(None) is None

    def test_survival_and_mortality(self):
        assert calculate_survival_rate(900, 800) == 88.89
        assert calculate_survival_rate(0, 0) == 0.0
        assert mortality_count(900, 800) == 100

    def test_hen_day_production(self):
        assert calculate_hen_day_production(425, 500) == 85.0
        assert calculate_hen_day_production(10, 0) == 0.0
