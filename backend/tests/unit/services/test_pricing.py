from dataclasses import replace
from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from courtbook.services.pricing import compute_charge
from tests._utils.helpers import local


def test_one_hour_in_the_day_is_the_day_rate(rates):
    assert compute_charge(local(10), local(11), rates) == Decimal("350.00")


def test_one_hour_in_the_evening_is_the_evening_rate(rates):
    assert compute_charge(local(19), local(20), rates) == Decimal("400.00")


def test_booking_across_the_switch_is_blended(rates):
    assert compute_charge(local(17, 30), local(18, 30), rates) == Decimal("375.00")


def test_rate_follows_local_time_not_utc(rates):
    # 18:00 local is 00:00 UTC the next day
    assert rates.rate_at(local(18)) == Decimal("400")
    assert rates.rate_at(local(17, 59)) == Decimal("350")


def test_cent_rounding_is_half_up(rates):
    # 20 minutes at 350/h = 116.666...
    assert compute_charge(local(10), local(10, 20), rates) == Decimal("116.67")


def test_unit_rounding(rates):
    unit_rates = replace(rates, rounding="unit")
    assert compute_charge(local(10), local(10, 15), unit_rates) == Decimal("88")
    assert compute_charge(local(10), local(10, 20), unit_rates) == Decimal("117")


def test_partial_minutes_are_charged_proportionally(rates):
    start = local(10)
    end = start + timedelta(seconds=90)
    # 1.5 minutes at 350/h = 8.75
    assert compute_charge(start, end, rates) == Decimal("8.75")


def test_empty_or_inverted_range_is_rejected(rates):
    with pytest.raises(ValueError):
        compute_charge(local(11), local(11), rates)
    with pytest.raises(ValueError):
        compute_charge(local(11), local(10), rates)


def test_instants_in_other_offsets_are_priced_in_facility_time(rates):
    start = datetime.fromisoformat("2026-10-21T00:00:00+00:00")  # 18:00 local
    assert compute_charge(start, start + timedelta(hours=1), rates) == Decimal("400.00")
