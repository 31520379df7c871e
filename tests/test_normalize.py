import re
import time
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from qiwi_bill_payments.utils.normalize import (
    generate_id,
    get_lifetime_by_day,
    normalize_amount,
    normalize_date,
)

UUID4_RE = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$")
W3C_RE = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}[+-]\d{2}:\d{2}$")


@pytest.mark.parametrize(
    "amount, expected",
    [
        (0.005, "0.00"),
        (1.005, "1.00"),
        (200.345, "200.34"),
        (200.346, "200.35"),
        (3, "3.00"),
        ("42.1", "42.10"),
        (" 7 ", "7.00"),
        (Decimal("10.255"), "10.25"),
        (-1.005, "-1.00"),
        (-0.001, "0.00"),
        (1234567.891, "1234567.89"),
    ],
)
def test_normalize_amount(amount, expected):
    assert normalize_amount(amount) == expected


@pytest.mark.parametrize("amount", [None, "", "abc", "1,5", object(), float("nan"), float("inf"), [1]])
def test_normalize_amount_garbage_is_zero(amount):
    assert normalize_amount(amount) == "0.00"


def test_normalize_amount_default():
    assert normalize_amount() == "0.00"


def test_normalize_amount_huge_value_does_not_raise():
    assert normalize_amount(1e300).endswith(".00")


def test_normalize_date_with_offset():
    date = datetime(2019, 12, 31, 23, 59, 59, 123456, tzinfo=timezone(timedelta(hours=3)))
    assert normalize_date(date) == "2019-12-31T23:59:59+03:00"


def test_normalize_date_utc_has_numeric_offset():
    date = datetime(2020, 1, 1, 0, 0, 0, tzinfo=timezone.utc)
    assert normalize_date(date) == "2020-01-01T00:00:00+00:00"


def test_normalize_date_negative_offset():
    date = datetime(2020, 6, 1, 8, 30, 0, tzinfo=timezone(timedelta(hours=-5, minutes=-30)))
    assert normalize_date(date) == "2020-06-01T08:30:00-05:30"


def test_normalize_date_naive_is_local():
    value = normalize_date(datetime(2021, 3, 4, 5, 6, 7))
    assert W3C_RE.match(value)
    assert value.startswith("2021-03-04T05:06:07")


def test_normalize_date_is_deterministic():
    date = datetime(2019, 12, 31, 23, 59, 59, tzinfo=timezone.utc)
    assert normalize_date(date) == normalize_date(date)


def test_get_lifetime_by_day_default():
    before = datetime.now().astimezone()
    lifetime = datetime.fromisoformat(get_lifetime_by_day())
    assert lifetime >= before + timedelta(days=45) - timedelta(seconds=1)
    assert lifetime <= datetime.now().astimezone() + timedelta(days=45)


@pytest.mark.parametrize("days", [0, -5])
def test_get_lifetime_by_day_floor(days):
    before = datetime.now().astimezone()
    value = get_lifetime_by_day(days)
    assert W3C_RE.match(value)
    lifetime = datetime.fromisoformat(value)
    assert lifetime >= before + timedelta(days=1) - timedelta(seconds=1)
    assert lifetime > datetime.now().astimezone()


def test_get_lifetime_by_day_format():
    assert W3C_RE.match(get_lifetime_by_day(3))
    assert not get_lifetime_by_day(3).endswith("Z")


def test_generate_id_is_uuid4():
    for _ in range(50):
        assert UUID4_RE.match(generate_id())


def test_generate_id_is_unique():
    assert generate_id() != generate_id()


@pytest.fixture
def berlin_time(monkeypatch):
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset is not available")
    monkeypatch.setenv("TZ", "Europe/Berlin")
    time.tzset()
    yield
    monkeypatch.undo()
    time.tzset()


@pytest.mark.parametrize("days", [1, 60, 120, 200])
def test_get_lifetime_by_day_uses_offset_of_target_date(berlin_time, days):
    lifetime = datetime.fromisoformat(get_lifetime_by_day(days))
    target = datetime.now() + timedelta(days=days)
    assert lifetime.utcoffset() == target.astimezone().utcoffset()
    assert lifetime.replace(tzinfo=None) <= target
    assert lifetime.replace(tzinfo=None) >= target - timedelta(seconds=2)
