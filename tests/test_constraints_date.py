"""Date rules."""
from datetime import datetime, timedelta, timezone

import pytest

from declval.constraints import DateSchema, Strict, date
from declval.errors import ConstraintDefinitionError


def test_date_schema(check_constraint):
    check_constraint(
        DateSchema(),
        valid=[datetime(2024, 1, 15, 10, 30), "2024-01-15T10:30:00", "2024-01-15T10:30:00Z"],
        invalid=["not a date", "", None, [2024]],
    )


def test_strict_dates_reject_strings(check_constraint):
    check_constraint(DateSchema(), Strict(), valid=[datetime(2024, 1, 15)], invalid=["2024-01-15T10:30:00"])


def test_string_input_is_converted(validator, make_subject):
    subject = make_subject(DateSchema())
    instance = subject()
    instance.value = "2024-01-15T10:30:00"

    assert validator.validate(instance).unwrap() == {"value": datetime(2024, 1, 15, 10, 30)}


def test_min_and_max(check_constraint):
    check_constraint(
        DateSchema(), date.Min(datetime(2024, 1, 1)), date.Max("2024-12-31T00:00:00"),
        valid=[datetime(2024, 1, 1), datetime(2024, 6, 1), "2024-12-31T00:00:00"],
        invalid=[datetime(2023, 12, 31), datetime(2025, 1, 1)],
    )


def test_now_is_read_at_validation_time(check_constraint):
    past = datetime.now(timezone.utc) - timedelta(days=1)
    future = datetime.now(timezone.utc) + timedelta(days=1)
    check_constraint(DateSchema(), date.Max("now"), valid=[past], invalid=[future])


def test_iso_only(check_constraint):
    check_constraint(
        DateSchema(), date.Iso(),
        valid=["2024-01-15T10:30:00", datetime(2024, 1, 15)],
        invalid=[1700000000, "15/01/2024"],
    )


def test_timestamps(validator, make_subject):
    unix = make_subject(DateSchema(), date.Timestamp("unix"))
    javascript = make_subject(DateSchema(), date.Timestamp())

    instance = unix()
    instance.value = 60
    assert validator.validate(instance).unwrap() == {"value": datetime(1970, 1, 1, 0, 1, tzinfo=timezone.utc)}

    instance = javascript()
    instance.value = 60000
    assert validator.validate(instance).unwrap() == {"value": datetime(1970, 1, 1, 0, 1, tzinfo=timezone.utc)}

    instance.value = "soon"
    assert validator.validate(instance).unwrap_err().details[0].type == "date_timestamp"


def test_invalid_timestamp_unit(make_subject):
    with pytest.raises(ConstraintDefinitionError):
        make_subject(DateSchema(), date.Timestamp("minutes"))


def test_invalid_limit(make_subject):
    with pytest.raises(ConstraintDefinitionError):
        make_subject(DateSchema(), date.Min("someday"))


def test_limits_compare_timestamps_against_naive_bounds(validator, make_subject):
    subject = make_subject(DateSchema(), date.Timestamp("unix"), date.Min("2020-01-01"))
    instance = subject()

    instance.value = 1700000000
    assert validator.is_valid(instance)

    instance.value = 1500000000
    assert validator.validate(instance).unwrap_err().details[0].type == "date_min"


def test_aware_values_against_naive_bounds(check_constraint):
    check_constraint(
        DateSchema(), date.Min("2020-01-01"), date.Max(datetime(2024, 12, 31)),
        valid=[datetime(2023, 1, 1, tzinfo=timezone.utc), "2023-01-01T00:00:00+02:00"],
        invalid=[datetime(2019, 12, 31, tzinfo=timezone.utc), "2025-01-01T00:00:00Z"],
    )


def test_naive_values_against_aware_bounds(check_constraint):
    check_constraint(
        DateSchema(), date.Max("2024-01-01T00:00:00Z"),
        valid=[datetime(2023, 6, 1)], invalid=[datetime(2024, 6, 1)],
    )
