"""Tests for the percentage-of-shift tolerance rules."""

import pytest

from app.core.exceptions import InvalidShiftConfiguration
from app.services.tolerance import (compute_tolerance, evaluate_checkin,
                                    evaluate_checkout, shift_window)

NINE = 9 * 60
SIX_PM = 18 * 60

SHIFTS = [(540, 1080), (600, 1140), (360, 840), (0, 1439), (480, 490), (720, 721)]


def test_tolerance_is_five_percent_of_shift():
    assert compute_tolerance(NINE, SIX_PM) == 27  # 540 min shift


@pytest.mark.parametrize("length,expected", [(30, 2), (50, 3), (10, 1), (9, 0), (1, 0)])
def test_tolerance_rounds_half_up(length, expected):
    assert compute_tolerance(600, 600 + length) == expected


@pytest.mark.parametrize("start,end", SHIFTS)
def test_checkin_boundaries(start, end):
    """On time at start and at start+tolerance, late one minute after."""
    tol = compute_tolerance(start, end)
    assert not evaluate_checkin(start, start, end).is_late
    assert not evaluate_checkin(start + tol, start, end).is_late
    assert evaluate_checkin(start + tol + 1, start, end).is_late


@pytest.mark.parametrize("start,end", SHIFTS)
def test_early_checkin_is_never_late(start, end):
    for actual in range(0, start, 7):
        verdict = evaluate_checkin(actual, start, end)
        assert verdict.is_late is False
        assert verdict.is_early is True


def test_checkin_within_grace_is_neither_late_nor_early():
    verdict = evaluate_checkin(NINE + 20, NINE, SIX_PM)
    assert (verdict.is_late, verdict.is_early) == (False, False)
    assert verdict.allowed_late_boundary == NINE + 27


def test_checkin_after_grace_is_late():
    assert evaluate_checkin(NINE + 28, NINE, SIX_PM).is_late


def test_checkout_window_is_symmetric_around_end():
    verdict = evaluate_checkout(SIX_PM, NINE, SIX_PM)
    assert verdict.allowed_window == (17 * 60 + 33, 18 * 60 + 27)
    assert verdict.is_within_tolerance


def test_checkout_before_window_is_early():
    verdict = evaluate_checkout(17 * 60 + 20, NINE, SIX_PM)
    assert verdict.is_early
    assert not verdict.is_within_tolerance


def test_checkout_at_window_start_is_not_early():
    assert not evaluate_checkout(17 * 60 + 33, NINE, SIX_PM).is_early


def test_late_checkout_is_reported_but_not_early():
    verdict = evaluate_checkout(20 * 60, NINE, SIX_PM)
    assert verdict.is_late
    assert not verdict.is_early


@pytest.mark.parametrize("start,end", [(600, 600), (1140, 600)])
def test_non_positive_shift_is_rejected(start, end):
    with pytest.raises(InvalidShiftConfiguration):
        evaluate_checkin(600, start, end)
    with pytest.raises(InvalidShiftConfiguration):
        evaluate_checkout(600, start, end)


def test_shift_window_rejects_inverted_configuration():
    with pytest.raises(InvalidShiftConfiguration):
        shift_window("19:00", "10:00")
    assert shift_window("10:00", "19:00") == (600, 1140)
