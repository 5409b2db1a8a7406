import pytest

from dealership_ops.common.exceptions import InvalidStateError
from dealership_ops.inventory.services.transitions import (
    ACCEPTED, ALL_STATUSES, REGRESSION_IGNORED, UNCHANGED, decide_transition, resolve_status,
    revert_transition,
)

SOLD_OR_DELIVERED = ["verkocht_b2b", "verkocht_b2c", "afgeleverd"]
OUTSIDE = ["voorraad", "in_transit", "leenauto"]


@pytest.mark.parametrize("current", SOLD_OR_DELIVERED)
@pytest.mark.parametrize("requested", OUTSIDE)
def test_sold_or_delivered_never_moves_back(current, requested):
    transition = decide_transition(current, requested)

    assert transition.status == current
    assert transition.outcome == REGRESSION_IGNORED
    assert transition.regression_ignored


@pytest.mark.parametrize("current", SOLD_OR_DELIVERED)
@pytest.mark.parametrize("requested", SOLD_OR_DELIVERED)
def test_moves_within_sold_or_delivered_are_allowed(current, requested):
    assert resolve_status(current, requested) == requested


@pytest.mark.parametrize("current", OUTSIDE)
def test_unsold_vehicle_accepts_any_status(current):
    for requested in ALL_STATUSES - {current}:
        assert decide_transition(current, requested).outcome == ACCEPTED


def test_missing_or_same_status_is_unchanged():
    assert decide_transition("afgeleverd", None).outcome == UNCHANGED
    assert decide_transition("voorraad", "voorraad").outcome == UNCHANGED
    assert resolve_status("verkocht_b2b", None) == "verkocht_b2b"


def test_revert_from_delivered_to_stock():
    assert revert_transition("afgeleverd", "voorraad").status == "voorraad"
    assert revert_transition("verkocht_b2c", "verkocht_b2b").status == "verkocht_b2b"


@pytest.mark.parametrize("current,target", [
    ("voorraad", "voorraad"),
    ("in_transit", "voorraad"),
    ("verkocht_b2b", "verkocht_b2b"),
    ("afgeleverd", "in_transit"),
    ("afgeleverd", "afgeleverd"),
])
def test_revert_rejects_anything_else(current, target):
    with pytest.raises(InvalidStateError):
        revert_transition(current, target)
