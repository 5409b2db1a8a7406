"""
Lifecycle status transition table for vehicles.

Once a vehicle is sold or delivered, a partial update can only move it to
another sold/delivered status. A request to go anywhere else is not an error:
the requested status is dropped, the rest of the update proceeds, and the
outcome is reported as ``REGRESSION_IGNORED`` so the caller can warn the user.
Leaving the sold/delivered set requires the explicit reversal event.
"""
from dataclasses import dataclass

from dealership_ops.common.exceptions import InvalidStateError
from dealership_ops.inventory.models import (
    AFGELEVERD, IN_TRANSIT, LEENAUTO, SOLD_OR_DELIVERED, VERKOCHT_B2B, VERKOCHT_B2C, VOORRAAD,
)

UNCHANGED = 'unchanged'
ACCEPTED = 'accepted'
REGRESSION_IGNORED = 'regression_ignored'

ALL_STATUSES = frozenset({VOORRAAD, IN_TRANSIT, VERKOCHT_B2B, VERKOCHT_B2C, AFGELEVERD, LEENAUTO})

# current status -> statuses a partial update may move to
ALLOWED_UPDATES = {
    status: (SOLD_OR_DELIVERED if status in SOLD_OR_DELIVERED else ALL_STATUSES)
    for status in ALL_STATUSES
}

# current status -> statuses reachable only through an explicit reversal
REVERSIBLE_TARGETS = frozenset({VOORRAAD, VERKOCHT_B2B, VERKOCHT_B2C})
ALLOWED_REVERSALS = {
    status: REVERSIBLE_TARGETS - {status}
    for status in SOLD_OR_DELIVERED
}


@dataclass(frozen=True)
class Transition:
    status: str
    outcome: str

    @property
    def regression_ignored(self):
        return self.outcome == REGRESSION_IGNORED


def decide_transition(current, requested):
    if requested is None or requested == current:
        return Transition(current, UNCHANGED)
    if requested in ALLOWED_UPDATES.get(current, ALL_STATUSES):
        return Transition(requested, ACCEPTED)
    return Transition(current, REGRESSION_IGNORED)


def resolve_status(current, requested):
    """Admissible next status for a partial update."""
    return decide_transition(current, requested).status


def revert_transition(current, target):
    """
    Explicitly move a sold or delivered vehicle back.

    Raises InvalidStateError when the vehicle is not sold/delivered or the
    target is not a reversal destination.
    """
    if target not in ALLOWED_REVERSALS.get(current, frozenset()):
        raise InvalidStateError(f"Cannot revert vehicle status from '{current}' to '{target}'.")
    return Transition(target, ACCEPTED)
