from decimal import Decimal

import pytest
from django.db import IntegrityError, transaction

from dealership_ops.common.exceptions import (AlreadyOnLoanError, InvalidInputError, InvalidStateError,
                                              NotFoundError)
from dealership_ops.warranty.models import LoanCar, WarrantyClaim
from dealership_ops.warranty.services.claim_service import ClaimService

pytestmark = pytest.mark.django_db


def _reload(obj):
    obj.refresh_from_db()
    return obj


def test_assign_puts_car_on_loan(make_claim, make_loan_car, customer, make_vehicle):
    vehicle = make_vehicle(customer=customer)
    claim = make_claim(vehicle=vehicle)
    loan_car = make_loan_car()

    ClaimService.assign_loan_car(claim.pk, loan_car.pk)

    loan_car = _reload(loan_car)
    claim = _reload(claim)
    assert loan_car.status == "on_loan"
    assert loan_car.customer == customer
    assert loan_car.start_date is not None
    assert claim.loan_car == loan_car
    assert claim.loan_car_assigned is True


def test_car_on_loan_cannot_be_assigned_twice(make_claim, make_loan_car):
    loan_car = make_loan_car()
    first = make_claim()
    second = make_claim(manual_license_number="YY-888-Y")
    ClaimService.assign_loan_car(first.pk, loan_car.pk)

    with pytest.raises(AlreadyOnLoanError):
        ClaimService.assign_loan_car(second.pk, loan_car.pk)

    assert _reload(second).loan_car is None
    assert WarrantyClaim.objects.filter(loan_car=loan_car, loan_car_assigned=True).count() == 1


def test_assigning_same_car_again_is_a_noop(make_claim, make_loan_car):
    loan_car = make_loan_car()
    claim = make_claim()
    ClaimService.assign_loan_car(claim.pk, loan_car.pk)

    ClaimService.assign_loan_car(claim.pk, loan_car.pk)

    assert _reload(loan_car).status == "on_loan"
    assert _reload(claim).loan_car_id == loan_car.pk


def test_claim_holding_a_car_cannot_take_another(make_claim, make_loan_car):
    claim = make_claim()
    ClaimService.assign_loan_car(claim.pk, make_loan_car("LN-001-X").pk)
    other = make_loan_car("LN-002-X")

    with pytest.raises(InvalidStateError):
        ClaimService.assign_loan_car(claim.pk, other.pk)
    assert _reload(other).status == "available"


def test_assign_to_closed_claim(make_claim, make_loan_car):
    claim = make_claim()
    ClaimService.void_claim(claim.pk)

    with pytest.raises(InvalidStateError):
        ClaimService.assign_loan_car(claim.pk, make_loan_car().pk)


def test_assign_unknown_car(make_claim):
    with pytest.raises(NotFoundError):
        ClaimService.assign_loan_car(make_claim().pk, 999999)


def test_reassign_swaps_cars(make_claim, make_loan_car):
    old = make_loan_car("LN-001-X")
    new = make_loan_car("LN-002-X")
    claim = make_claim()
    ClaimService.assign_loan_car(claim.pk, old.pk)

    ClaimService.reassign_loan_car(claim.pk, new.pk)

    old = _reload(old)
    assert old.status == "available"
    assert old.customer is None
    assert old.start_date is None
    assert _reload(new).status == "on_loan"
    assert _reload(claim).loan_car_id == new.pk


def test_reassign_to_none_releases(make_claim, make_loan_car):
    loan_car = make_loan_car()
    claim = make_claim()
    ClaimService.assign_loan_car(claim.pk, loan_car.pk)

    ClaimService.reassign_loan_car(claim.pk, None)

    claim = _reload(claim)
    assert _reload(loan_car).status == "available"
    assert claim.loan_car is None
    assert claim.loan_car_assigned is False


def test_failed_reassign_keeps_release(make_claim, make_loan_car):
    old = make_loan_car("LN-001-X")
    busy = make_loan_car("LN-002-X")
    claim = make_claim()
    other_claim = make_claim(manual_license_number="YY-888-Y")
    ClaimService.assign_loan_car(claim.pk, old.pk)
    ClaimService.assign_loan_car(other_claim.pk, busy.pk)

    with pytest.raises(AlreadyOnLoanError):
        ClaimService.reassign_loan_car(claim.pk, busy.pk)

    claim = _reload(claim)
    assert _reload(old).status == "available"
    assert claim.loan_car is None
    assert claim.loan_car_assigned is False
    assert _reload(other_claim).loan_car_id == busy.pk


def test_resolve_releases_car_and_keeps_history(make_claim, make_loan_car):
    loan_car = make_loan_car()
    claim = make_claim(estimated_cost=Decimal("450.00"))
    ClaimService.assign_loan_car(claim.pk, loan_car.pk)

    ClaimService.resolve_claim(claim.pk, "Compressor vervangen", Decimal("512.40"), customer_satisfaction=4)

    claim = _reload(claim)
    assert claim.status == "resolved"
    assert claim.actual_cost == Decimal("512.40")
    assert claim.resolution_date is not None
    assert claim.customer_satisfaction == 4
    assert claim.loan_car_id == loan_car.pk
    assert claim.loan_car_assigned is True
    assert _reload(loan_car).status == "available"


def test_resolved_car_can_go_to_next_claim(make_claim, make_loan_car):
    loan_car = make_loan_car()
    first = make_claim()
    ClaimService.assign_loan_car(first.pk, loan_car.pk)
    ClaimService.resolve_claim(first.pk, "Opgelost", Decimal("0"))

    second = make_claim(manual_license_number="YY-888-Y")
    ClaimService.assign_loan_car(second.pk, loan_car.pk)

    assert _reload(loan_car).status == "on_loan"
    assert _reload(second).loan_car_id == loan_car.pk


@pytest.mark.parametrize("close", ["resolve", "void"])
def test_closed_claims_cannot_be_closed_again(make_claim, close):
    claim = make_claim()
    if close == "resolve":
        ClaimService.resolve_claim(claim.pk, "Klaar", Decimal("10"))
    else:
        ClaimService.void_claim(claim.pk)

    with pytest.raises(InvalidStateError):
        ClaimService.resolve_claim(claim.pk, "Nog eens", Decimal("5"))
    with pytest.raises(InvalidStateError):
        ClaimService.void_claim(claim.pk)


def test_resolve_rejects_bad_input(make_claim):
    claim = make_claim()

    with pytest.raises(InvalidInputError):
        ClaimService.resolve_claim(claim.pk, "Klaar", Decimal("-1"))
    with pytest.raises(InvalidInputError):
        ClaimService.resolve_claim(claim.pk, "Klaar", Decimal("1"), customer_satisfaction=6)
    assert _reload(claim).status == "pending"


def test_void_releases_car_without_cost(make_claim, make_loan_car):
    loan_car = make_loan_car()
    claim = make_claim()
    ClaimService.assign_loan_car(claim.pk, loan_car.pk)

    ClaimService.void_claim(claim.pk)

    claim = _reload(claim)
    assert claim.status == "void"
    assert claim.actual_cost is None
    assert claim.loan_car_id == loan_car.pk
    assert _reload(loan_car).status == "available"


def test_delete_releases_car(make_claim, make_loan_car):
    loan_car = make_loan_car()
    claim = make_claim()
    ClaimService.assign_loan_car(claim.pk, loan_car.pk)

    ClaimService.delete_claim(claim.pk)

    assert not WarrantyClaim.objects.filter(pk=claim.pk).exists()
    assert _reload(loan_car).status == "available"


def test_delete_closed_claim_leaves_car_alone(make_claim, make_loan_car):
    loan_car = make_loan_car()
    first = make_claim()
    ClaimService.assign_loan_car(first.pk, loan_car.pk)
    ClaimService.void_claim(first.pk)
    second = make_claim(manual_license_number="YY-888-Y")
    ClaimService.assign_loan_car(second.pk, loan_car.pk)

    ClaimService.delete_claim(first.pk)

    assert _reload(loan_car).status == "on_loan"
    assert _reload(second).loan_car_id == loan_car.pk


def test_delete_unknown_claim():
    with pytest.raises(NotFoundError):
        ClaimService.delete_claim(999999)


def test_create_claim_needs_vehicle_or_license():
    with pytest.raises(InvalidInputError):
        ClaimService.create_claim({"description": "Rammelt"})

    claim = ClaimService.create_claim({"description": "Rammelt", "manual_license_number": "KL-77-MN"})
    assert claim.status == "pending"


def test_update_claim_status_rules(make_claim):
    claim = make_claim()

    ClaimService.update_claim(claim.pk, {"status": "in_progress", "priority": "hoog"})
    assert _reload(claim).status == "in_progress"

    with pytest.raises(InvalidStateError):
        ClaimService.update_claim(claim.pk, {"status": "pending"})


def test_closed_claim_cannot_be_edited(make_claim):
    claim = make_claim()
    ClaimService.void_claim(claim.pk)

    with pytest.raises(InvalidStateError):
        ClaimService.update_claim(claim.pk, {"description": "Toch iets anders"})


def test_actual_cost_requires_resolved_status(make_claim):
    with pytest.raises(IntegrityError), transaction.atomic():
        make_claim(actual_cost=Decimal("10.00"))


def test_one_open_claim_per_loan_car(make_claim, make_loan_car):
    loan_car = make_loan_car()
    make_claim(loan_car=loan_car, loan_car_assigned=True)

    with pytest.raises(IntegrityError), transaction.atomic():
        make_claim(loan_car=loan_car, loan_car_assigned=True, manual_license_number="YY-888-Y")
    assert LoanCar.objects.count() == 1


@pytest.mark.django_db(transaction=True)
def test_failed_reassign_release_is_committed(make_claim, make_loan_car):
    old = make_loan_car("LN-001-X")
    busy = make_loan_car("LN-002-X")
    claim = make_claim()
    ClaimService.assign_loan_car(claim.pk, old.pk)
    ClaimService.assign_loan_car(make_claim(manual_license_number="YY-888-Y").pk, busy.pk)

    with pytest.raises(AlreadyOnLoanError):
        ClaimService.reassign_loan_car(claim.pk, busy.pk)

    assert LoanCar.objects.get(pk=old.pk).status == "available"
    assert WarrantyClaim.objects.get(pk=claim.pk).loan_car_assigned is False
