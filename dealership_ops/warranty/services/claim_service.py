import logging

from django.db import transaction
from django.utils import timezone

from dealership_ops.common.exceptions import (AlreadyOnLoanError, ConflictError, InvalidInputError,
                                              InvalidStateError, NotFoundError)
from ..models import (AVAILABLE, IN_PROGRESS, ON_LOAN, OPEN_CLAIM_STATUSES, PENDING, RESOLVED, VOID, LoanCar,
                      WarrantyClaim)

logger = logging.getLogger(__name__)

# Fields a plain create/update may touch; lifecycle fields go through the actions below.
EDITABLE_FIELDS = (
    "vehicle", "manual_vehicle_brand", "manual_vehicle_model", "manual_license_number",
    "manual_customer_name", "manual_customer_phone", "description", "priority",
    "estimated_cost", "status",
)


class ClaimService:

    @staticmethod
    @transaction.atomic
    def create_claim(data) -> WarrantyClaim:
        values = {name: data[name] for name in EDITABLE_FIELDS if name in data}
        status = values.setdefault("status", PENDING)
        if status not in OPEN_CLAIM_STATUSES:
            raise InvalidInputError("status", "A new claim must be pending or in progress.")
        ClaimService._check_vehicle_reference(values.get("vehicle"), values.get("manual_license_number"))

        claim = WarrantyClaim.objects.create(**values)
        logger.info(f"Warranty claim {claim.pk} created ({claim.status})")
        return claim

    @staticmethod
    @transaction.atomic
    def update_claim(claim_id, data) -> WarrantyClaim:
        """
        Edit the descriptive fields of an open claim.

        The status may stay where it is or move from ``pending`` to
        ``in_progress``; resolving, voiding and loan-car changes have their
        own operations.
        """
        claim = ClaimService._lock_claim(claim_id)
        ClaimService._ensure_open(claim, "edited")

        values = {name: data[name] for name in EDITABLE_FIELDS if name in data}
        new_status = values.get("status", claim.status)
        if new_status != claim.status and not (claim.status == PENDING and new_status == IN_PROGRESS):
            logger.warning(f"Warranty claim {claim_id}: refused status change {claim.status} -> {new_status}")
            raise InvalidStateError(f"Cannot move a claim from {claim.status} to {new_status}.")

        for name, value in values.items():
            setattr(claim, name, value)
        ClaimService._check_vehicle_reference(claim.vehicle, claim.manual_license_number)
        claim.save()

        logger.info(f"Warranty claim {claim.pk} updated ({claim.status})")
        return claim

    @staticmethod
    @transaction.atomic
    def assign_loan_car(claim_id, loan_car_id) -> WarrantyClaim:
        """
        Hand a loan car to an open claim.

        Assigning the car the claim already holds is a no-op. A car that is
        on loan to anybody else is refused with AlreadyOnLoanError.
        """
        claim = ClaimService._lock_claim(claim_id)
        ClaimService._ensure_open(claim, "given a loan car")
        loan_car = ClaimService._lock_loan_car(loan_car_id)

        if claim.loan_car_assigned and claim.loan_car_id == loan_car.pk:
            return claim
        if claim.loan_car_assigned and claim.loan_car_id is not None:
            raise InvalidStateError(
                f"Warranty claim {claim.pk} already holds loan car {claim.loan_car_id}. Release it first."
            )

        held_elsewhere = (
            WarrantyClaim.objects
            .filter(loan_car=loan_car, loan_car_assigned=True, status__in=OPEN_CLAIM_STATUSES)
            .exclude(pk=claim.pk)
            .exists()
        )
        if loan_car.status == ON_LOAN or held_elsewhere:
            logger.warning(f"Loan car {loan_car.pk} is already on loan, refused for claim {claim.pk}")
            raise AlreadyOnLoanError(f"Loan car {loan_car.pk} is already on loan.")

        loan_car.status = ON_LOAN
        loan_car.customer = claim.vehicle.customer if claim.vehicle else None
        loan_car.start_date = timezone.now()
        loan_car.end_date = None
        loan_car.save(update_fields=["status", "customer", "start_date", "end_date", "updated_at"])

        claim.loan_car = loan_car
        claim.loan_car_assigned = True
        claim.save(update_fields=["loan_car", "loan_car_assigned", "updated_at"])

        logger.info(f"Loan car {loan_car.pk} assigned to warranty claim {claim.pk}")
        return claim

    @staticmethod
    def reassign_loan_car(claim_id, new_loan_car_id=None) -> WarrantyClaim:
        """
        Swap or release the loan car of a claim.

        Release and assignment run in one transaction with the claim locked
        throughout. The assignment runs in a savepoint: when it fails, only the
        savepoint is rolled back, the release still commits, the claim is left
        without a car and the error propagates.
        """
        failure = None
        with transaction.atomic():
            claim = ClaimService._lock_claim(claim_id)
            ClaimService._ensure_open(claim, "given a loan car")

            if claim.loan_car_assigned and claim.loan_car_id == new_loan_car_id:
                return claim
            if new_loan_car_id is not None and not LoanCar.objects.filter(pk=new_loan_car_id).exists():
                logger.error(f"Loan car {new_loan_car_id} not found")
                raise NotFoundError(f"Loan car {new_loan_car_id} not found.")

            if claim.loan_car_assigned and claim.loan_car_id is not None:
                ClaimService._release(ClaimService._lock_loan_car(claim.loan_car_id))
            claim.loan_car = None
            claim.loan_car_assigned = False
            claim.save(update_fields=["loan_car", "loan_car_assigned", "updated_at"])

            if new_loan_car_id is not None:
                try:
                    with transaction.atomic():
                        claim = ClaimService.assign_loan_car(claim_id, new_loan_car_id)
                except (ConflictError, NotFoundError) as exc:
                    logger.warning(f"Warranty claim {claim_id}: released its loan car, new assignment failed")
                    failure = exc

        if failure is not None:
            raise failure
        return claim

    @staticmethod
    @transaction.atomic
    def resolve_claim(claim_id, resolution_description, actual_cost, customer_satisfaction=None) -> WarrantyClaim:
        """
        Close a claim as resolved and give its loan car back to the fleet.

        ``loan_car`` and ``loan_car_assigned`` are kept as history.
        """
        if actual_cost is None or actual_cost < 0:
            raise InvalidInputError("actual_cost", "Actual cost must be zero or more.")
        if customer_satisfaction is not None and not 1 <= customer_satisfaction <= 5:
            raise InvalidInputError("customer_satisfaction", "Customer satisfaction must be between 1 and 5.")

        claim = ClaimService._lock_claim(claim_id)
        ClaimService._ensure_open(claim, "resolved")
        ClaimService._release_held_car(claim)

        claim.status = RESOLVED
        claim.actual_cost = actual_cost
        claim.resolution_date = timezone.now()
        claim.resolution_description = resolution_description
        claim.customer_satisfaction = customer_satisfaction
        claim.save()

        logger.info(f"Warranty claim {claim.pk} resolved, actual cost {actual_cost}")
        return claim

    @staticmethod
    @transaction.atomic
    def void_claim(claim_id) -> WarrantyClaim:
        claim = ClaimService._lock_claim(claim_id)
        ClaimService._ensure_open(claim, "voided")
        ClaimService._release_held_car(claim)

        claim.status = VOID
        claim.save(update_fields=["status", "updated_at"])

        logger.info(f"Warranty claim {claim.pk} voided")
        return claim

    @staticmethod
    @transaction.atomic
    def delete_claim(claim_id):
        claim = ClaimService._lock_claim(claim_id)
        ClaimService._release_held_car(claim)
        claim.delete()
        logger.info(f"Warranty claim {claim_id} deleted")

    @staticmethod
    def _check_vehicle_reference(vehicle, manual_license_number):
        if vehicle is None and not (manual_license_number or "").strip():
            raise InvalidInputError("vehicle", "Select a vehicle or enter a license number.")

    @staticmethod
    def _ensure_open(claim, action):
        if claim.is_closed:
            logger.warning(f"Warranty claim {claim.pk} is {claim.status} and cannot be {action}")
            raise InvalidStateError(f"A {claim.status} claim cannot be {action}.")

    @staticmethod
    def _lock_claim(claim_id) -> WarrantyClaim:
        try:
            return (
                WarrantyClaim.objects
                .select_for_update()
                .select_related("vehicle")
                .get(pk=claim_id)
            )
        except WarrantyClaim.DoesNotExist:
            logger.error(f"Warranty claim {claim_id} not found")
            raise NotFoundError(f"Warranty claim {claim_id} not found.")

    @staticmethod
    def _lock_loan_car(loan_car_id) -> LoanCar:
        try:
            return LoanCar.objects.select_for_update().get(pk=loan_car_id)
        except LoanCar.DoesNotExist:
            logger.error(f"Loan car {loan_car_id} not found")
            raise NotFoundError(f"Loan car {loan_car_id} not found.")

    @staticmethod
    def _release_held_car(claim):
        # only an open claim can still hold its car
        if claim.loan_car_assigned and claim.loan_car_id is not None and not claim.is_closed:
            ClaimService._release(ClaimService._lock_loan_car(claim.loan_car_id))

    @staticmethod
    def _release(loan_car):
        if loan_car.status == AVAILABLE:
            return
        loan_car.status = AVAILABLE
        loan_car.customer = None
        loan_car.start_date = None
        loan_car.end_date = None
        loan_car.save(update_fields=["status", "customer", "start_date", "end_date", "updated_at"])
        logger.info(f"Loan car {loan_car.pk} released")
