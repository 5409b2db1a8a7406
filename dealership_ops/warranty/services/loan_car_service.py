import logging

from django.db import transaction
from django.utils import timezone

from dealership_ops.common.exceptions import ConflictError, NotFoundError
from dealership_ops.inventory.models import LEENAUTO
from dealership_ops.inventory.services.vehicle_service import VehicleService
from ..models import AVAILABLE, ON_LOAN, OPEN_CLAIM_STATUSES, LoanCar, WarrantyClaim

logger = logging.getLogger(__name__)

VEHICLE_FIELDS = ("brand", "model", "license_number")


class LoanCarService:
    """Fleet management for loan cars. Assignment to claims lives in ClaimService."""

    @staticmethod
    @transaction.atomic
    def create_loan_car(brand, model, license_number, notes="") -> LoanCar:
        vehicle = VehicleService.create_vehicle({
            "brand": brand,
            "model": model,
            "license_number": license_number,
            "lifecycle_status": LEENAUTO,
        })
        loan_car = LoanCar.objects.create(vehicle=vehicle, notes=notes)
        logger.info(f"Loan car {loan_car.pk} created for vehicle {vehicle.pk}")
        return loan_car

    @staticmethod
    @transaction.atomic
    def update_loan_car(loan_car_id, data) -> LoanCar:
        loan_car = LoanCarService._lock(loan_car_id)

        patch = {name: data[name] for name in VEHICLE_FIELDS if name in data}
        if patch:
            VehicleService.update_vehicle(loan_car.vehicle_id, patch)
        if "notes" in data:
            loan_car.notes = data["notes"]
            loan_car.save(update_fields=["notes", "updated_at"])

        logger.info(f"Loan car {loan_car.pk} updated")
        return LoanCar.objects.select_related("vehicle").get(pk=loan_car.pk)

    @staticmethod
    @transaction.atomic
    def toggle_availability(loan_car_id) -> LoanCar:
        """
        Flip a loan car between available and on loan outside of any claim.

        Refused while an open claim holds the car; those cars are released by
        resolving, voiding or reassigning the claim.
        """
        loan_car = LoanCarService._lock(loan_car_id)
        if LoanCarService._held_by_open_claim(loan_car):
            logger.warning(f"Loan car {loan_car.pk} is held by an open claim, toggle refused")
            raise ConflictError(f"Loan car {loan_car.pk} is assigned to an open warranty claim.")

        if loan_car.status == ON_LOAN:
            loan_car.status = AVAILABLE
            loan_car.customer = None
            loan_car.start_date = None
            loan_car.end_date = None
        else:
            loan_car.status = ON_LOAN
            loan_car.start_date = timezone.now()
        loan_car.save(update_fields=["status", "customer", "start_date", "end_date", "updated_at"])

        logger.info(f"Loan car {loan_car.pk} is now {loan_car.status}")
        return loan_car

    @staticmethod
    @transaction.atomic
    def delete_loan_car(loan_car_id):
        """Remove a car from the loan fleet. The underlying vehicle record is kept."""
        loan_car = LoanCarService._lock(loan_car_id)
        if loan_car.status == ON_LOAN or LoanCarService._held_by_open_claim(loan_car):
            logger.warning(f"Loan car {loan_car.pk} is on loan and cannot be deleted")
            raise ConflictError(f"Loan car {loan_car.pk} is on loan and cannot be deleted.")

        loan_car.delete()
        logger.info(f"Loan car {loan_car_id} deleted")

    @staticmethod
    def _held_by_open_claim(loan_car):
        return WarrantyClaim.objects.filter(
            loan_car=loan_car, loan_car_assigned=True, status__in=OPEN_CLAIM_STATUSES,
        ).exists()

    @staticmethod
    def _lock(loan_car_id) -> LoanCar:
        try:
            return LoanCar.objects.select_for_update().get(pk=loan_car_id)
        except LoanCar.DoesNotExist:
            logger.error(f"Loan car {loan_car_id} not found")
            raise NotFoundError(f"Loan car {loan_car_id} not found.")
