import logging
from dataclasses import dataclass, field

from django.db import transaction
from django.utils import timezone

from dealership_ops.common.exceptions import ConflictError, NotFoundError
from dealership_ops.inventory.models import VOORRAAD, Vehicle
from .details import build_details, merge_details
from .reconciler import reconcile
from .transitions import decide_transition, revert_transition

logger = logging.getLogger(__name__)

STATUS_REGRESSION_IGNORED = "status_regression_ignored"

# Columns copied from a patch as-is; everything else is derived.
DIRECT_FIELDS = (
    "brand", "model", "year", "color", "license_number", "vin", "mileage",
    "import_status", "customer", "supplier", "transporter", "purchaser", "salesperson",
)


@dataclass
class VehicleUpdateResult:
    vehicle: Vehicle
    warnings: list = field(default_factory=list)


class VehicleService:

    @staticmethod
    @transaction.atomic
    def create_vehicle(intake) -> Vehicle:
        """
        Create a vehicle from validated intake data.

        Details are filled from the defaults, the status defaults to
        ``voorraad`` and lifecycle timestamps are only set when the intake
        itself marks the vehicle sold, delivered or purchased.
        """
        now = timezone.now()
        base = Vehicle(lifecycle_status=VOORRAAD, details={})
        status = intake.get("lifecycle_status") or VOORRAAD
        details = build_details(intake.get("details"))

        values = {name: intake[name] for name in DIRECT_FIELDS if name in intake}
        values.update(reconcile(base, status, details, intake, now))
        values["lifecycle_status"] = status

        vehicle = Vehicle.objects.create(**values)
        logger.info(f"Vehicle {vehicle.pk} created with status {vehicle.lifecycle_status}")
        return vehicle

    @staticmethod
    def update_vehicle(vehicle_id, patch, expected_version=None) -> VehicleUpdateResult:
        """
        Apply a partial update and return the persisted, reconciled vehicle.

        Read, merge, status resolution, reconciliation and write happen in one
        transaction with the row locked. The write is additionally guarded by
        the version column so a concurrent writer surfaces as ConflictError.
        """
        warnings = []
        with transaction.atomic():
            vehicle = VehicleService._lock(vehicle_id, expected_version)

            merged = merge_details(vehicle.details, patch.get("details"))
            transition = decide_transition(vehicle.lifecycle_status, patch.get("lifecycle_status"))
            if transition.regression_ignored:
                logger.warning(
                    f"Vehicle {vehicle_id}: ignored status change "
                    f"{vehicle.lifecycle_status} -> {patch.get('lifecycle_status')}"
                )
                warnings.append(STATUS_REGRESSION_IGNORED)

            now = timezone.now()
            values = {name: patch[name] for name in DIRECT_FIELDS if name in patch}
            values.update(reconcile(vehicle, transition.status, merged, patch, now))
            values["lifecycle_status"] = transition.status

            VehicleService._write(vehicle, values, now)

        vehicle.refresh_from_db()
        logger.info(f"Vehicle {vehicle.pk} updated to version {vehicle.version} ({vehicle.lifecycle_status})")
        return VehicleUpdateResult(vehicle=vehicle, warnings=warnings)

    @staticmethod
    def revert_status(vehicle_id, status, expected_version=None) -> Vehicle:
        """Explicitly move a sold or delivered vehicle back to ``status``."""
        with transaction.atomic():
            vehicle = VehicleService._lock(vehicle_id, expected_version)
            transition = revert_transition(vehicle.lifecycle_status, status)
            VehicleService._write(vehicle, {"lifecycle_status": transition.status}, timezone.now())

        logger.info(f"Vehicle {vehicle_id} reverted to {status}")
        vehicle.refresh_from_db()
        return vehicle

    @staticmethod
    def _lock(vehicle_id, expected_version):
        try:
            vehicle = Vehicle.objects.select_for_update().get(pk=vehicle_id)
        except Vehicle.DoesNotExist:
            logger.error(f"Vehicle {vehicle_id} not found")
            raise NotFoundError(f"Vehicle {vehicle_id} not found.")

        if expected_version is not None and vehicle.version != expected_version:
            logger.warning(
                f"Vehicle {vehicle_id}: stale version {expected_version}, current is {vehicle.version}"
            )
            raise ConflictError()
        return vehicle

    @staticmethod
    def _write(vehicle, values, now):
        values["version"] = vehicle.version + 1
        values["updated_at"] = now
        updated = (
            Vehicle.objects
            .filter(pk=vehicle.pk, version=vehicle.version)
            .update(**values)
        )
        if updated != 1:
            logger.warning(f"Vehicle {vehicle.pk}: concurrent write detected")
            raise ConflictError()
