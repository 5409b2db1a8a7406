from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from dealership_ops.common.exceptions import ConflictError, InvalidStateError, NotFoundError
from dealership_ops.inventory.models import Vehicle
from dealership_ops.inventory.services.vehicle_service import STATUS_REGRESSION_IGNORED, VehicleService

pytestmark = pytest.mark.django_db


def test_create_fills_defaults(make_vehicle):
    vehicle = make_vehicle()

    assert vehicle.lifecycle_status == "voorraad"
    assert vehicle.location == "showroom"
    assert vehicle.version == 1
    assert vehicle.details["workshopStatus"] == "wachten"
    assert vehicle.sold_at is None
    assert vehicle.delivered_at is None
    assert vehicle.purchased_at is None


def test_create_as_delivered_sets_delivery(make_vehicle):
    vehicle = make_vehicle(lifecycle_status="afgeleverd")

    assert vehicle.delivered_at is not None
    assert vehicle.details["saleChannel"] == "b2c"


def test_create_with_purchaser_sets_purchased_at(make_vehicle, user):
    vehicle = make_vehicle(purchaser=user)

    assert vehicle.purchased_at is not None


def test_partial_update_keeps_other_fields(vehicle):
    VehicleService.update_vehicle(vehicle.pk, {"details": {"paintStatus": "hersteld"}, "selling_price": Decimal("18500")})
    result = VehicleService.update_vehicle(vehicle.pk, {"details": {"showroomOnline": True}})

    stored = Vehicle.objects.get(pk=vehicle.pk)
    assert result.warnings == []
    assert stored.details["paintStatus"] == "hersteld"
    assert stored.details["showroomOnline"] is True
    assert stored.selling_price == Decimal("18500")
    assert stored.license_number == "AB-123-C"


def test_update_increments_version(vehicle):
    first = VehicleService.update_vehicle(vehicle.pk, {"color": "zwart"}).vehicle
    second = VehicleService.update_vehicle(vehicle.pk, {"color": "wit"}).vehicle

    assert first.version == 2
    assert second.version == 3


def test_delivery_carries_sold_at_and_channel(vehicle):
    sold = VehicleService.update_vehicle(vehicle.pk, {"lifecycle_status": "verkocht_b2b"}).vehicle
    delivered = VehicleService.update_vehicle(vehicle.pk, {"lifecycle_status": "afgeleverd"}).vehicle

    assert delivered.lifecycle_status == "afgeleverd"
    assert delivered.sold_at == sold.sold_at
    assert delivered.delivered_at is not None
    assert delivered.details["saleChannel"] == "b2b"


def test_regression_is_ignored_with_warning(vehicle):
    VehicleService.update_vehicle(vehicle.pk, {"lifecycle_status": "verkocht_b2c"})
    result = VehicleService.update_vehicle(
        vehicle.pk, {"lifecycle_status": "voorraad", "details": {"paymentStatus": "volledig_betaald"}},
    )

    assert result.warnings == [STATUS_REGRESSION_IGNORED]
    assert result.vehicle.lifecycle_status == "verkocht_b2c"
    assert result.vehicle.details["paymentStatus"] == "volledig_betaald"


def test_repeated_delivery_is_idempotent(vehicle):
    first = VehicleService.update_vehicle(vehicle.pk, {"lifecycle_status": "afgeleverd"}).vehicle
    again = VehicleService.update_vehicle(vehicle.pk, {"lifecycle_status": "afgeleverd"}).vehicle

    assert again.delivered_at == first.delivered_at
    assert again.details["saleChannel"] == first.details["saleChannel"]


def test_transport_status_drives_location(vehicle):
    moving = VehicleService.update_vehicle(vehicle.pk, {"details": {"transportStatus": "in_transit"}}).vehicle
    arrived = VehicleService.update_vehicle(vehicle.pk, {"details": {"transportStatus": "arrived"}}).vehicle

    assert moving.location == "in_transit"
    assert arrived.location == "showroom"


def test_stale_version_conflicts(vehicle):
    VehicleService.update_vehicle(vehicle.pk, {"color": "rood"})

    with pytest.raises(ConflictError):
        VehicleService.update_vehicle(vehicle.pk, {"color": "blauw"}, expected_version=1)
    assert Vehicle.objects.get(pk=vehicle.pk).color == "rood"


def test_matching_version_is_accepted(vehicle):
    result = VehicleService.update_vehicle(vehicle.pk, {"color": "grijs"}, expected_version=vehicle.version)

    assert result.vehicle.color == "grijs"


def test_missing_vehicle():
    with pytest.raises(NotFoundError):
        VehicleService.update_vehicle(999999, {"color": "rood"})


def test_revert_delivered_vehicle_to_stock(vehicle):
    delivered = VehicleService.update_vehicle(vehicle.pk, {"lifecycle_status": "afgeleverd"}).vehicle
    reverted = VehicleService.revert_status(vehicle.pk, "voorraad")

    assert reverted.lifecycle_status == "voorraad"
    assert reverted.delivered_at == delivered.delivered_at
    assert reverted.version == delivered.version + 1


def test_revert_unsold_vehicle_is_refused(vehicle):
    with pytest.raises(InvalidStateError):
        VehicleService.revert_status(vehicle.pk, "verkocht_b2b")


def test_second_sale_update_keeps_sold_at(vehicle):
    first = VehicleService.update_vehicle(vehicle.pk, {"lifecycle_status": "verkocht_b2c"}).vehicle
    second = VehicleService.update_vehicle(vehicle.pk, {"lifecycle_status": "verkocht_b2c"}).vehicle

    assert first.sold_at is not None
    assert second.sold_at == first.sold_at


def test_unrelated_patch_keeps_purchase_price(make_vehicle):
    vehicle = make_vehicle(purchase_price=Decimal("12000"))

    updated = VehicleService.update_vehicle(vehicle.pk, {"mileage": 50000}).vehicle

    assert updated.mileage == 50000
    assert updated.purchase_price == Decimal("12000")


def test_delivery_stamps_current_time(vehicle):
    before = timezone.now()
    delivered = VehicleService.update_vehicle(vehicle.pk, {"lifecycle_status": "afgeleverd"}).vehicle

    assert before <= delivered.delivered_at <= timezone.now() + timedelta(seconds=1)
