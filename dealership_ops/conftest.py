"""Shared fixtures: users, API clients and vehicle/claim factories."""
import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from dealership_ops.contacts.models import Contact
from dealership_ops.inventory.services.vehicle_service import VehicleService
from dealership_ops.warranty.models import WarrantyClaim
from dealership_ops.warranty.services.loan_car_service import LoanCarService


@pytest.fixture
def user(db):
    return get_user_model().objects.create_user(username="verkoper", password="geheim123")


@pytest.fixture
def api_client(user):
    client = APIClient()
    client.force_authenticate(user=user)
    return client


@pytest.fixture
def customer(db):
    return Contact.objects.create(contact_type="customer", first_name="Jan", last_name="de Vries")


@pytest.fixture
def make_vehicle(db):
    def _make(**intake):
        intake.setdefault("brand", "Volkswagen")
        intake.setdefault("model", "Golf")
        return VehicleService.create_vehicle(intake)
    return _make


@pytest.fixture
def vehicle(make_vehicle):
    return make_vehicle(license_number="AB-123-C")


@pytest.fixture
def make_loan_car(db):
    def _make(license_number="LN-001-X"):
        return LoanCarService.create_loan_car("Toyota", "Yaris", license_number)
    return _make


@pytest.fixture
def make_claim(db):
    def _make(**fields):
        fields.setdefault("description", "Airco blaast geen koude lucht")
        fields.setdefault("manual_license_number", "ZZ-999-Z")
        return WarrantyClaim.objects.create(**fields)
    return _make
