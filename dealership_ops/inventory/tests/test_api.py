import pytest
from rest_framework.test import APIClient

pytestmark = pytest.mark.django_db


def _url(vehicle_id=None, suffix=""):
    if vehicle_id is None:
        return "/api/vehicles/"
    return f"/api/vehicles/{vehicle_id}/{suffix}"


def test_requires_authentication(vehicle):
    response = APIClient().get(_url(vehicle.pk))

    assert response.status_code in (401, 403)


def test_intake_creates_vehicle(api_client):
    response = api_client.post(_url(), {"brand": "Peugeot", "model": "208", "license_number": "gh-412-k"}, format="json")

    assert response.status_code == 201
    assert response.data["lifecycle_status"] == "voorraad"
    assert response.data["license_number"] == "GH-412-K"
    assert response.data["details"]["transportStatus"] == "pending"


def test_intake_requires_brand_and_model(api_client):
    response = api_client.post(_url(), {"brand": "Peugeot"}, format="json")

    assert response.status_code == 400
    assert "model" in response.data


def test_patch_returns_record_with_warnings(api_client, vehicle):
    api_client.patch(_url(vehicle.pk), {"lifecycle_status": "verkocht_b2b"}, format="json")
    response = api_client.patch(
        _url(vehicle.pk), {"lifecycle_status": "voorraad", "details": {"cmrSent": True}}, format="json",
    )

    assert response.status_code == 200
    assert response.data["lifecycle_status"] == "verkocht_b2b"
    assert response.data["details"]["cmrSent"] is True
    assert response.data["warnings"] == ["status_regression_ignored"]


def test_patch_without_regression_has_empty_warnings(api_client, vehicle):
    response = api_client.patch(_url(vehicle.pk), {"details": {"workshopStatus": "gereed"}}, format="json")

    assert response.status_code == 200
    assert response.data["warnings"] == []
    assert response.data["details"]["workshopStatus"] == "gereed"
    assert response.data["details"]["paintStatus"] == "geen_behandeling"


def test_patch_unknown_vehicle(api_client):
    response = api_client.patch(_url(424242), {"color": "rood"}, format="json")

    assert response.status_code == 404


def test_patch_stale_version(api_client, vehicle):
    api_client.patch(_url(vehicle.pk), {"color": "rood"}, format="json")
    response = api_client.patch(_url(vehicle.pk), {"color": "blauw", "version": 1}, format="json")

    assert response.status_code == 409


@pytest.mark.parametrize("payload", [
    {"selling_price": "-1.00"},
    {"lifecycle_status": "gestolen"},
    {"location": "maan"},
    {"details": {"unknownFlag": True}},
    {"details": {"transportStatus": "teleported"}},
    {"vin": "TOO-SHORT"},
])
def test_patch_rejects_invalid_input(api_client, vehicle, payload):
    response = api_client.patch(_url(vehicle.pk), payload, format="json")

    assert response.status_code == 400


def test_revert_status(api_client, vehicle):
    api_client.patch(_url(vehicle.pk), {"lifecycle_status": "afgeleverd"}, format="json")
    response = api_client.post(_url(vehicle.pk, "revert-status/"), {"status": "voorraad"}, format="json")

    assert response.status_code == 200
    assert response.data["lifecycle_status"] == "voorraad"


def test_revert_status_not_allowed(api_client, vehicle):
    response = api_client.post(_url(vehicle.pk, "revert-status/"), {"status": "verkocht_b2c"}, format="json")

    assert response.status_code == 409


def test_list_filters_by_status(api_client, make_vehicle):
    make_vehicle(license_number="AA-111-A")
    make_vehicle(license_number="BB-222-B", lifecycle_status="verkocht_b2c")

    response = api_client.get(_url(), {"lifecycle_status": "verkocht_b2c"})

    assert response.status_code == 200
    assert [v["license_number"] for v in response.data] == ["BB-222-B"]


@pytest.mark.parametrize("path", ["abc/", "abc/revert-status/"])
def test_non_numeric_id_is_not_found(api_client, path):
    response = api_client.patch(f"/api/vehicles/{path}", {"color": "rood"}, format="json")

    assert response.status_code == 404
