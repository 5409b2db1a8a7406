"""
Derivation of fields that depend on a vehicle's status transition.

``reconcile`` is a pure function: it reads the stored vehicle, the status the
transition guard settled on, the already merged details and the caller's
patch, and returns the values to write. Nothing here touches the database.
"""
from django.utils import timezone

from dealership_ops.inventory.models import AFGELEVERD, SOLD_STATUSES, VERKOCHT_B2B, VERKOCHT_B2C

TRANSPORT_IN_TRANSIT = 'in_transit'
TRANSPORT_ARRIVED = 'arrived'

LOCATION_IN_TRANSIT = 'in_transit'
LOCATION_SHOWROOM = 'showroom'

SALE_CHANNEL_BY_STATUS = {
    VERKOCHT_B2B: 'b2b',
    VERKOCHT_B2C: 'b2c',
}
DEFAULT_SALE_CHANNEL = 'b2c'


def derive_location(existing, merged_details, patch):
    if 'location' in patch and patch['location'] is not None:
        return patch['location']

    previous_transport = (existing.details or {}).get('transportStatus')
    transport = merged_details.get('transportStatus')
    if transport == previous_transport:
        return existing.location

    if transport == TRANSPORT_IN_TRANSIT:
        return LOCATION_IN_TRANSIT
    if transport == TRANSPORT_ARRIVED and existing.location == LOCATION_IN_TRANSIT:
        return LOCATION_SHOWROOM
    return existing.location


def derive_sold_at(existing, resolved_status, now):
    if (
        resolved_status in SOLD_STATUSES
        and existing.lifecycle_status not in SOLD_STATUSES
        and existing.sold_at is None
    ):
        return now
    return existing.sold_at


def derive_delivery(existing, resolved_status, merged_details, now):
    """Return ``(delivered_at, details)`` with the sale channel filled in on first delivery."""
    if resolved_status != AFGELEVERD or existing.delivered_at is not None:
        return existing.delivered_at, merged_details

    details = dict(merged_details)
    if not details.get('saleChannel'):
        details['saleChannel'] = SALE_CHANNEL_BY_STATUS.get(existing.lifecycle_status, DEFAULT_SALE_CHANNEL)
    return now, details


def derive_purchased_at(existing, patch, now):
    if patch.get('purchaser') is not None and existing.purchased_at is None:
        return now
    return existing.purchased_at


def preserved_price(existing, patch, field):
    value = patch.get(field)
    return getattr(existing, field) if value is None else value


def reconcile(existing, resolved_status, merged_details, patch, now=None):
    """
    Compute the dependent fields of a vehicle update.

    Returns a dict with ``location``, ``sold_at``, ``delivered_at``,
    ``purchased_at``, ``purchase_price``, ``selling_price`` and ``details``.
    """
    now = now or timezone.now()

    delivered_at, details = derive_delivery(existing, resolved_status, merged_details, now)
    return {
        'location': derive_location(existing, merged_details, patch),
        'sold_at': derive_sold_at(existing, resolved_status, now),
        'delivered_at': delivered_at,
        'purchased_at': derive_purchased_at(existing, patch, now),
        'purchase_price': preserved_price(existing, patch, 'purchase_price'),
        'selling_price': preserved_price(existing, patch, 'selling_price'),
        'details': details,
    }
