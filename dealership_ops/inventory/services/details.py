"""
Extension map ("details") handling for vehicles.

The details column holds secondary vehicle metadata as camelCase keys.
Merging is field-level replace-if-present: a key sent by the caller always
wins, even when its value is falsy, and keys the caller did not send are
carried over untouched. Nested objects such as ``damage`` are replaced
whole, never deep-merged.
"""
import copy

DEFAULT_DETAILS = {
    'workshopStatus': 'wachten',
    'paintStatus': 'geen_behandeling',
    'transportStatus': 'pending',
    'bpmRequested': False,
    'bpmStarted': False,
    'damage': {'description': '', 'status': 'geen'},
    'cmrSent': False,
    'cmrDate': None,
    'papersReceived': False,
    'papersDate': None,
    'showroomOnline': False,
    'paymentStatus': 'niet_betaald',
    'purchasePaymentStatus': 'niet_betaald',
    'pickupDocumentSent': False,
    'isTradeIn': False,
    'tradeInDate': None,
    'mainPhotoUrl': None,
    'photos': [],
}


def merge_details(existing, incoming):
    """
    Return a new details map combining ``existing`` with ``incoming``.

    Neither argument is mutated.
    """
    merged = copy.deepcopy(existing) if existing else {}
    for key, value in (incoming or {}).items():
        merged[key] = copy.deepcopy(value)
    return merged


def build_details(incoming=None):
    """Details for a new vehicle: defaults overridden by intake values."""
    return merge_details(DEFAULT_DETAILS, incoming)
