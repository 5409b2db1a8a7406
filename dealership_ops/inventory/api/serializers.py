from collections.abc import Mapping

import bleach
from django.contrib.auth import get_user_model
from rest_framework import serializers

from dealership_ops.contacts.models import Contact
from ..models import VERKOCHT_B2B, VERKOCHT_B2C, VOORRAAD, Vehicle

User = get_user_model()

WORKSHOP_STATUSES = [
    'wachten', 'poetsen', 'spuiten', 'gereed',
    'klaar_voor_aflevering', 'in_werkplaats', 'wacht_op_onderdelen',
]
PAINT_STATUSES = ['geen_behandeling', 'hersteld', 'in_behandeling']
TRANSPORT_STATUSES = ['pending', 'in_transit', 'arrived']
DAMAGE_STATUSES = ['geen', 'licht', 'middel', 'zwaar', 'total_loss']
PAYMENT_STATUSES = ['niet_betaald', 'aanbetaling', 'volledig_betaald']
SALE_CHANNELS = ['b2b', 'b2c']

MAX_PRICE = 100_000_000


class DamageSerializer(serializers.Serializer):
    description = serializers.CharField(required=False, allow_blank=True)
    status = serializers.ChoiceField(choices=DAMAGE_STATUSES, required=False)

    def validate_description(self, value):
        return bleach.clean(value.strip(), tags=[], strip=True)


class VehicleDetailsSerializer(serializers.Serializer):
    """
    Named fields of the vehicle extension map.

    Every field is optional; only the keys the caller sends end up in
    ``validated_data`` so the merge can tell "absent" from "set to false".
    Unknown keys are rejected instead of being stored blindly.
    """
    workshopStatus = serializers.ChoiceField(choices=WORKSHOP_STATUSES, required=False)
    paintStatus = serializers.ChoiceField(choices=PAINT_STATUSES, required=False)
    transportStatus = serializers.ChoiceField(choices=TRANSPORT_STATUSES, required=False)
    bpmRequested = serializers.BooleanField(required=False)
    bpmStarted = serializers.BooleanField(required=False)
    damage = DamageSerializer(required=False)
    cmrSent = serializers.BooleanField(required=False)
    cmrDate = serializers.DateField(required=False, allow_null=True)
    papersReceived = serializers.BooleanField(required=False)
    papersDate = serializers.DateField(required=False, allow_null=True)
    showroomOnline = serializers.BooleanField(required=False)
    paymentStatus = serializers.ChoiceField(choices=PAYMENT_STATUSES, required=False)
    purchasePaymentStatus = serializers.ChoiceField(choices=PAYMENT_STATUSES, required=False)
    pickupDocumentSent = serializers.BooleanField(required=False)
    saleChannel = serializers.ChoiceField(choices=SALE_CHANNELS, required=False, allow_null=True)
    isTradeIn = serializers.BooleanField(required=False)
    tradeInDate = serializers.DateField(required=False, allow_null=True)
    mainPhotoUrl = serializers.URLField(required=False, allow_null=True)
    photos = serializers.ListField(child=serializers.URLField(), required=False)
    notes = serializers.CharField(required=False, allow_blank=True)

    def to_internal_value(self, data):
        if isinstance(data, Mapping):
            unknown = sorted(set(data) - set(self.fields))
            if unknown:
                raise serializers.ValidationError({key: ["Unknown field."] for key in unknown})
        return super().to_internal_value(data)

    def validate_notes(self, value):
        return bleach.clean(value.strip(), tags=[], strip=True)


class VehicleSerializer(serializers.ModelSerializer):
    """Full reconciled vehicle record as returned by every vehicle endpoint."""

    class Meta:
        model = Vehicle
        fields = [
            'id', 'brand', 'model', 'year', 'color', 'license_number', 'vin', 'mileage',
            'purchase_price', 'selling_price', 'import_status', 'location', 'lifecycle_status',
            'customer', 'supplier', 'transporter', 'purchaser', 'salesperson',
            'sold_at', 'delivered_at', 'purchased_at', 'details',
            'version', 'created_at', 'updated_at',
        ]
        read_only_fields = fields


class VehiclePatchSerializer(serializers.ModelSerializer):
    """
    Validates a partial vehicle update.

    Used with ``partial=True``; the validated data is handed to
    VehicleService, never saved directly.
    """
    customer = serializers.PrimaryKeyRelatedField(queryset=Contact.objects.all(), required=False, allow_null=True)
    supplier = serializers.PrimaryKeyRelatedField(queryset=Contact.objects.all(), required=False, allow_null=True)
    transporter = serializers.PrimaryKeyRelatedField(queryset=Contact.objects.all(), required=False, allow_null=True)
    purchaser = serializers.PrimaryKeyRelatedField(queryset=User.objects.all(), required=False, allow_null=True)
    salesperson = serializers.PrimaryKeyRelatedField(queryset=User.objects.all(), required=False, allow_null=True)
    details = VehicleDetailsSerializer(required=False)
    version = serializers.IntegerField(required=False, min_value=1, write_only=True)

    class Meta:
        model = Vehicle
        fields = [
            'brand', 'model', 'year', 'color', 'license_number', 'vin', 'mileage',
            'purchase_price', 'selling_price', 'import_status', 'location', 'lifecycle_status',
            'customer', 'supplier', 'transporter', 'purchaser', 'salesperson',
            'details', 'version',
        ]

    def _clean_text(self, value, label, max_length):
        cleaned = bleach.clean(value.strip(), tags=[], strip=True)
        if len(cleaned) > max_length:
            raise serializers.ValidationError(f"{label} cannot exceed {max_length} characters.")
        return cleaned

    def validate_brand(self, value):
        cleaned = self._clean_text(value, "Brand", 100)
        if not cleaned:
            raise serializers.ValidationError("Brand cannot be empty.")
        return cleaned

    def validate_model(self, value):
        cleaned = self._clean_text(value, "Model", 100)
        if not cleaned:
            raise serializers.ValidationError("Model cannot be empty.")
        return cleaned

    def validate_color(self, value):
        return self._clean_text(value, "Color", 50)

    def validate_license_number(self, value):
        return self._clean_text(value, "License number", 20).upper()

    def validate_vin(self, value):
        cleaned = self._clean_text(value, "VIN", 17).upper()
        if cleaned and len(cleaned) != 17:
            raise serializers.ValidationError("VIN must be exactly 17 characters.")
        return cleaned

    def _validate_price(self, value):
        if value is None:
            return value
        if value < 0:
            raise serializers.ValidationError("Price cannot be negative.")
        if value > MAX_PRICE:
            raise serializers.ValidationError("Price cannot exceed 100,000,000.")
        return value

    def validate_purchase_price(self, value):
        return self._validate_price(value)

    def validate_selling_price(self, value):
        return self._validate_price(value)


class VehicleIntakeSerializer(VehiclePatchSerializer):
    """Minimal intake: brand and model are required, everything else defaults."""
    version = None

    class Meta(VehiclePatchSerializer.Meta):
        fields = [name for name in VehiclePatchSerializer.Meta.fields if name != 'version']
        extra_kwargs = {
            'brand': {'required': True},
            'model': {'required': True},
        }


class RevertStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[VOORRAAD, VERKOCHT_B2B, VERKOCHT_B2C])
    version = serializers.IntegerField(required=False, min_value=1)
