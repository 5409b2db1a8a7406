import bleach
from rest_framework import serializers

from dealership_ops.inventory.models import Vehicle
from ..models import IN_PROGRESS, PENDING, LoanCar, WarrantyClaim

MAX_COST = 100_000_000


def _clean(value):
    return bleach.clean(value.strip(), tags=[], strip=True)


class LoanCarSerializer(serializers.ModelSerializer):
    brand = serializers.CharField(source='vehicle.brand', read_only=True)
    model = serializers.CharField(source='vehicle.model', read_only=True)
    license_number = serializers.CharField(source='vehicle.license_number', read_only=True)
    active_claim = serializers.SerializerMethodField()

    class Meta:
        model = LoanCar
        fields = [
            'id', 'vehicle', 'brand', 'model', 'license_number', 'status',
            'customer', 'start_date', 'end_date', 'notes', 'active_claim',
            'created_at', 'updated_at',
        ]
        read_only_fields = fields

    def get_active_claim(self, obj):
        """Id of the open claim currently holding this car, if any."""
        claim = next(
            (c for c in obj.claims.all() if c.loan_car_assigned and c.status in (PENDING, IN_PROGRESS)),
            None,
        )
        return claim.pk if claim else None


class LoanCarWriteSerializer(serializers.Serializer):
    brand = serializers.CharField(max_length=100)
    model = serializers.CharField(max_length=100)
    license_number = serializers.CharField(max_length=20)
    notes = serializers.CharField(required=False, allow_blank=True, default='')

    def validate_brand(self, value):
        cleaned = _clean(value)
        if not cleaned:
            raise serializers.ValidationError("Brand cannot be empty.")
        return cleaned

    def validate_model(self, value):
        cleaned = _clean(value)
        if not cleaned:
            raise serializers.ValidationError("Model cannot be empty.")
        return cleaned

    def validate_license_number(self, value):
        cleaned = _clean(value).upper()
        if not cleaned:
            raise serializers.ValidationError("License number cannot be empty.")
        return cleaned

    def validate_notes(self, value):
        return _clean(value)


class WarrantyClaimSerializer(serializers.ModelSerializer):
    """Claim record; lifecycle fields are read-only and change through the claim actions."""
    vehicle = serializers.PrimaryKeyRelatedField(queryset=Vehicle.objects.all(), required=False, allow_null=True)
    status = serializers.ChoiceField(choices=[PENDING, IN_PROGRESS], required=False)

    class Meta:
        model = WarrantyClaim
        fields = [
            'id', 'vehicle', 'manual_vehicle_brand', 'manual_vehicle_model', 'manual_license_number',
            'manual_customer_name', 'manual_customer_phone', 'description', 'status', 'priority',
            'estimated_cost', 'actual_cost', 'loan_car', 'loan_car_assigned', 'resolution_date',
            'resolution_description', 'customer_satisfaction', 'created_at', 'updated_at',
        ]
        read_only_fields = [
            'id', 'actual_cost', 'loan_car', 'loan_car_assigned', 'resolution_date',
            'resolution_description', 'customer_satisfaction', 'created_at', 'updated_at',
        ]
        # one open claim per loan car is enforced by ClaimService and the database
        validators = []

    def validate_description(self, value):
        cleaned = _clean(value)
        if not cleaned:
            raise serializers.ValidationError("Description cannot be empty.")
        return cleaned

    def validate_manual_license_number(self, value):
        return _clean(value).upper()

    def validate_manual_customer_name(self, value):
        return _clean(value)

    def validate_estimated_cost(self, value):
        if value < 0:
            raise serializers.ValidationError("Estimated cost cannot be negative.")
        if value > MAX_COST:
            raise serializers.ValidationError("Estimated cost cannot exceed 100,000,000.")
        return value


class LoanCarAssignSerializer(serializers.Serializer):
    loanCarId = serializers.IntegerField(allow_null=True)


class ResolveClaimSerializer(serializers.Serializer):
    resolutionDescription = serializers.CharField(allow_blank=True)
    actualCost = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)
    customerSatisfaction = serializers.IntegerField(min_value=1, max_value=5, required=False, allow_null=True)

    def validate_resolutionDescription(self, value):
        return _clean(value)
