import logging

from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import (extend_schema, extend_schema_view, OpenApiExample, OpenApiResponse)

from ..models import Vehicle
from ..services.vehicle_service import VehicleService
from .serializers import (RevertStatusSerializer, VehicleIntakeSerializer, VehiclePatchSerializer,
                          VehicleSerializer)

logger = logging.getLogger(__name__)

CONFLICT_RESPONSE = OpenApiResponse(
    response={"type": "object", "properties": {"detail": {"type": "string"}}},
    description="The vehicle was changed concurrently or the transition is not allowed.",
    examples=[OpenApiExample("Conflict", value={"detail": "The record was changed by another request. Reload and retry."})]
)
NOT_FOUND_RESPONSE = OpenApiResponse(
    response={"type": "object", "properties": {"detail": {"type": "string"}}},
    description="Vehicle not found.",
    examples=[OpenApiExample("Not Found", value={"detail": "Vehicle 42 not found."})]
)


@extend_schema_view(
    list=extend_schema(
        tags=["Inventory - Vehicles"],
        description="List vehicles. Filter by lifecycle_status or location; search brand, model, license number and VIN.",
    ),
    retrieve=extend_schema(
        tags=["Inventory - Vehicles"],
        description="Retrieve a single vehicle record.",
        responses={200: VehicleSerializer, 404: NOT_FOUND_RESPONSE},
    ),
    create=extend_schema(
        tags=["Inventory - Vehicles"],
        description="Vehicle intake. Only brand and model are required; details and status are filled with defaults.",
        request=VehicleIntakeSerializer,
        responses={201: VehicleSerializer},
    ),
    partial_update=extend_schema(
        tags=["Inventory - Vehicles"],
        description=(
            "Partially update a vehicle. Fields and details keys not sent are preserved. "
            "A status change that would move a sold or delivered vehicle back is ignored and "
            "reported in `warnings`. Send `version` to fail with 409 if the record changed."
        ),
        request=VehiclePatchSerializer,
        responses={200: VehicleSerializer, 404: NOT_FOUND_RESPONSE, 409: CONFLICT_RESPONSE},
    ),
    revert_status=extend_schema(
        tags=["Inventory - Vehicles"],
        description="Explicitly move a sold or delivered vehicle back to stock or to another sale status.",
        request=RevertStatusSerializer,
        responses={200: VehicleSerializer, 404: NOT_FOUND_RESPONSE, 409: CONFLICT_RESPONSE},
    ),
)
class VehicleViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    queryset = Vehicle.objects.select_related("customer", "supplier", "transporter")
    lookup_value_regex = r"\d+"
    serializer_class = VehicleSerializer
    permission_classes = [IsAuthenticated]
    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]
    filterset_fields = ["lifecycle_status", "location", "import_status"]
    search_fields = ["brand", "model", "license_number", "vin"]
    ordering_fields = ["created_at", "updated_at", "sold_at", "delivered_at", "selling_price"]

    def create(self, request, *args, **kwargs):
        serializer = VehicleIntakeSerializer(data=request.data, context={"request": request})
        serializer.is_valid(raise_exception=True)

        vehicle = VehicleService.create_vehicle(serializer.validated_data)
        logger.info(f"Vehicle {vehicle.pk} created by {request.user}")
        return Response(VehicleSerializer(vehicle).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request, pk=None):
        serializer = VehiclePatchSerializer(data=request.data, partial=True, context={"request": request})
        serializer.is_valid(raise_exception=True)

        patch = dict(serializer.validated_data)
        expected_version = patch.pop("version", None)
        result = VehicleService.update_vehicle(pk, patch, expected_version=expected_version)

        data = VehicleSerializer(result.vehicle).data
        data["warnings"] = result.warnings
        return Response(data)

    @action(detail=True, methods=["post"], url_path="revert-status")
    def revert_status(self, request, pk=None):
        serializer = RevertStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        vehicle = VehicleService.revert_status(
            pk,
            serializer.validated_data["status"],
            expected_version=serializer.validated_data.get("version"),
        )
        logger.info(f"Vehicle {pk} status reverted by {request.user}")
        return Response(VehicleSerializer(vehicle).data)
