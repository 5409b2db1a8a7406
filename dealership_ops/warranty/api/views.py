import logging

from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import (extend_schema, extend_schema_view, OpenApiExample, OpenApiResponse)

from ..models import LoanCar, WarrantyClaim
from ..services.claim_service import ClaimService
from ..services.loan_car_service import LoanCarService
from .serializers import (LoanCarAssignSerializer, LoanCarSerializer, LoanCarWriteSerializer,
                          ResolveClaimSerializer, WarrantyClaimSerializer)

logger = logging.getLogger(__name__)

CONFLICT_RESPONSE = OpenApiResponse(
    response={"type": "object", "properties": {"detail": {"type": "string"}}},
    description="The claim or loan car is not in a state that allows this operation.",
    examples=[
        OpenApiExample("Already on loan", value={"detail": "Loan car 3 is already on loan."}),
        OpenApiExample("Closed claim", value={"detail": "A resolved claim cannot be voided."}),
    ]
)
NOT_FOUND_RESPONSE = OpenApiResponse(
    response={"type": "object", "properties": {"detail": {"type": "string"}}},
    description="Record not found.",
)


@extend_schema_view(
    list=extend_schema(tags=["Warranty - Claims"], description="List warranty claims. Filter by status or priority."),
    retrieve=extend_schema(tags=["Warranty - Claims"], responses={200: WarrantyClaimSerializer, 404: NOT_FOUND_RESPONSE}),
    create=extend_schema(
        tags=["Warranty - Claims"],
        description="Open a claim for a vehicle in stock records or, for other vehicles, by license number.",
    ),
    partial_update=extend_schema(
        tags=["Warranty - Claims"],
        description="Edit an open claim. Status may only move from pending to in_progress.",
        responses={200: WarrantyClaimSerializer, 404: NOT_FOUND_RESPONSE, 409: CONFLICT_RESPONSE},
    ),
    destroy=extend_schema(
        tags=["Warranty - Claims"],
        description="Delete a claim. A loan car still on loan to it is released first.",
    ),
    loan_car=extend_schema(
        tags=["Warranty - Claims"],
        description="Assign, swap or (with `loanCarId: null`) release the claim's loan car.",
        request=LoanCarAssignSerializer,
        responses={200: WarrantyClaimSerializer, 404: NOT_FOUND_RESPONSE, 409: CONFLICT_RESPONSE},
    ),
    resolve=extend_schema(
        tags=["Warranty - Claims"],
        description="Resolve the claim and release its loan car.",
        request=ResolveClaimSerializer,
        responses={200: WarrantyClaimSerializer, 404: NOT_FOUND_RESPONSE, 409: CONFLICT_RESPONSE},
    ),
    void=extend_schema(
        tags=["Warranty - Claims"],
        description="Void the claim and release its loan car.",
        request=None,
        responses={200: WarrantyClaimSerializer, 404: NOT_FOUND_RESPONSE, 409: CONFLICT_RESPONSE},
    ),
)
class WarrantyClaimViewSet(viewsets.ModelViewSet):
    queryset = WarrantyClaim.objects.select_related("vehicle", "loan_car")
    lookup_value_regex = r"\d+"
    serializer_class = WarrantyClaimSerializer
    permission_classes = [IsAuthenticated]
    http_method_names = ["get", "post", "patch", "delete", "head", "options"]
    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]
    filterset_fields = ["status", "priority", "vehicle", "loan_car_assigned"]
    search_fields = ["description", "manual_license_number", "vehicle__license_number"]
    ordering_fields = ["created_at", "resolution_date", "estimated_cost"]

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        claim = ClaimService.create_claim(serializer.validated_data)
        logger.info(f"Warranty claim {claim.pk} opened by {request.user}")
        return Response(WarrantyClaimSerializer(claim).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request, pk=None):
        serializer = self.get_serializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        claim = ClaimService.update_claim(pk, serializer.validated_data)
        return Response(WarrantyClaimSerializer(claim).data)

    def destroy(self, request, pk=None):
        ClaimService.delete_claim(pk)
        logger.info(f"Warranty claim {pk} deleted by {request.user}")
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["post"], url_path="loan-car")
    def loan_car(self, request, pk=None):
        serializer = LoanCarAssignSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        claim = ClaimService.reassign_loan_car(pk, serializer.validated_data["loanCarId"])
        return Response(WarrantyClaimSerializer(claim).data)

    @action(detail=True, methods=["post"])
    def resolve(self, request, pk=None):
        serializer = ResolveClaimSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        claim = ClaimService.resolve_claim(
            pk,
            resolution_description=data["resolutionDescription"],
            actual_cost=data["actualCost"],
            customer_satisfaction=data.get("customerSatisfaction"),
        )
        logger.info(f"Warranty claim {pk} resolved by {request.user}")
        return Response(WarrantyClaimSerializer(claim).data)

    @action(detail=True, methods=["post"])
    def void(self, request, pk=None):
        claim = ClaimService.void_claim(pk)
        logger.info(f"Warranty claim {pk} voided by {request.user}")
        return Response(WarrantyClaimSerializer(claim).data)


@extend_schema_view(
    list=extend_schema(tags=["Warranty - Loan Cars"], description="List the loan car fleet. Filter by status."),
    retrieve=extend_schema(tags=["Warranty - Loan Cars"], responses={200: LoanCarSerializer, 404: NOT_FOUND_RESPONSE}),
    create=extend_schema(
        tags=["Warranty - Loan Cars"],
        description="Add a loan car. A vehicle record with status `leenauto` is created for it.",
        request=LoanCarWriteSerializer,
        responses={201: LoanCarSerializer},
    ),
    partial_update=extend_schema(
        tags=["Warranty - Loan Cars"],
        description="Rename a loan car or edit its notes.",
        request=LoanCarWriteSerializer,
        responses={200: LoanCarSerializer, 404: NOT_FOUND_RESPONSE},
    ),
    destroy=extend_schema(
        tags=["Warranty - Loan Cars"],
        description="Remove a car from the loan fleet. Refused while it is on loan.",
        responses={204: None, 404: NOT_FOUND_RESPONSE, 409: CONFLICT_RESPONSE},
    ),
    toggle_availability=extend_schema(
        tags=["Warranty - Loan Cars"],
        description="Flip between available and on loan. Refused while an open claim holds the car.",
        request=None,
        responses={200: LoanCarSerializer, 404: NOT_FOUND_RESPONSE, 409: CONFLICT_RESPONSE},
    ),
)
class LoanCarViewSet(viewsets.ModelViewSet):
    queryset = LoanCar.objects.select_related("vehicle").prefetch_related("claims")
    lookup_value_regex = r"\d+"
    serializer_class = LoanCarSerializer
    permission_classes = [IsAuthenticated]
    http_method_names = ["get", "post", "patch", "delete", "head", "options"]
    filter_backends = [DjangoFilterBackend, SearchFilter]
    filterset_fields = ["status"]
    search_fields = ["vehicle__brand", "vehicle__model", "vehicle__license_number"]

    def create(self, request, *args, **kwargs):
        serializer = LoanCarWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        loan_car = LoanCarService.create_loan_car(**serializer.validated_data)
        logger.info(f"Loan car {loan_car.pk} added by {request.user}")
        return Response(self._render(loan_car.pk), status=status.HTTP_201_CREATED)

    def partial_update(self, request, pk=None):
        serializer = LoanCarWriteSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        loan_car = LoanCarService.update_loan_car(pk, serializer.validated_data)
        return Response(self._render(loan_car.pk))

    def destroy(self, request, pk=None):
        LoanCarService.delete_loan_car(pk)
        logger.info(f"Loan car {pk} deleted by {request.user}")
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["post"], url_path="toggle-availability")
    def toggle_availability(self, request, pk=None):
        loan_car = LoanCarService.toggle_availability(pk)
        return Response(self._render(loan_car.pk))

    def _render(self, loan_car_id):
        return LoanCarSerializer(self.get_queryset().get(pk=loan_car_id)).data
