# backend/lab_core/payments/api/views.py
from __future__ import annotations

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response
from rest_framework.views import APIView

from lab_core.balances.api.serializers import BalanceMovementSerializer
from lab_core.common.api.pagination import paginate
from lab_core.common.idempotency import get_key
from lab_core.payments.api.serializers import (
    ApplyBalanceSerializer,
    PaymentPreviewRequestSerializer,
    PaymentPreviewSerializer,
    PaymentRegisterSerializer,
    PaymentSerializer,
    WorkBalanceSerializer,
)
from lab_core.payments.filters import PaymentFilter
from lab_core.payments.models import Payment
from lab_core.payments.projection import WorkBalanceProjection
from lab_core.payments.selectors import get_payment, payments_for_client
from lab_core.payments.services import (
    AllocationRequest,
    BalanceApplicationService,
    PaymentPreviewService,
    PaymentRegistrationService,
)


class PaymentViewSet(viewsets.GenericViewSet):
    """
    Two-phase payments:
    - preview: proposes an allocation, writes nothing
    - create: idempotent commit of a confirmed allocation
    - retrieve: payment with its allocations
    """
    serializer_class = PaymentSerializer
    queryset = Payment.objects.none()

    @extend_schema(
        tags=["Payments"],
        request=PaymentPreviewRequestSerializer,
        responses={200: PaymentPreviewSerializer},
    )
    @action(detail=False, methods=["post"], url_path="preview")
    def preview(self, request):
        ser = PaymentPreviewRequestSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data

        result = PaymentPreviewService.preview(
            client_id=data["client_id"],
            payment_amount=data["payment_amount"],
            work_ids=data["work_ids"],
            allocation_overrides=data.get("allocation_overrides"),
        )
        return Response(PaymentPreviewSerializer(result).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["Payments"],
        request=PaymentRegisterSerializer,
        responses={204: None},
        parameters=[
            OpenApiParameter(
                name="Idempotency-Key",
                type=OpenApiTypes.STR,
                location=OpenApiParameter.HEADER,
                required=False,
                description="Alternative to the idempotency_key body field.",
            ),
        ],
    )
    def create(self, request):
        ser = PaymentRegisterSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data

        key = data.get("idempotency_key") or get_key(request)
        if not key:
            raise ValidationError({"idempotency_key": "This field is required."})

        PaymentRegistrationService.register(
            client_id=data["client_id"],
            payment_amount=data["payment_amount"],
            idempotency_key=key,
            allocations=[
                AllocationRequest(work_id=a["work_id"], amount=a["allocated_amount"])
                for a in data.get("allocations", [])
            ],
            move_remainder_to_balance=data["move_remainder_to_balance"],
            method=data["method"],
            reference=data.get("reference", ""),
            notes=data.get("notes", ""),
            recorded_by_user_id=getattr(request.user, "id", None),
        )
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(
        tags=["Payments"],
        responses={200: PaymentSerializer},
    )
    def retrieve(self, request, pk=None):
        payment = get_payment(payment_id=int(pk))
        return Response(PaymentSerializer(payment).data, status=status.HTTP_200_OK)


class ClientPaymentsView(APIView):
    @extend_schema(
        tags=["Payments"],
        responses={200: PaymentSerializer(many=True)},
        parameters=[
            OpenApiParameter(name="method", type=OpenApiTypes.STR, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(name="status", type=OpenApiTypes.STR, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(name="received_from", type=OpenApiTypes.DATE, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(name="received_to", type=OpenApiTypes.DATE, location=OpenApiParameter.QUERY, required=False),
        ],
    )
    def get(self, request, client_id: int):
        f = PaymentFilter(request.query_params, queryset=payments_for_client(client_id=client_id))
        if not f.is_valid():
            raise ValidationError(f.errors)
        return paginate(request, f.qs, PaymentSerializer)


class WorkBalanceView(APIView):
    @extend_schema(
        tags=["Payments"],
        responses={200: WorkBalanceSerializer},
    )
    def get(self, request, work_id: int):
        result = WorkBalanceProjection.project(work_id=work_id)
        return Response(WorkBalanceSerializer(result).data, status=status.HTTP_200_OK)


class ApplyBalanceView(APIView):
    @extend_schema(
        tags=["Balances"],
        request=ApplyBalanceSerializer,
        responses={201: BalanceMovementSerializer},
    )
    def post(self, request, client_id: int):
        ser = ApplyBalanceSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        movement = BalanceApplicationService.apply_to_work(
            client_id=client_id,
            work_id=ser.validated_data["work_id"],
            amount=ser.validated_data["amount"],
            note=ser.validated_data.get("note", ""),
        )
        return Response(BalanceMovementSerializer(movement).data, status=status.HTTP_201_CREATED)
