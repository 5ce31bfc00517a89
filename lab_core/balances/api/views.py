# backend/lab_core/balances/api/views.py
from __future__ import annotations

from django.conf import settings
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response

from lab_core.balances.api.serializers import (
    BalanceMovementSerializer,
    ClientBalanceSnapshotSerializer,
    RecomputeResultSerializer,
)
from lab_core.balances.filters import BalanceMovementFilter
from lab_core.balances.selectors import client_balance, movements_for_client
from lab_core.balances.services import ClientBalanceService
from lab_core.clients.models import Client
from lab_core.common.api.pagination import paginate


class ClientBalanceViewSet(viewsets.GenericViewSet):
    """
    Client credit:
    - balance snapshot (cached + ledger sum)
    - ledger movements
    - recompute cache from ledger
    """
    queryset = Client.objects.none()
    serializer_class = ClientBalanceSnapshotSerializer

    @extend_schema(
        tags=["Balances"],
        responses={200: ClientBalanceSnapshotSerializer},
    )
    @action(detail=True, methods=["get"], url_path="balance")
    def balance(self, request, pk=None):
        client_id = int(pk)
        row = client_balance(client_id=client_id)

        snapshot = {
            "client_id": client_id,
            "amount": ClientBalanceService.get_current_balance(client_id=client_id),
            "ledger_amount": ClientBalanceService.get_ledger_balance(client_id=client_id),
            "currency": row.currency if row else getattr(settings, "LAB_DEFAULT_CURRENCY", "MXN"),
            "active": row.active if row else True,
        }
        return Response(ClientBalanceSnapshotSerializer(snapshot).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["Balances"],
        responses={200: BalanceMovementSerializer(many=True)},
        parameters=[
            OpenApiParameter(name="movement_type", type=OpenApiTypes.STR, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(name="created_from", type=OpenApiTypes.DATE, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(name="created_to", type=OpenApiTypes.DATE, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(name="work", type=OpenApiTypes.INT, location=OpenApiParameter.QUERY, required=False),
        ],
    )
    @action(detail=True, methods=["get"], url_path="balance/movements")
    def movements(self, request, pk=None):
        f = BalanceMovementFilter(request.query_params, queryset=movements_for_client(client_id=int(pk)))
        if not f.is_valid():
            raise ValidationError(f.errors)
        return paginate(request, f.qs, BalanceMovementSerializer)

    @extend_schema(
        tags=["Balances"],
        request=None,
        responses={200: RecomputeResultSerializer},
    )
    @action(detail=True, methods=["post"], url_path="balance/recompute")
    def recompute(self, request, pk=None):
        client_id = int(pk)
        amount = ClientBalanceService.recompute_balance_cache(client_id=client_id)
        return Response(
            RecomputeResultSerializer({"client_id": client_id, "amount": amount}).data,
            status=status.HTTP_200_OK,
        )
