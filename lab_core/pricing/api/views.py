# backend/lab_core/pricing/api/views.py
from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from lab_core.pricing.api.serializers import (
    BasePricePreviewRequestSerializer,
    BasePriceResultSerializer,
    FinalPriceSerializer,
    FixBasePriceSerializer,
    FixedBasePriceSerializer,
    PriceOverrideCreateSerializer,
    PriceOverrideSerializer,
)
from lab_core.pricing.resolver import BasePriceResult
from lab_core.pricing.services import BasePriceService, FinalPriceResolver, PriceOverrideService
from lab_core.works.models import Work


class WorkPricingViewSet(viewsets.GenericViewSet):
    """
    Work pricing:
    - preview base price (no side effects)
    - fix base price (once)
    - add override
    - read final price
    """
    queryset = Work.objects.none()
    serializer_class = BasePriceResultSerializer

    @extend_schema(
        tags=["Pricing"],
        request=BasePricePreviewRequestSerializer,
        responses={200: BasePriceResultSerializer},
    )
    @action(detail=True, methods=["post"], url_path="pricing/preview")
    def preview(self, request, pk=None):
        ser = BasePricePreviewRequestSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        result = BasePriceService.preview(
            work_id=int(pk),
            price_group=ser.validated_data.get("price_group") or None,
            pricing_date=ser.validated_data.get("pricing_date"),
        )
        return Response(BasePriceResultSerializer(result).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["Pricing"],
        request=FixBasePriceSerializer,
        responses={201: FixedBasePriceSerializer},
    )
    @action(detail=True, methods=["post"], url_path="pricing/fix")
    def fix(self, request, pk=None):
        ser = FixBasePriceSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data

        fixed = BasePriceService.fix(
            work_id=int(pk),
            previewed=BasePriceResult(
                base_price=data["base_price"],
                currency=data.get("currency") or "",
                price_group=data.get("price_group") or "",
                rule_id=data.get("rule_id"),
            ),
        )
        return Response(FixedBasePriceSerializer(fixed).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        tags=["Pricing"],
        responses={200: FinalPriceSerializer},
    )
    @action(detail=True, methods=["get"], url_path="pricing/final")
    def final(self, request, pk=None):
        result = FinalPriceResolver.resolve(work_id=int(pk))
        return Response(FinalPriceSerializer(result).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["Pricing"],
        request=PriceOverrideCreateSerializer,
        responses={201: PriceOverrideSerializer},
    )
    @action(detail=True, methods=["post"], url_path="pricing/overrides")
    def overrides(self, request, pk=None):
        ser = PriceOverrideCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        override = PriceOverrideService.add_override(
            work_id=int(pk),
            adjustment=ser.validated_data["adjustment"],
            reason=ser.validated_data["reason"],
            created_by_user_id=getattr(request.user, "id", None),
        )
        return Response(PriceOverrideSerializer(override).data, status=status.HTTP_201_CREATED)
