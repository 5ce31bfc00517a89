# backend/lab_core/works/models.py
from __future__ import annotations

from django.db import models

from lab_core.clients.models import Client
from lab_core.common.models import TimeStampedModel


class WorkFamily(models.TextChoices):
    FIXED_PROSTHESIS = "FIXED_PROSTHESIS", "Fixed Prosthesis"
    REMOVABLE_PROSTHESIS = "REMOVABLE_PROSTHESIS", "Removable Prosthesis"
    IMPLANT = "IMPLANT", "Implant"


class WorkKind(models.TextChoices):
    """
    Selects the extension table (and pricing view provider) for a work.
    """
    CROWN = "CROWN", "Crown"
    BRIDGE = "BRIDGE", "Bridge"


class Constitution(models.TextChoices):
    MONOLITHIC = "MONOLITHIC", "Monolithic"
    STRATIFIED = "STRATIFIED", "Stratified"
    METAL = "METAL", "Metal"
    TEMPORARY = "TEMPORARY", "Temporary"


class BuildingTechnique(models.TextChoices):
    DIGITAL = "DIGITAL", "Digital"
    ANALOG = "ANALOG", "Analog"
    HYBRID = "HYBRID", "Hybrid"


class Work(TimeStampedModel):
    """
    A unit of lab work ordered by a client. Owned by the work-order module;
    pricing and payments only read it.
    """
    client = models.ForeignKey(Client, on_delete=models.PROTECT, related_name="works")

    family = models.CharField(max_length=32, choices=WorkFamily.choices)
    work_type = models.CharField(max_length=32)
    kind = models.CharField(max_length=16, choices=WorkKind.choices)
    description = models.CharField(max_length=255, blank=True, default="")

    class Meta:
        db_table = "works_work"
        indexes = [
            models.Index(fields=["client", "id"]),
        ]

    @property
    def label(self) -> str:
        return f"Work {self.id}"

    def __str__(self) -> str:
        return f"{self.label} ({self.kind})"


class CrownWork(models.Model):
    work = models.OneToOneField(Work, on_delete=models.CASCADE, primary_key=True, related_name="crown")

    constitution = models.CharField(max_length=16, choices=Constitution.choices, null=True, blank=True)
    building_technique = models.CharField(max_length=16, choices=BuildingTechnique.choices, null=True, blank=True)
    core_material_id = models.BigIntegerField(null=True, blank=True)
    tooth_number = models.PositiveSmallIntegerField(null=True, blank=True)

    class Meta:
        db_table = "works_crown"


class BridgeWork(models.Model):
    work = models.OneToOneField(Work, on_delete=models.CASCADE, primary_key=True, related_name="bridge")

    constitution = models.CharField(max_length=16, choices=Constitution.choices, null=True, blank=True)
    building_technique = models.CharField(max_length=16, choices=BuildingTechnique.choices, null=True, blank=True)
    core_material_id = models.BigIntegerField(null=True, blank=True)

    class Meta:
        db_table = "works_bridge"


class BridgeToothRole(models.TextChoices):
    ABUTMENT = "ABUTMENT", "Abutment"
    PONTIC = "PONTIC", "Pontic"


class BridgeTooth(models.Model):
    bridge = models.ForeignKey(BridgeWork, on_delete=models.CASCADE, related_name="teeth")
    tooth_number = models.PositiveSmallIntegerField()
    role = models.CharField(max_length=16, choices=BridgeToothRole.choices, default=BridgeToothRole.ABUTMENT)

    class Meta:
        db_table = "works_bridge_tooth"
        constraints = [
            models.UniqueConstraint(fields=["bridge", "tooth_number"], name="uq_bridge_tooth_number"),
        ]
