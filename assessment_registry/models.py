"""Assessment content entities managed by the import pipeline and activation gates."""

from __future__ import annotations

from django.core.validators import MaxValueValidator
from django.db import models

SPEC_SECTION_NAMES = tuple(f"section_{letter}" for letter in "abcdefghij")


class ComponentCode(models.TextChoices):
    PA = "PA", "Phonological Awareness"
    PH = "PH", "Phonics"
    FL = "FL", "Fluency"
    VO = "VO", "Vocabulary"
    RC = "RC", "Reading Comprehension"


class AssessmentStatus(models.TextChoices):
    DRAFT = "draft", "Draft"
    ACTIVE = "active", "Active"
    RETIRED = "retired", "Retired"


class ValidationStatus(models.TextChoices):
    INCOMPLETE = "incomplete", "Incomplete"
    VALID = "valid", "Valid"
    NEEDS_REVIEW = "needs-review", "Needs Review"


class ContentBankStatus(models.TextChoices):
    EMPTY = "empty", "Empty"
    IN_PROGRESS = "in-progress", "In Progress"
    READY = "ready", "Ready"


class FormStatus(models.TextChoices):
    DRAFT = "draft", "Draft"
    ACTIVE = "active", "Active"
    RETIRED = "retired", "Retired"


class Assessment(models.Model):
    assessment_id = models.CharField(max_length=120, primary_key=True)
    component_code = models.CharField(max_length=2, choices=ComponentCode.choices)
    name = models.CharField(max_length=255, blank=True, default="")
    status = models.CharField(
        max_length=16,
        choices=AssessmentStatus.choices,
        default=AssessmentStatus.DRAFT,
    )
    current_spec_version_id = models.CharField(max_length=160, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        app_label = "assessment_registry"
        db_table = "assessments"
        ordering = ["component_code", "assessment_id"]

    def __str__(self) -> str:
        return self.assessment_id


class SpecVersion(models.Model):
    spec_version_id = models.CharField(max_length=160, primary_key=True)
    assessment = models.ForeignKey(
        Assessment,
        on_delete=models.DO_NOTHING,
        db_constraint=False,
        related_name="spec_versions",
    )
    section_a = models.JSONField(default=dict, blank=True)
    section_b = models.JSONField(default=dict, blank=True)
    section_c = models.JSONField(default=dict, blank=True)
    section_d = models.JSONField(default=dict, blank=True)
    section_e = models.JSONField(default=dict, blank=True)
    section_f = models.JSONField(default=dict, blank=True)
    section_g = models.JSONField(default=dict, blank=True)
    section_h = models.JSONField(default=dict, blank=True)
    section_i = models.JSONField(default=dict, blank=True)
    section_j = models.JSONField(default=dict, blank=True)
    validation_status = models.CharField(
        max_length=16,
        choices=ValidationStatus.choices,
        default=ValidationStatus.INCOMPLETE,
    )
    completeness_percent = models.PositiveSmallIntegerField(
        default=0, validators=[MaxValueValidator(100)]
    )
    change_log = models.JSONField(default=list, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        app_label = "assessment_registry"
        db_table = "spec_versions"
        ordering = ["spec_version_id"]

    def __str__(self) -> str:
        return self.spec_version_id


class ContentBank(models.Model):
    content_bank_id = models.CharField(max_length=160, primary_key=True)
    linked_assessment = models.ForeignKey(
        Assessment,
        on_delete=models.DO_NOTHING,
        db_constraint=False,
        related_name="content_banks",
    )
    name = models.CharField(max_length=255)
    target_bank_size = models.PositiveIntegerField(default=0)
    current_bank_size = models.PositiveIntegerField(default=0)
    equivalence_set_required = models.BooleanField(default=False)
    differentiation_keys = models.JSONField(default=list, blank=True)
    status = models.CharField(
        max_length=16,
        choices=ContentBankStatus.choices,
        default=ContentBankStatus.EMPTY,
    )
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        app_label = "assessment_registry"
        db_table = "content_banks"
        ordering = ["content_bank_id"]

    def __str__(self) -> str:
        return self.content_bank_id


class AssessmentBank(models.Model):
    assessment = models.ForeignKey(
        Assessment, on_delete=models.CASCADE, related_name="bank_links"
    )
    content_bank = models.ForeignKey(
        ContentBank, on_delete=models.CASCADE, related_name="assessment_links"
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        app_label = "assessment_registry"
        db_table = "assessment_banks"
        constraints = [
            models.UniqueConstraint(
                fields=["assessment", "content_bank"],
                name="assessment_bank_unique_link",
            )
        ]

    def __str__(self) -> str:
        return f"{self.assessment_id} -> {self.content_bank_id}"


class Form(models.Model):
    form_id = models.CharField(max_length=200, primary_key=True)
    assessment = models.ForeignKey(
        Assessment,
        on_delete=models.DO_NOTHING,
        db_constraint=False,
        related_name="forms",
    )
    content_bank = models.ForeignKey(
        ContentBank,
        on_delete=models.DO_NOTHING,
        db_constraint=False,
        related_name="forms",
    )
    grade_or_level_tag = models.CharField(max_length=16)
    form_number = models.PositiveIntegerField()
    status = models.CharField(
        max_length=16,
        choices=FormStatus.choices,
        default=FormStatus.DRAFT,
    )
    equivalence_set_id = models.CharField(max_length=160, null=True, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        app_label = "assessment_registry"
        db_table = "forms"
        ordering = ["form_id"]
        indexes = [
            models.Index(
                fields=["assessment", "grade_or_level_tag"],
                name="forms_assessm_6f2c1d_idx",
            ),
        ]

    def __str__(self) -> str:
        return self.form_id


class Item(models.Model):
    item_id = models.CharField(max_length=255, primary_key=True)
    form = models.ForeignKey(
        Form,
        on_delete=models.DO_NOTHING,
        db_constraint=False,
        related_name="items",
    )
    item_type = models.CharField(max_length=64)
    sequence_number = models.PositiveIntegerField()
    content_payload = models.JSONField(default=dict, blank=True)
    scoring_tags = models.JSONField(default=list, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        app_label = "assessment_registry"
        db_table = "items"
        ordering = ["form_id", "sequence_number"]
        constraints = [
            models.UniqueConstraint(
                fields=["form", "sequence_number"],
                name="item_unique_sequence_per_form",
            )
        ]

    def __str__(self) -> str:
        return self.item_id


class ScoringOutput(models.Model):
    scoring_model_id = models.CharField(max_length=160, primary_key=True)
    assessment = models.ForeignKey(
        Assessment,
        on_delete=models.DO_NOTHING,
        db_constraint=False,
        related_name="scoring_outputs",
    )
    raw_metrics_schema = models.JSONField(default=list, blank=True)
    derived_metrics_schema = models.JSONField(default=list, blank=True)
    formulas = models.JSONField(default=list, blank=True)
    flags = models.JSONField(default=list, blank=True)
    thresholds = models.JSONField(default=list, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        app_label = "assessment_registry"
        db_table = "scoring_outputs"
        ordering = ["scoring_model_id"]

    def __str__(self) -> str:
        return self.scoring_model_id


# Import history lives with the importing package but must be discoverable here.
from .importing.models import ImportHistory  # noqa: E402,F401
