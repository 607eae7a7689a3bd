import uuid

import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Assessment",
            fields=[
                ("assessment_id", models.CharField(max_length=120, primary_key=True, serialize=False)),
                (
                    "component_code",
                    models.CharField(
                        choices=[
                            ("PA", "Phonological Awareness"),
                            ("PH", "Phonics"),
                            ("FL", "Fluency"),
                            ("VO", "Vocabulary"),
                            ("RC", "Reading Comprehension"),
                        ],
                        max_length=2,
                    ),
                ),
                ("name", models.CharField(blank=True, default="", max_length=255)),
                (
                    "status",
                    models.CharField(
                        choices=[("draft", "Draft"), ("active", "Active"), ("retired", "Retired")],
                        default="draft",
                        max_length=16,
                    ),
                ),
                ("current_spec_version_id", models.CharField(blank=True, max_length=160, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "db_table": "assessments",
                "ordering": ["component_code", "assessment_id"],
            },
        ),
        migrations.CreateModel(
            name="ContentBank",
            fields=[
                ("content_bank_id", models.CharField(max_length=160, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=255)),
                ("target_bank_size", models.PositiveIntegerField(default=0)),
                ("current_bank_size", models.PositiveIntegerField(default=0)),
                ("equivalence_set_required", models.BooleanField(default=False)),
                ("differentiation_keys", models.JSONField(blank=True, default=list)),
                (
                    "status",
                    models.CharField(
                        choices=[("empty", "Empty"), ("in-progress", "In Progress"), ("ready", "Ready")],
                        default="empty",
                        max_length=16,
                    ),
                ),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "linked_assessment",
                    models.ForeignKey(
                        db_constraint=False,
                        on_delete=django.db.models.deletion.DO_NOTHING,
                        related_name="content_banks",
                        to="assessment_registry.assessment",
                    ),
                ),
            ],
            options={
                "db_table": "content_banks",
                "ordering": ["content_bank_id"],
            },
        ),
        migrations.CreateModel(
            name="SpecVersion",
            fields=[
                ("spec_version_id", models.CharField(max_length=160, primary_key=True, serialize=False)),
                ("section_a", models.JSONField(blank=True, default=dict)),
                ("section_b", models.JSONField(blank=True, default=dict)),
                ("section_c", models.JSONField(blank=True, default=dict)),
                ("section_d", models.JSONField(blank=True, default=dict)),
                ("section_e", models.JSONField(blank=True, default=dict)),
                ("section_f", models.JSONField(blank=True, default=dict)),
                ("section_g", models.JSONField(blank=True, default=dict)),
                ("section_h", models.JSONField(blank=True, default=dict)),
                ("section_i", models.JSONField(blank=True, default=dict)),
                ("section_j", models.JSONField(blank=True, default=dict)),
                (
                    "validation_status",
                    models.CharField(
                        choices=[
                            ("incomplete", "Incomplete"),
                            ("valid", "Valid"),
                            ("needs-review", "Needs Review"),
                        ],
                        default="incomplete",
                        max_length=16,
                    ),
                ),
                (
                    "completeness_percent",
                    models.PositiveSmallIntegerField(
                        default=0,
                        validators=[django.core.validators.MaxValueValidator(100)],
                    ),
                ),
                ("change_log", models.JSONField(blank=True, default=list)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "assessment",
                    models.ForeignKey(
                        db_constraint=False,
                        on_delete=django.db.models.deletion.DO_NOTHING,
                        related_name="spec_versions",
                        to="assessment_registry.assessment",
                    ),
                ),
            ],
            options={
                "db_table": "spec_versions",
                "ordering": ["spec_version_id"],
            },
        ),
        migrations.CreateModel(
            name="Form",
            fields=[
                ("form_id", models.CharField(max_length=200, primary_key=True, serialize=False)),
                ("grade_or_level_tag", models.CharField(max_length=16)),
                ("form_number", models.PositiveIntegerField()),
                (
                    "status",
                    models.CharField(
                        choices=[("draft", "Draft"), ("active", "Active"), ("retired", "Retired")],
                        default="draft",
                        max_length=16,
                    ),
                ),
                ("equivalence_set_id", models.CharField(blank=True, max_length=160, null=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "assessment",
                    models.ForeignKey(
                        db_constraint=False,
                        on_delete=django.db.models.deletion.DO_NOTHING,
                        related_name="forms",
                        to="assessment_registry.assessment",
                    ),
                ),
                (
                    "content_bank",
                    models.ForeignKey(
                        db_constraint=False,
                        on_delete=django.db.models.deletion.DO_NOTHING,
                        related_name="forms",
                        to="assessment_registry.contentbank",
                    ),
                ),
            ],
            options={
                "db_table": "forms",
                "ordering": ["form_id"],
                "indexes": [
                    models.Index(
                        fields=["assessment", "grade_or_level_tag"],
                        name="forms_assessm_6f2c1d_idx",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="Item",
            fields=[
                ("item_id", models.CharField(max_length=255, primary_key=True, serialize=False)),
                ("item_type", models.CharField(max_length=64)),
                ("sequence_number", models.PositiveIntegerField()),
                ("content_payload", models.JSONField(blank=True, default=dict)),
                ("scoring_tags", models.JSONField(blank=True, default=list)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "form",
                    models.ForeignKey(
                        db_constraint=False,
                        on_delete=django.db.models.deletion.DO_NOTHING,
                        related_name="items",
                        to="assessment_registry.form",
                    ),
                ),
            ],
            options={
                "db_table": "items",
                "ordering": ["form_id", "sequence_number"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("form", "sequence_number"),
                        name="item_unique_sequence_per_form",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="ScoringOutput",
            fields=[
                ("scoring_model_id", models.CharField(max_length=160, primary_key=True, serialize=False)),
                ("raw_metrics_schema", models.JSONField(blank=True, default=list)),
                ("derived_metrics_schema", models.JSONField(blank=True, default=list)),
                ("formulas", models.JSONField(blank=True, default=list)),
                ("flags", models.JSONField(blank=True, default=list)),
                ("thresholds", models.JSONField(blank=True, default=list)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "assessment",
                    models.ForeignKey(
                        db_constraint=False,
                        on_delete=django.db.models.deletion.DO_NOTHING,
                        related_name="scoring_outputs",
                        to="assessment_registry.assessment",
                    ),
                ),
            ],
            options={
                "db_table": "scoring_outputs",
                "ordering": ["scoring_model_id"],
            },
        ),
        migrations.CreateModel(
            name="AssessmentBank",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "assessment",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="bank_links",
                        to="assessment_registry.assessment",
                    ),
                ),
                (
                    "content_bank",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="assessment_links",
                        to="assessment_registry.contentbank",
                    ),
                ),
            ],
            options={
                "db_table": "assessment_banks",
                "constraints": [
                    models.UniqueConstraint(
                        fields=("assessment", "content_bank"),
                        name="assessment_bank_unique_link",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="ImportHistory",
            fields=[
                (
                    "import_id",
                    models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False),
                ),
                ("assessment_id", models.CharField(blank=True, db_index=True, max_length=120, null=True)),
                (
                    "import_type",
                    models.CharField(
                        choices=[
                            ("items", "Items"),
                            ("forms", "Forms"),
                            ("banks", "Content Banks"),
                            ("specVersion", "Spec Version Sections"),
                            ("scoring", "Scoring Model"),
                        ],
                        max_length=16,
                    ),
                ),
                ("rows_processed", models.PositiveIntegerField(default=0)),
                ("rows_created", models.PositiveIntegerField(default=0)),
                ("rows_updated", models.PositiveIntegerField(default=0)),
                ("rows_failed", models.PositiveIntegerField(default=0)),
                ("change_note", models.TextField(blank=True, null=True)),
                ("file_name", models.CharField(blank=True, max_length=255, null=True)),
                ("imported_at", models.DateTimeField(db_index=True)),
                ("imported_by", models.CharField(max_length=150)),
            ],
            options={
                "db_table": "import_history",
                "ordering": ["-imported_at"],
                "indexes": [
                    models.Index(
                        fields=["assessment_id", "imported_at"],
                        name="import_hist_assessm_3b9e0a_idx",
                    )
                ],
            },
        ),
    ]
