"""
Management command running a CSV import through the full pipeline.
"""

from pathlib import Path

from django.core.management.base import BaseCommand, CommandError

from assessment_registry.importing.constants import ImportType
from assessment_registry.importing.services import (
    ImportServiceError,
    raise_for_blocking_issues,
    run_import,
)


class Command(BaseCommand):
    help = "Validate and import a CSV file of items, forms, banks, spec version sections or scoring metrics."

    def add_arguments(self, parser):
        parser.add_argument(
            "import_type",
            choices=ImportType.values,
            help="Import type tag.",
        )
        parser.add_argument("csv_path", help="Path to the CSV file.")
        parser.add_argument(
            "--assessment",
            dest="assessment_id",
            help="Current assessment context; rows for other assessments are rejected.",
        )
        parser.add_argument("--note", default="", help="Change note recorded with the import.")
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Validate only, without writing.",
        )
        parser.add_argument("--actor", help="Name recorded as the author of the import.")
        parser.add_argument(
            "--strict",
            action="store_true",
            help="Treat every missing reference as an error.",
        )
        parser.add_argument("--batch-size", type=int, help="Records per upsert batch.")

    def handle(self, *args, **options):
        path = Path(options["csv_path"])
        if not path.is_file():
            raise CommandError(f"File not found: {path}")

        verbosity = options["verbosity"]

        def report_progress(done, total, phase):
            if verbosity > 1:
                self.stdout.write(f"{phase} ({done}/{total})")

        pipeline = run_import(
            options["import_type"],
            path.read_bytes(),
            change_note=options["note"],
            context_assessment_id=options["assessment_id"],
            strict=options["strict"],
            dry_run=options["dry_run"],
            file_name=path.name,
            actor=options["actor"],
            on_progress=report_progress,
            batch_size=options["batch_size"],
        )

        for issue in pipeline.warnings:
            self.stdout.write(self.style.WARNING(f"Warning: {issue.display()}"))

        try:
            raise_for_blocking_issues(pipeline)
        except ImportServiceError as exc:
            raise CommandError(
                f"Import blocked ({exc.code}); nothing was written.\n{exc.message}"
            ) from exc

        if pipeline.result is None:
            self.stdout.write(
                self.style.SUCCESS(f"Validation passed for {pipeline.total_rows} rows (dry run)")
            )
            return

        result = pipeline.result
        summary = (
            f"Processed {result.rows_processed} rows: {result.rows_created} created, "
            f"{result.rows_updated} updated, {result.rows_failed} failed"
        )
        for message in result.warnings:
            self.stdout.write(self.style.WARNING(f"Warning: {message}"))
        if not result.success:
            for message in result.errors:
                self.stderr.write(self.style.ERROR(message))
            raise CommandError(f"{summary} ({len(result.errors)} error(s))")
        self.stdout.write(self.style.SUCCESS(summary))
