"""
Management command reporting whether an entity may be activated.
"""

from django.core.management.base import BaseCommand, CommandError

from assessment_registry.activation.gates import CHAIN_STEP_LABELS, format_gate_error
from assessment_registry.activation.services import (
    evaluate_assessment_gate,
    evaluate_form_gate,
    evaluate_spec_version_gate,
)
from assessment_registry.store import RecordNotFoundError


class Command(BaseCommand):
    help = "Evaluate the activation gate of an assessment, spec version or form."

    def add_arguments(self, parser):
        parser.add_argument(
            "entity",
            choices=["assessment", "spec-version", "form"],
            help="Kind of entity to check.",
        )
        parser.add_argument("record_id", help="Primary key of the entity.")

    def handle(self, *args, **options):
        entity = options["entity"]
        record_id = options["record_id"]
        chain = None
        try:
            if entity == "assessment":
                gate, chain = evaluate_assessment_gate(record_id)
            elif entity == "spec-version":
                gate = evaluate_spec_version_gate(record_id)
            else:
                gate = evaluate_form_gate(record_id)
        except RecordNotFoundError as exc:
            raise CommandError(exc.message) from exc

        if chain is not None:
            missing = ", ".join(CHAIN_STEP_LABELS[step] for step in chain.missing_steps)
            self.stdout.write(
                f"Chain: {chain.completed_steps}/{chain.total_steps} steps ({chain.percent}%)"
                + (f", missing: {missing}" if missing else "")
            )
        for warning in gate.warnings:
            self.stdout.write(self.style.WARNING(f"Warning: {warning}"))

        if not gate.allowed:
            raise CommandError(format_gate_error(gate))
        self.stdout.write(self.style.SUCCESS(f"{entity} {record_id} can be activated"))
