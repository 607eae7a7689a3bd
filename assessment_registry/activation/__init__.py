"""Activation gate engine and the gated status write path."""

from .gates import (
    ChainStatus,
    GateResult,
    calculate_chain_status,
    can_activate_assessment,
    can_activate_form,
    can_activate_spec_version,
    format_gate_error,
)

__all__ = [
    "ChainStatus",
    "GateResult",
    "calculate_chain_status",
    "can_activate_assessment",
    "can_activate_form",
    "can_activate_spec_version",
    "format_gate_error",
]
