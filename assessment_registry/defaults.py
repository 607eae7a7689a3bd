"""
Default configuration for the assessment-registry app.

Every setting the app consumes is declared here. Projects override values
through the ``ASSESSMENT_REGISTRY`` Django setting using the same nested
layout; lookups go through ``assessment_registry.config_proxy``.
"""

from __future__ import annotations

from typing import Any

LIBRARY_VERSION = "0.1.0"
LIBRARY_NAME = "assessment-registry"


# --------------------------------------------------------------------------- #
# Per-assessment item count rules used by the form activation gate
# --------------------------------------------------------------------------- #
FORM_ITEM_COUNT_RULES: dict[str, dict[str, int]] = {
    "FL-LNF": {"min": 100, "max": 100},
    "FL-ORF": {"min": 1, "max": 1},
    "FL-WRF": {"min": 40, "max": 50},
    "FL-PSF": {"min": 20, "max": 20},
    "PA-OONS": {"min": 20, "max": 20},
    "PA-RHYM": {"min": 20, "max": 20},
    "PA-SYLS": {"min": 20, "max": 20},
    "PA-PHON": {"min": 20, "max": 20},
    "PH-LWID": {"min": 40, "max": 40},
    "PH-MPHY": {"min": 25, "max": 25},
    "PH-ALPH": {"min": 26, "max": 52},
    "VO-MORP": {"min": 24, "max": 24},
    "VO-VOCA": {"min": 24, "max": 24},
    "VO-EPVT": {"min": 30, "max": 30},
    "VO-RPVT": {"min": 30, "max": 30},
}


# --------------------------------------------------------------------------- #
# Library-wide defaults (grouped by feature area)
# --------------------------------------------------------------------------- #
LIBRARY_DEFAULTS: dict[str, Any] = {
    "import_settings": {
        "batch_size": 100,
        "default_actor": "CSV Import",
        "max_rows": 5000,
        "strict_correct_answer": False,
        "history_limit": 50,
    },
    "activation_settings": {
        "form_item_count_rules": FORM_ITEM_COUNT_RULES,
    },
}
