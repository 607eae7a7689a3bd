"""
Django app configuration for the assessment registry.

This module configures:
- Django application for assessment content entities
- Import and activation settings validation
"""

import logging

from django.apps import AppConfig as BaseAppConfig
from django.core.exceptions import ImproperlyConfigured

logger = logging.getLogger(__name__)


class AppConfig(BaseAppConfig):
    """Django app configuration for the assessment registry."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "assessment_registry"
    verbose_name = "Assessment Registry"
    label = "assessment_registry"

    def ready(self):
        """Validate library configuration once Django has loaded."""
        self._validate_configuration()

    def _validate_configuration(self):
        """Validate import and activation settings."""
        from .config_proxy import get_settings_proxy

        results = get_settings_proxy().validate()
        for warning in results["warnings"]:
            logger.warning(warning)
        if not results["valid"]:
            for error in results["errors"]:
                logger.error(error)
            raise ImproperlyConfigured("; ".join(results["errors"]))
        logger.debug("Assessment registry configuration validated")
