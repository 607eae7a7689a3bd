"""
Configuration management for the assessment registry.

Settings are resolved from the ``ASSESSMENT_REGISTRY`` Django setting first
and fall back to ``LIBRARY_DEFAULTS``.
"""

from typing import Any, Optional

from django.conf import settings

from .defaults import LIBRARY_DEFAULTS


class SettingsProxy:
    """
    Proxy for accessing assessment registry settings with hierarchical resolution.

    Settings are resolved in the following order:
    1. Global Django settings (ASSESSMENT_REGISTRY)
    2. Library defaults (LIBRARY_DEFAULTS)
    """

    def __init__(self):
        self._cache: dict[str, Any] = {}

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a setting value with hierarchical resolution and caching.

        Args:
            key: Setting key to retrieve (dot notation, e.g. ``import_settings.batch_size``)
            default: Default value if setting is not found

        Returns:
            The setting value from the highest priority source
        """
        if key in self._cache:
            return self._cache[key]

        django_value = self._get_nested_value(
            getattr(settings, "ASSESSMENT_REGISTRY", {}), key
        )
        if django_value is not None:
            self._cache[key] = django_value
            return django_value

        library_value = self._get_nested_value(LIBRARY_DEFAULTS, key)
        if library_value is not None:
            self._cache[key] = library_value
            return library_value

        self._cache[key] = default
        return default

    def _get_nested_value(self, data: dict[str, Any], key: str) -> Any:
        """
        Get nested value from dictionary using dot notation.

        Args:
            data: Dictionary to search in
            key: Key to retrieve (supports dot notation for nested access)

        Returns:
            The value or None if not found
        """
        if not isinstance(data, dict):
            return None

        current = data
        for k in key.split("."):
            if not isinstance(current, dict) or k not in current:
                return None
            current = current[k]

        return current

    def clear_cache(self) -> None:
        """
        Clear the settings cache.
        """
        self._cache.clear()

    def validate(self) -> dict[str, Any]:
        """
        Validate current settings configuration.

        Returns:
            Dictionary with validation results
        """
        validation_results = {"valid": True, "errors": [], "warnings": []}

        batch_size = self.get("import_settings.batch_size")
        if not isinstance(batch_size, int) or isinstance(batch_size, bool) or batch_size < 1:
            validation_results["errors"].append(
                f"Setting 'import_settings.batch_size' must be a positive integer (got {batch_size!r})"
            )
            validation_results["valid"] = False

        if not self.get("import_settings.default_actor"):
            validation_results["warnings"].append(
                "Setting 'import_settings.default_actor' is empty; change log entries will be unattributed"
            )

        rules = self.get("activation_settings.form_item_count_rules")
        if rules is not None and not isinstance(rules, dict):
            validation_results["errors"].append(
                "Setting 'activation_settings.form_item_count_rules' must be a mapping"
            )
            validation_results["valid"] = False

        return validation_results


def get_settings_proxy() -> SettingsProxy:
    """
    Get a fresh settings proxy instance.

    Returns:
        SettingsProxy instance
    """
    return SettingsProxy()


def get_setting(key: str, default: Any = None) -> Any:
    """
    Get a setting value using the hierarchical settings system.

    Args:
        key: Setting key to retrieve
        default: Default value if setting is not found

    Returns:
        The setting value from the highest priority source
    """
    return get_settings_proxy().get(key, default)
