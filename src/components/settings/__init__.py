"""
Settings component - declarative settings registry.
"""

from ._impl import SettingsRegistry, build_registries
from .component import (
    MISSING_VALUE,
    build_key,
    check_definition,
    collect_defaults,
    delete_settings,
    get_setting,
    iter_fields,
    materialize,
    option_name,
    resolve_value,
    run_save,
    sort_sections,
    validate_field_value,
    validate_url,
    validate_values,
    value_key,
)
from .errors import (
    AuthorizationError,
    ConfigurationError,
    ImportRejected,
    SettingsError,
    SettingsValidationError,
)
from .models import FieldArgs, SaveSettingsInput, SaveSettingsOutput, ValidationError
from .ports import OptionStorePort

__all__ = [
    # Registry
    "SettingsRegistry",
    "build_registries",
    # Functions
    "build_key",
    "check_definition",
    "collect_defaults",
    "delete_settings",
    "get_setting",
    "iter_fields",
    "materialize",
    "option_name",
    "resolve_value",
    "run_save",
    "sort_sections",
    "validate_field_value",
    "validate_url",
    "validate_values",
    "value_key",
    # Errors
    "AuthorizationError",
    "ConfigurationError",
    "ImportRejected",
    "SettingsError",
    "SettingsValidationError",
    # Models
    "FieldArgs",
    "SaveSettingsInput",
    "SaveSettingsOutput",
    "ValidationError",
    # Ports
    "OptionStorePort",
    # Constants
    "MISSING_VALUE",
]
