"""
Transfer component - JSON export/import guarded by action tokens.
"""

from .component import export_filename, export_settings, import_settings, parse_import
from .tokens import (
    NONCE_TTL_MINUTES,
    create_nonce,
    export_action,
    import_action,
    verify_nonce,
)

__all__ = [
    "NONCE_TTL_MINUTES",
    "create_nonce",
    "export_action",
    "export_filename",
    "export_settings",
    "import_action",
    "import_settings",
    "parse_import",
    "verify_nonce",
]
