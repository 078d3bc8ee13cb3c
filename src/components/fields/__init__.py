"""
Fields component - HTML renderers, one per field type.
"""

from .component import (
    FIELD_RENDERERS,
    FieldRenderer,
    RenderContext,
    field_label,
    render_description,
    render_field,
    render_group_row,
)

__all__ = [
    "FIELD_RENDERERS",
    "FieldRenderer",
    "RenderContext",
    "field_label",
    "render_description",
    "render_field",
    "render_group_row",
]
