"""
Render component - admin settings page output.
"""

from .component import (
    NO_PERMISSION_MESSAGE,
    render_document,
    render_field_rows,
    render_form_body,
    render_header,
    render_notices,
    render_section_intro,
    render_sections,
    render_settings_page,
    render_tab_links,
)

__all__ = [
    "NO_PERMISSION_MESSAGE",
    "render_document",
    "render_field_rows",
    "render_form_body",
    "render_header",
    "render_notices",
    "render_section_intro",
    "render_sections",
    "render_settings_page",
    "render_tab_links",
]
