"""
Render component - admin settings page.

Builds the full settings page for one option group: header, notices, tab
links, the form with every section and field row, and the save button.

Hooks consulted (all scoped to the registry's option group):
- filters: settings_page_title, show_tab_links, show_save_changes_button,
  settings_section_fields, {section_id}_settings_section_fields
- actions: settings_page_after_title, before_settings, before_settings_fields,
  before_settings_section, after_settings_section, before_tab_links,
  after_tab_links, {section_id}_before_h2, {section_id}_after_h2,
  before_field, before_field_{key}, after_field, after_field_{key},
  after_settings
Section-level hook names are prefixed with `{tab_id}_` on tabbed pages.
"""

from __future__ import annotations

import html
from typing import Any

from src.components.fields import RenderContext, field_label, render_field
from src.components.settings import (
    AuthorizationError,
    SettingsRegistry,
    ValidationError,
)
from src.components.visibility import compile_classes, join_classes
from src.rules.models import Section, Tab

NO_PERMISSION_MESSAGE = "You do not have sufficient permissions to access this page."


def _e(value: Any) -> str:
    return html.escape(str(value), quote=True)


def render_notices(
    errors: list[ValidationError] | None = None,
    updated: bool = False,
) -> str:
    parts = []
    if updated:
        parts.append('<div class="notice notice-success"><p>Settings saved.</p></div>')
    for error in errors or []:
        parts.append(
            f'<div class="notice notice-error" data-field="{_e(error.field)}">'
            f"<p>{_e(error.message)}</p></div>"
        )
    return "".join(parts)


def render_header(registry: SettingsRegistry) -> str:
    hooks = registry.hooks
    title = hooks.apply_filters("settings_page_title", registry.page.title)
    return (
        '<div class="psf-settings__header">'
        f"<h2>{title}</h2>"
        f'{hooks.do_action("settings_page_after_title")}'
        "</div>"
    )


def render_tab_links(registry: SettingsRegistry) -> str:
    hooks = registry.hooks
    if not hooks.apply_filters("show_tab_links", True):
        return ""

    parts = [hooks.do_action("before_tab_links"), '<ul class="psf-nav">']
    index = 0
    for tab in registry.tabs:
        if not registry.tab_has_settings(tab.id):
            continue
        active = "psf-nav__item--active" if index == 0 else ""
        link_class = join_classes("psf-nav__item-link", tab.css_class, compile_classes(tab))
        parts.append(
            f'<li class="psf-nav__item {active}">'
            f'<a class="{_e(link_class)}" href="#tab-{_e(tab.id)}">{tab.title}</a></li>'
        )
        index += 1
    parts.append(
        '<li class="psf-nav__item psf-nav__item--last">'
        '<button type="submit" name="submit" class="button button-primary button-large">'
        "Save Changes</button></li></ul>"
    )
    parts.append(hooks.do_action("after_tab_links"))
    return "".join(parts)


def render_section_intro(section: Section) -> str:
    parts = []
    classes = compile_classes(section)
    if classes:
        parts.append(f'<span class="{_e(classes)}"></span>')
    if section.section_description:
        parts.append(
            f'<div class="psf-section-description psf-section-description--'
            f'{_e(section.section_id)}">{section.section_description}</div>'
        )
    return "".join(parts)


def render_field_rows(
    registry: SettingsRegistry,
    section: Section,
    ctx: RenderContext,
    values: dict[str, Any] | None,
    hook_prefix: str,
) -> str:
    hooks = registry.hooks
    rows: dict[str, str] = {}

    for field in section.fields:
        args = registry.field_args(section, field, values)
        row_class = f' class="{_e(args.css_class)}"' if args.css_class else ""
        cell = (
            hooks.do_action("before_field")
            + hooks.do_action(f"before_field_{args.id}")
            + render_field(args, ctx)
            + hooks.do_action("after_field")
            + hooks.do_action(f"after_field_{args.id}")
        )
        rows[field.id] = (
            f'<tr{row_class}><th scope="row">{field_label(field)}</th><td>{cell}</td></tr>'
        )

    page = ctx.option_group
    rows = hooks.apply_filters(f"{hook_prefix}settings_section_fields", rows, page, section)
    rows = hooks.apply_filters(
        f"{hook_prefix}{section.section_id}_settings_section_fields", rows, page, section
    )

    prefix = f"{hook_prefix}{section.section_id}_settings_section"
    parts = []
    for key, row in rows.items():
        parts.append(hooks.do_action(f"{prefix}_before_field", page, section, key))
        parts.append(row)
        parts.append(hooks.do_action(f"{prefix}_after_field", page, section, key))
    return "".join(parts)


def render_sections(
    registry: SettingsRegistry,
    sections: list[Section],
    ctx: RenderContext,
    values: dict[str, Any] | None,
    tab: Tab | None = None,
) -> str:
    hooks = registry.hooks
    hook_prefix = f"{tab.id}_" if tab is not None else ""
    parts = []

    for section in sections:
        if section.section_title:
            parts.append(hooks.do_action(f"{hook_prefix}{section.section_id}_before_h2"))
            parts.append(f"<h2>{section.section_title}</h2>")
            parts.append(hooks.do_action(f"{hook_prefix}{section.section_id}_after_h2"))

        parts.append(render_section_intro(section))

        if not section.fields:
            continue

        table_id = f"{ctx.option_group}_{hook_prefix}{section.section_id}_settings"
        parts.append(f'<table id="{_e(table_id)}" class="form-table" role="presentation">')
        parts.append(render_field_rows(registry, section, ctx, values, hook_prefix))
        parts.append("</table>")

    return "".join(parts)


def render_form_body(
    registry: SettingsRegistry,
    ctx: RenderContext,
    values: dict[str, Any] | None,
) -> str:
    hooks = registry.hooks

    if not registry.has_tabs:
        return (
            '<div class="psf-section psf-tabless">'
            + hooks.do_action("before_settings_section")
            + render_sections(registry, registry.sections, ctx, values)
            + hooks.do_action("after_settings_section")
            + "</div>"
        )

    parts = []
    for index, tab in enumerate(registry.tabs):
        active = " psf-tab--active" if index == 0 else ""
        parts.append(
            f'<div id="tab-{_e(tab.id)}" class="psf-section psf-tab psf-tab--{_e(tab.id)}{active}">'
            '<div class="postbox">'
        )
        parts.append(hooks.do_action(f"{tab.id}_before_settings_section"))
        parts.append(
            render_sections(registry, registry.sections_for_tab(tab.id), ctx, values, tab)
        )
        parts.append(hooks.do_action(f"{tab.id}_after_settings_section", tab.id))
        parts.append("</div></div>")
    return "".join(parts)


def render_settings_page(
    registry: SettingsRegistry,
    ctx: RenderContext,
    *,
    can_access: bool,
    errors: list[ValidationError] | None = None,
    submitted: dict[str, Any] | None = None,
    updated: bool = False,
) -> str:
    """
    Render the complete settings page.

    Args:
        registry: Settings context of the option group
        ctx: Render context (form action, tokens, URLs)
        can_access: Whether the current user holds the page capability
        errors: Validation errors to display
        submitted: Rejected input to show instead of stored values
        updated: Show the "Settings saved." notice

    Raises:
        AuthorizationError: if can_access is False
    """
    if not can_access:
        raise AuthorizationError(NO_PERMISSION_MESSAGE)

    hooks = registry.hooks
    group = registry.option_group

    form = [
        f'<form action="{_e(ctx.form_action)}" method="post" novalidate '
        'enctype="multipart/form-data">',
        hooks.do_action("before_settings_fields"),
        f'<input type="hidden" name="option_page" value="{_e(group)}" />',
        f'<input type="hidden" name="_token" value="{_e(ctx.save_token)}" />',
        render_tab_links(registry) if registry.has_tabs else "",
        render_form_body(registry, ctx, submitted),
    ]
    if hooks.apply_filters("show_save_changes_button", True):
        form.append(
            '<p class="submit"><button type="submit" name="submit" '
            'class="button button-primary">Save Changes</button></p>'
        )
    form.append("</form>")

    return (
        f'<div class="psf-settings psf-settings--{_e(group)}">'
        + render_header(registry)
        + '<div class="psf-settings__content">'
        + render_notices(errors, updated)
        + hooks.do_action("before_settings")
        + "".join(form)
        + hooks.do_action("after_settings")
        + "</div></div>"
    )


def render_document(title: str, body: str) -> str:
    """Wrap a page fragment in a minimal HTML document."""
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1.0" />
    <title>{_e(title)}</title>
</head>
<body class="psf-admin">
    {body}
</body>
</html>"""
