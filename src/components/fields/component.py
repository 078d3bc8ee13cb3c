"""
Field renderers.

One handler per FieldType, dispatched through FIELD_RENDERERS. Every
handler receives the resolved FieldArgs and a RenderContext and returns an
HTML fragment. Stored values are always escaped; titles and descriptions
come from the (trusted) settings definition and are emitted as given.
"""

from __future__ import annotations

import html
import json
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from src.components.hooks import HookBus
from src.components.settings.models import FieldArgs
from src.rules.models import FieldType, SettingsField


@dataclass
class RenderContext:
    """Per-request data renderers need beyond the field itself."""

    option_group: str
    hooks: HookBus = field(default_factory=HookBus)
    form_action: str = ""
    save_token: str = ""
    export_url: str = ""
    import_url: str = ""
    import_token: str = ""


FieldRenderer = Callable[[FieldArgs, RenderContext], str]


def _e(value: Any) -> str:
    """Escape a value for an attribute or text node."""
    if value is None:
        return ""
    return html.escape(str(value), quote=True)


def _scalar(value: Any) -> str:
    if isinstance(value, list | dict):
        return ""
    return "" if value is None else str(value)


def _is_on(value: Any) -> bool:
    return value not in (None, "", "0", 0, False)


def render_description(args: FieldArgs, ctx: RenderContext) -> str:
    desc = args.field.desc
    if not desc:
        return ""
    fragment = f'<p class="description">{desc}</p>'
    return str(ctx.hooks.apply_filters("field_description", fragment, args))


def _input(kind: str, args: FieldArgs, css: str, extra: str = "") -> str:
    placeholder = (
        f' placeholder="{_e(args.field.placeholder)}"' if args.field.placeholder else ""
    )
    return (
        f'<input type="{kind}" name="{_e(args.name)}" id="{_e(args.id)}" '
        f'value="{_e(_scalar(args.value))}"{placeholder} '
        f'class="{_e((css + " " + args.css_class).strip())}"{extra} />'
    )


# --- Simple inputs ---


def render_text(args: FieldArgs, ctx: RenderContext) -> str:
    return _input("text", args, "regular-text") + render_description(args, ctx)


def render_hidden(args: FieldArgs, ctx: RenderContext) -> str:
    return _input("hidden", args, "hidden-field")


def render_number(args: FieldArgs, ctx: RenderContext) -> str:
    return _input("number", args, "regular-text") + render_description(args, ctx)


def render_password(args: FieldArgs, ctx: RenderContext) -> str:
    return _input("password", args, "regular-text") + render_description(args, ctx)


def render_time(args: FieldArgs, ctx: RenderContext) -> str:
    options = json.dumps(args.field.timepicker) if args.field.timepicker else ""
    extra = f' data-timepicker="{_e(options)}"'
    return _input("text", args, "timepicker regular-text", extra) + render_description(args, ctx)


def render_date(args: FieldArgs, ctx: RenderContext) -> str:
    options = json.dumps(args.field.datepicker) if args.field.datepicker else ""
    extra = f' data-datepicker="{_e(options)}"'
    return _input("text", args, "datepicker regular-text", extra) + render_description(args, ctx)


def render_color(args: FieldArgs, ctx: RenderContext) -> str:
    picker_id = f"{args.id}_cp"
    return (
        '<div class="psf-color">'
        + _input("text", args, "psf-color__input", f' data-picker="{_e(picker_id)}"')
        + f'<div id="{_e(picker_id)}" class="psf-color__picker"></div>'
        + render_description(args, ctx)
        + "</div>"
    )


def render_file(args: FieldArgs, ctx: RenderContext) -> str:
    button_id = f"{args.id}_button"
    return (
        _input("text", args, "regular-text")
        + f' <input type="button" class="button psf-browse" id="{_e(button_id)}" '
        f'value="Browse" data-target="{_e(args.id)}" />'
        + render_description(args, ctx)
    )


# --- Text areas ---


def render_textarea(args: FieldArgs, ctx: RenderContext) -> str:
    return (
        f'<textarea name="{_e(args.name)}" id="{_e(args.id)}" '
        f'placeholder="{_e(args.field.placeholder)}" rows="5" cols="60" '
        f'class="{_e(args.css_class)}">{_e(_scalar(args.value))}</textarea>'
        + render_description(args, ctx)
    )


def render_editor(args: FieldArgs, ctx: RenderContext) -> str:
    settings = dict(args.field.editor_settings or {})
    settings["textarea_name"] = args.name
    return (
        f'<textarea name="{_e(args.name)}" id="{_e(args.id)}" rows="10" cols="60" '
        f'class="psf-editor {_e(args.css_class)}" '
        f'data-editor="{_e(json.dumps(settings))}">{_e(_scalar(args.value))}</textarea>'
        + render_description(args, ctx)
    )


def render_code_editor(args: FieldArgs, ctx: RenderContext) -> str:
    return (
        f'<textarea name="{_e(args.name)}" id="{_e(args.id)}" '
        f'placeholder="{_e(args.field.placeholder)}" rows="5" cols="60" '
        f'class="psf-code-editor {_e(args.css_class)}" '
        f'data-mimetype="{_e(args.field.mimetype)}">{_e(_scalar(args.value))}</textarea>'
        + render_description(args, ctx)
    )


# --- Choices ---


def render_select(args: FieldArgs, ctx: RenderContext) -> str:
    current = _scalar(args.value)
    parts = [f'<select name="{_e(args.name)}" id="{_e(args.id)}" class="{_e(args.css_class)}">']

    for value, text in args.field.choices.items():
        if isinstance(text, dict):
            parts.append(f'<optgroup label="{_e(value)}">')
            for group_value, group_text in text.items():
                selected = ' selected="selected"' if str(group_value) == current else ""
                parts.append(
                    f'<option value="{_e(group_value)}"{selected}>{_e(group_text)}</option>'
                )
            parts.append("</optgroup>")
            continue

        selected = ' selected="selected"' if str(value) == current else ""
        parts.append(f'<option value="{_e(value)}"{selected}>{_e(text)}</option>')

    parts.append("</select>")
    return "".join(parts) + render_description(args, ctx)


def render_radio(args: FieldArgs, ctx: RenderContext) -> str:
    current = _scalar(args.value)
    parts = []
    for value, text in args.field.choices.items():
        checked = ' checked="checked"' if str(value) == current else ""
        parts.append(
            f'<label><input type="radio" name="{_e(args.name)}" id="{_e(f"{args.id}_{value}")}" '
            f'value="{_e(value)}" class="{_e(args.css_class)}"{checked}> {_e(text)}</label><br />'
        )
    return "".join(parts) + render_description(args, ctx)


def render_checkbox(args: FieldArgs, ctx: RenderContext) -> str:
    checked = ' checked="checked"' if _is_on(args.value) else ""
    return (
        f'<input type="hidden" name="{_e(args.name)}" value="0" />'
        f'<label><input type="checkbox" name="{_e(args.name)}" id="{_e(args.id)}" value="1" '
        f'class="{_e(args.css_class)}"{checked}> {_e(args.field.desc)}</label>'
    )


def render_toggle(args: FieldArgs, ctx: RenderContext) -> str:
    checked = ' checked="checked"' if _is_on(args.value) else ""
    return (
        f'<input type="hidden" name="{_e(args.name)}" value="0" />'
        f'<label class="switch"><input type="checkbox" name="{_e(args.name)}" '
        f'id="{_e(args.id)}" value="1" class="{_e(args.css_class)}"{checked}> '
        f'{_e(args.field.desc)}<span class="slider"></span></label>'
    )


def _selected_set(value: Any) -> set[str]:
    if isinstance(value, list):
        return {str(v) for v in value}
    return set()


def render_checkboxes(args: FieldArgs, ctx: RenderContext) -> str:
    selected = _selected_set(args.value)
    parts = [
        f'<input type="hidden" name="{_e(args.name)}" value="0" />',
        '<ul class="psf-list psf-list--checkboxes">',
    ]
    for value, text in args.field.choices.items():
        checked = ' checked="checked"' if str(value) in selected else ""
        parts.append(
            f'<li><label><input type="checkbox" name="{_e(args.name)}[]" '
            f'id="{_e(f"{args.id}_{value}")}" value="{_e(value)}" '
            f'class="{_e(args.css_class)}"{checked}> {_e(text)}</label></li>'
        )
    parts.append("</ul>")
    return "".join(parts) + render_description(args, ctx)


def _image_choice(choice: Any) -> tuple[str, str]:
    if isinstance(choice, dict):
        return str(choice.get("image", "")), str(choice.get("text", ""))
    return "", str(choice)


def render_image_checkboxes(args: FieldArgs, ctx: RenderContext) -> str:
    selected = _selected_set(args.value)
    parts = [
        f'<input type="hidden" name="{_e(args.name)}" value="0" />',
        '<ul class="psf-visual-field psf-visual-field--image-checkboxes psf-visual-field--grid">',
    ]
    for value, choice in args.field.choices.items():
        image, text = _image_choice(choice)
        is_checked = str(value) in selected
        item_class = "psf-visual-field__item--checked" if is_checked else ""
        checked = ' checked="checked"' if is_checked else ""
        parts.append(
            f'<li class="psf-visual-field__item {item_class}"><label>'
            f'<div class="psf-visual-field__img-wrap"><img src="{_e(image)}"></div>'
            f'<div class="psf-visual-field__item-footer">'
            f'<input type="checkbox" name="{_e(args.name)}[]" id="{_e(f"{args.id}_{value}")}" '
            f'value="{_e(value)}" class="{_e(args.css_class)}"{checked}>'
            f'<span class="psf-visual-field__item-text">{_e(text)}</span>'
            f"</div></label></li>"
        )
    parts.append("</ul>")
    return "".join(parts) + render_description(args, ctx)


def render_image_radio(args: FieldArgs, ctx: RenderContext) -> str:
    current = _scalar(args.value)
    count = len(args.field.choices)
    parts = [
        '<ul class="psf-visual-field psf-visual-field--image-radio psf-visual-field--grid '
        f'psf-visual-field--col-{count}">'
    ]
    for value, choice in args.field.choices.items():
        image, text = _image_choice(choice)
        is_checked = str(value) == current
        item_class = "psf-visual-field__item--checked" if is_checked else ""
        checked = ' checked="checked"' if is_checked else ""
        parts.append(
            f'<li class="psf-visual-field__item {item_class}"><label>'
            f'<div class="psf-visual-field__img-wrap"><img src="{_e(image)}"></div>'
            f'<div class="psf-visual-field__item-footer">'
            f'<input type="radio" name="{_e(args.name)}" id="{_e(f"{args.id}_{value}")}" '
            f'value="{_e(value)}" class="{_e(args.css_class)}"{checked}>'
            f'<span class="psf-visual-field__item-text">{_e(text)}</span>'
            f"</div></label></li>"
        )
    parts.append("</ul>")
    return "".join(parts) + render_description(args, ctx)


# --- Composite fields ---


def render_multiinputs(args: FieldArgs, ctx: RenderContext) -> str:
    default = args.field.default if isinstance(args.field.default, dict) else {}
    titles = list(default.keys())
    if isinstance(args.value, dict):
        values = list(args.value.values())
    elif isinstance(args.value, list):
        values = list(args.value)
    else:
        values = list(default.values())

    parts = ['<div class="psf-multifields">']
    for i, value in enumerate(values):
        title = titles[i] if i < len(titles) else ""
        parts.append(
            '<div class="psf-multifields__field">'
            f'<input type="text" name="{_e(args.name)}[]" id="{_e(f"{args.id}_{i}")}" '
            f'value="{_e(_scalar(value))}" class="regular-text {_e(args.css_class)}" '
            f'placeholder="{_e(args.field.placeholder)}" />'
            f"<br><span>{_e(title)}</span></div>"
        )
    parts.append("</div>")
    return "".join(parts) + render_description(args, ctx)


def render_group_row(args: FieldArgs, ctx: RenderContext, row: int = 0, blank: bool = False) -> str:
    """Render one repeatable row of a group field (or the blank row template)."""
    rows = args.value if isinstance(args.value, list) else []
    row_value = rows[row] if row < len(rows) and isinstance(rows[row], dict) else {}
    row_id = row_value.get("row_id") or row
    row_class = "alternate" if row % 2 == 0 else ""

    parts = [
        f'<tr class="psf-group__row {row_class}">',
        f'<td class="psf-group__row-index"><span>{row}</span></td>',
        '<td class="psf-group__row-fields">',
        f'<input type="hidden" class="psf-group__row-id" name="{_e(args.name)}[{row}][row_id]" '
        f'value="{"" if blank else _e(row_id)}" />',
    ]

    for subfield in args.field.subfields:
        sub_args = FieldArgs(
            field=subfield,
            id=f"{args.id}_{row}_{subfield.id}",
            name=f"{args.name}[{row}][{subfield.id}]",
            value="" if blank else row_value.get(subfield.id, ""),
            css_class=subfield.css_class,
        )
        wrapper = f"psf-group__field-wrapper psf-group__field-wrapper--{subfield.type.value}"
        parts.append(
            f'<div class="{wrapper}">'
            f'<label for="{_e(sub_args.id)}" class="psf-group__field-label">'
            f"{subfield.title}</label>"
            f"{render_field(sub_args, ctx)}</div>"
        )

    parts.append("</td>")
    parts.append(
        '<td class="psf-group__row-actions">'
        f'<a href="#" class="psf-group__row-add" data-template="{_e(args.id)}_template">+</a>'
        '<a href="#" class="psf-group__row-remove">&times;</a>'
        "</td></tr>"
    )
    return "".join(parts)


def render_group(args: FieldArgs, ctx: RenderContext) -> str:
    if not args.field.subfields:
        return render_description(args, ctx)

    rows = args.value if isinstance(args.value, list) else []
    row_count = len(rows) or 1
    body = "".join(render_group_row(args, ctx, row) for row in range(row_count))
    template = render_group_row(args, ctx, 0, blank=True)
    return (
        '<table class="widefat psf-group" cellspacing="0"><tbody>'
        + body
        + "</tbody></table>"
        + f'<script type="text/html" id="{_e(args.id)}_template">{template}</script>'
        + render_description(args, ctx)
    )


# --- Import / export / custom ---


def render_export(args: FieldArgs, ctx: RenderContext) -> str:
    label = _scalar(args.value) or "Export Settings"
    return (
        f'<a target="_blank" href="{_e(ctx.export_url)}" class="button" '
        f'name="{_e(args.name)}" id="{_e(args.id)}">{_e(label)}</a>'
        + render_description(args, ctx)
    )


def render_import(args: FieldArgs, ctx: RenderContext) -> str:
    label = _scalar(args.value) or "Import Settings"
    group = ctx.option_group
    return (
        '<div class="psf-import"><div class="psf-import__false-btn">'
        f'<input type="file" name="psf-import-field" class="psf-import__file-field" '
        f'id="{_e(args.id)}" accept=".json"/>'
        f'<button type="button" name="{_e(group)}_import_button" class="button psf-import__button" '
        f'id="{_e(args.id)}_button" data-url="{_e(ctx.import_url)}">{_e(label)}</button>'
        f'<input type="hidden" class="{_e(group)}_import_nonce" value="{_e(ctx.import_token)}" />'
        f'<input type="hidden" class="{_e(group)}_import_option_group" value="{_e(group)}" />'
        '</div><span class="spinner"></span></div>'
        + render_description(args, ctx)
    )


def render_custom(args: FieldArgs, ctx: RenderContext) -> str:
    output = args.field.output
    if callable(output):
        return str(output(args))
    if output is not None:
        return str(output)
    return _scalar(args.field.default)


FIELD_RENDERERS: dict[FieldType, FieldRenderer] = {
    FieldType.TEXT: render_text,
    FieldType.HIDDEN: render_hidden,
    FieldType.NUMBER: render_number,
    FieldType.TIME: render_time,
    FieldType.DATE: render_date,
    FieldType.EXPORT: render_export,
    FieldType.IMPORT: render_import,
    FieldType.GROUP: render_group,
    FieldType.IMAGE_CHECKBOXES: render_image_checkboxes,
    FieldType.IMAGE_RADIO: render_image_radio,
    FieldType.SELECT: render_select,
    FieldType.PASSWORD: render_password,
    FieldType.TEXTAREA: render_textarea,
    FieldType.RADIO: render_radio,
    FieldType.CHECKBOX: render_checkbox,
    FieldType.TOGGLE: render_toggle,
    FieldType.CHECKBOXES: render_checkboxes,
    FieldType.COLOR: render_color,
    FieldType.FILE: render_file,
    FieldType.EDITOR: render_editor,
    FieldType.CODE_EDITOR: render_code_editor,
    FieldType.CUSTOM: render_custom,
    FieldType.MULTIINPUTS: render_multiinputs,
}


def render_field(args: FieldArgs, ctx: RenderContext) -> str:
    """Render a field through its type's handler."""
    return FIELD_RENDERERS[args.field.type](args, ctx)


def field_label(field: SettingsField) -> str:
    """Row heading: title, optional tooltip/inline link and subtitle."""
    tooltip = ""
    subtitle = field.subtitle
    link = field.link

    if link is not None and link.url:
        target = ' target="_blank"' if link.external else ""
        if link.type == "tooltip":
            text = (
                f'<i class="psf-link-icon" title="{_e(link.text)}">'
                f'<span class="screen-reader-text">{_e(link.text)}</span></i>'
            )
        else:
            text = _e(link.text)
        anchor = f'<a class="psf-link__link" href="{_e(link.url)}"{target}>{text}</a>'
        if link.type == "tooltip":
            tooltip = anchor
        else:
            subtitle = f"{subtitle}<br/><br/>{anchor}" if subtitle else anchor

    title = f'<span class="psf-label">{field.title} {tooltip}</span>'
    if subtitle:
        title += f'<span class="psf-subtitle">{subtitle}</span>'
    return title
