"""Admin routes for declarative settings pages."""

import logging
from typing import Any
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse, Response
from pydantic import BaseModel

from src.api.deps import AppConfig, get_config, get_current_user, get_registries, get_registry
from src.api.forms import normalize_submission, parse_bracketed_form
from src.components.fields import RenderContext
from src.components.render import NO_PERMISSION_MESSAGE, render_document, render_settings_page
from src.components.settings import AuthorizationError, ImportRejected, SettingsRegistry
from src.components.settings.models import ValidationError
from src.components.transfer import (
    create_nonce,
    export_action,
    export_settings,
    import_action,
    import_settings,
    verify_nonce,
)
from src.domain.principal import Principal

logger = logging.getLogger(__name__)

router = APIRouter()


# --- Response Models ---


class SettingsPageResponse(BaseModel):
    option_group: str
    slug: str
    title: str
    menu_title: str
    parent_slug: str | None
    capability: str
    icon_url: str | None
    position: int | None
    url: str


class SettingsPageListResponse(BaseModel):
    items: list[SettingsPageResponse]
    total: int


class ImportResponse(BaseModel):
    success: bool
    data: str | None = None


# --- Helpers ---


def save_action(option_group: str) -> str:
    return f"{option_group}-options"


def _require_capability(registry: SettingsRegistry, user: Principal) -> None:
    if not user.can(registry.page.capability):
        logger.warning(
            "User %s lacks %s for %s", user.id, registry.page.capability, registry.option_group
        )
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=NO_PERMISSION_MESSAGE)


def _render_context(
    request: Request,
    registry: SettingsRegistry,
    user: Principal,
    config: AppConfig,
) -> RenderContext:
    group = registry.option_group
    export_token = create_nonce(export_action(group), user.id, config.secret_key)
    export_path = request.app.url_path_for("export_settings_file", option_group=group)
    return RenderContext(
        option_group=group,
        hooks=registry.hooks,
        form_action=request.app.url_path_for("save_settings_page", option_group=group),
        save_token=create_nonce(save_action(group), user.id, config.secret_key),
        export_url=f"{export_path}?{urlencode({'_token': export_token})}",
        import_url=request.app.url_path_for("import_settings_file", option_group=group),
        import_token=create_nonce(import_action(group), user.id, config.secret_key),
    )


def _page_response(
    request: Request,
    registry: SettingsRegistry,
    user: Principal,
    config: AppConfig,
    *,
    status_code: int = 200,
    errors: list[ValidationError] | None = None,
    submitted: dict[str, Any] | None = None,
    updated: bool = False,
) -> HTMLResponse:
    ctx = _render_context(request, registry, user, config)
    try:
        body = render_settings_page(
            registry,
            ctx,
            can_access=user.can(registry.page.capability),
            errors=errors,
            submitted=submitted,
            updated=updated,
        )
    except AuthorizationError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e)) from e
    return HTMLResponse(render_document(registry.page.title, body), status_code=status_code)


def _reject_token(user: Principal, action: str) -> None:
    logger.warning("Rejected %s token for user %s", action, user.id)


def _import_response(status_code: int, message: str) -> JSONResponse:
    body = ImportResponse(success=False, data=message)
    return JSONResponse(status_code=status_code, content=body.model_dump())


# --- Routes ---


@router.get("", response_model=SettingsPageListResponse)
def list_settings_pages(
    request: Request,
    current_user: Principal = Depends(get_current_user),
    registries: dict[str, SettingsRegistry] = Depends(get_registries),
) -> SettingsPageListResponse:
    """List the settings pages the current user may open."""
    items = []
    for group, registry in sorted(registries.items()):
        page = registry.page
        if not current_user.can(page.capability):
            continue
        items.append(
            SettingsPageResponse(
                option_group=group,
                slug=registry.slug,
                title=page.title,
                menu_title=page.menu_title or page.title,
                parent_slug=page.parent_slug,
                capability=page.capability,
                icon_url=page.icon_url,
                position=page.position,
                url=request.app.url_path_for("get_settings_page", option_group=group),
            )
        )
    return SettingsPageListResponse(items=items, total=len(items))


@router.get("/{option_group}", response_class=HTMLResponse)
def get_settings_page(
    request: Request,
    settings_updated: bool = Query(False, alias="settings-updated"),
    current_user: Principal = Depends(get_current_user),
    registry: SettingsRegistry = Depends(get_registry),
    config: AppConfig = Depends(get_config),
) -> HTMLResponse:
    """Render the settings page."""
    return _page_response(request, registry, current_user, config, updated=settings_updated)


@router.post("/{option_group}", response_class=HTMLResponse)
async def save_settings_page(
    request: Request,
    current_user: Principal = Depends(get_current_user),
    registry: SettingsRegistry = Depends(get_registry),
    config: AppConfig = Depends(get_config),
) -> Response:
    """
    Save a submitted settings form.

    Replaces every stored value of the group. A rejected submission
    re-renders the form with the submitted input and returns 400.
    """
    _require_capability(registry, current_user)

    form = await request.form()
    token = form.get("_token")
    if not isinstance(token, str) or not verify_nonce(
        token, save_action(registry.option_group), current_user.id, config.secret_key
    ):
        _reject_token(current_user, save_action(registry.option_group))
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid token")

    values = parse_bracketed_form(form.multi_items(), registry.option_name)
    values = normalize_submission(registry, values)

    result = registry.save(values)
    if not result.success:
        return _page_response(
            request,
            registry,
            current_user,
            config,
            status_code=status.HTTP_400_BAD_REQUEST,
            errors=result.errors,
            submitted=values,
        )

    target = request.app.url_path_for("get_settings_page", option_group=registry.option_group)
    return RedirectResponse(
        f"{target}?settings-updated=true", status_code=status.HTTP_303_SEE_OTHER
    )


@router.get("/{option_group}/values")
def get_settings_values(
    current_user: Principal = Depends(get_current_user),
    registry: SettingsRegistry = Depends(get_registry),
) -> dict[str, Any]:
    """Current values keyed tab -> section -> field (section -> field untabbed)."""
    _require_capability(registry, current_user)
    return registry.get_settings()


@router.get("/{option_group}/export")
def export_settings_file(
    token: str | None = Query(None, alias="_token"),
    current_user: Principal = Depends(get_current_user),
    registry: SettingsRegistry = Depends(get_registry),
    config: AppConfig = Depends(get_config),
) -> Response:
    """Download the stored values as a JSON file."""
    _require_capability(registry, current_user)
    group = registry.option_group
    if not verify_nonce(token, export_action(group), current_user.id, config.secret_key):
        _reject_token(current_user, export_action(group))
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid token")

    body, filename = export_settings(registry.store, group)
    return Response(
        content=body,
        media_type="application/json; charset=utf-8",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


@router.post("/{option_group}/import", response_model=ImportResponse)
async def import_settings_file(
    request: Request,
    current_user: Principal = Depends(get_current_user),
    registry: SettingsRegistry = Depends(get_registry),
    config: AppConfig = Depends(get_config),
) -> JSONResponse:
    """Replace the stored values with an uploaded JSON blob."""
    _require_capability(registry, current_user)
    group = registry.option_group

    form = await request.form()
    token = form.get("_token")
    if not isinstance(token, str) or not verify_nonce(
        token, import_action(group), current_user.id, config.secret_key
    ):
        _reject_token(current_user, import_action(group))
        return _import_response(status.HTTP_403_FORBIDDEN, "Invalid token")

    payload = form.get("settings")
    raw: Any = await payload.read() if hasattr(payload, "read") else payload

    try:
        import_settings(registry.store, group, raw)
    except ImportRejected as e:
        return _import_response(status.HTTP_400_BAD_REQUEST, str(e))

    return JSONResponse(content={"success": True})
