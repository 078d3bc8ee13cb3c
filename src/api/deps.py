import os
from functools import lru_cache
from pathlib import Path
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer

from src.adapters.sqlite.migrator import SQLiteMigrator
from src.adapters.sqlite.options import SQLiteOptionStore
from src.api.auth_utils import DEFAULT_SECRET_KEY, decode_access_token, principal_from_claims
from src.components.settings import OptionStorePort, SettingsRegistry, build_registries
from src.domain.principal import Principal
from src.rules.loader import load_definitions


# --- Config ---
class AppConfig:
    def __init__(self) -> None:
        self.data_dir = Path(os.environ.get("PSF_DATA_DIR", "./data"))
        self.db_path = str(self.data_dir / "options.db")
        self.definitions_dir = Path(os.environ.get("PSF_DEFINITIONS_DIR", "./definitions"))
        self.migrations_dir = Path(os.environ.get("PSF_MIGRATIONS_DIR", "./migrations"))
        self.secret_key = os.environ.get("PSF_SECRET_KEY", DEFAULT_SECRET_KEY)


@lru_cache
def get_config() -> AppConfig:
    return AppConfig()


# --- Storage ---
@lru_cache
def get_option_store(config: AppConfig = Depends(get_config)) -> OptionStorePort:
    config.data_dir.mkdir(parents=True, exist_ok=True)
    SQLiteMigrator(config.db_path, str(config.migrations_dir)).run_migrations()
    return SQLiteOptionStore(config.db_path)


# --- Registries ---
@lru_cache
def get_registries(
    config: AppConfig = Depends(get_config),
    store: OptionStorePort = Depends(get_option_store),
) -> dict[str, SettingsRegistry]:
    return build_registries(load_definitions(config.definitions_dir), store)


def get_registry(
    option_group: str,
    registries: dict[str, SettingsRegistry] = Depends(get_registries),
) -> SettingsRegistry:
    registry = registries.get(option_group)
    if registry is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown option group '{option_group}'",
        )
    return registry


# --- Auth ---
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/token", auto_error=False)


async def get_current_user(
    request: Request,
    token: Annotated[str | None, Depends(oauth2_scheme)],
    config: AppConfig = Depends(get_config),
) -> Principal:
    # 1. Try Cookie first (HttpOnly)
    cookie_token = request.cookies.get("access_token")
    if cookie_token and cookie_token.startswith("Bearer "):
        token = cookie_token.split(" ")[1]

    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    # 2. Decode
    payload = decode_access_token(token, config.secret_key)
    if not payload:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    principal = principal_from_claims(payload)
    if principal is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
        )
    return principal
