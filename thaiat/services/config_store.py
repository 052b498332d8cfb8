"""Config Store — shared redirect link and click counter, remote first, local fallback.

Invariants:
    - Remote document is read/written as camelCase JSON (redirectUrl, clickCount,
      lastUpdated), the format the hosted realtime database already holds
    - get_app_config never raises for remote failures: network error, non-2xx,
      or an unreadable document fall back to the local copy, then to defaults
    - save_app_config always writes the local copy first
    - track_click never raises: any failure is logged and swallowed, so a
      background click can never fail the reading that scheduled it
    - Admin override URL (stored locally) wins over the configured default URL
      only when it is a valid http(s) URL

Design Decisions:
    - Local copy lives in the app_settings table instead of a file: the same
      async SQLAlchemy stack serves readiness checks and the fallback
    - httpx.AsyncClient injected so tests swap in httpx.MockTransport
    - Increment is read-modify-write, not a transaction: concurrent clicks can
      be lost, same as the browser implementation this replaces
"""

import logging
import time
from typing import Any

import httpx
from pydantic import ValidationError

from thaiat.core.domain_types import AppSettingKey
from thaiat.core.url_rules import is_valid_url
from thaiat.infrastructure.database import DatabaseSessionManager
from thaiat.models.app_setting import AppSetting
from thaiat.schemas.config import AppConfig

logger = logging.getLogger(__name__)

# InvalidURL is not an HTTPError subclass
_REMOTE_ERRORS = (httpx.HTTPError, httpx.InvalidURL)

_REMOTE_KEYS = {
    "redirect_url": "redirectUrl",
    "click_count": "clickCount",
    "last_updated": "lastUpdated",
}


def to_remote_document(config: AppConfig) -> dict[str, Any]:
    """AppConfig → camelCase JSON document (None fields omitted)."""
    return {
        _REMOTE_KEYS[k]: v
        for k, v in config.model_dump().items()
        if v is not None
    }


def from_remote_document(data: Any) -> AppConfig:
    """camelCase (or snake_case) JSON document → AppConfig merged over defaults."""
    if not isinstance(data, dict):
        return AppConfig()
    fields = {}
    for name, remote in _REMOTE_KEYS.items():
        if remote in data:
            fields[name] = data[remote]
        elif name in data:
            fields[name] = data[name]
    return AppConfig.model_validate(fields)


def _now_ms() -> int:
    return int(time.time() * 1000)


class ConfigStore:
    """Reads and writes AppConfig across the remote JSON store and local DB."""

    def __init__(
        self,
        db: DatabaseSessionManager,
        http: httpx.AsyncClient,
        default_url: str = "",
    ):
        self.db = db
        self.http = http
        self.default_url = default_url

    # --- store URL -----------------------------------------------------------

    async def get_database_url(self) -> str:
        """Override URL if valid, else the configured default ('' = local only)."""
        override = await self._read_local(AppSettingKey.DATABASE_URL)
        if isinstance(override, str) and is_valid_url(override):
            return override
        return self.default_url

    async def has_database_url_override(self) -> bool:
        override = await self._read_local(AppSettingKey.DATABASE_URL)
        return isinstance(override, str) and is_valid_url(override)

    async def set_database_url(self, url: str) -> None:
        """Persist override URL locally; empty string clears it."""
        url = url.strip()
        if url:
            await self._write_local(AppSettingKey.DATABASE_URL, url)
        else:
            await self._delete_local(AppSettingKey.DATABASE_URL)

    # --- config document -----------------------------------------------------

    async def get_app_config(self) -> AppConfig:
        url = await self.get_database_url()
        if is_valid_url(url):
            remote = await self._fetch_remote(url)
            if remote is not None:
                return remote
        local = await self._read_local(AppSettingKey.APP_CONFIG)
        if local is None:
            return AppConfig()
        try:
            return from_remote_document(local)
        except ValidationError as e:
            logger.warning(f"Local config unreadable, using defaults: {e}")
            return AppConfig()

    async def save_app_config(self, config: AppConfig) -> bool:
        """Write locally, then PUT remotely. Returns remote success (True if no remote)."""
        await self._write_local(AppSettingKey.APP_CONFIG, to_remote_document(config))
        url = await self.get_database_url()
        if not is_valid_url(url):
            return True
        try:
            response = await self.http.put(url, json=to_remote_document(config))
        except _REMOTE_ERRORS as e:
            logger.error(
                f"Remote config save failed: {e}",
                extra={"store": "remote"},
            )
            return False
        if response.is_success:
            return True
        logger.error(
            "Remote config save rejected",
            extra={"store": "remote", "status_code": response.status_code},
        )
        return False

    async def track_click(self) -> AppConfig | None:
        """Increment click_count and stamp last_updated; None on failure."""
        try:
            current = await self.get_app_config()
            updated = current.model_copy(update={
                "click_count": current.click_count + 1,
                "last_updated": _now_ms(),
            })
            await self.save_app_config(updated)
        except Exception as e:
            logger.error(f"Click tracking failed: {e}", exc_info=True)
            return None
        logger.info(
            "Click recorded", extra={"click_count": updated.click_count},
        )
        return updated

    # --- remote --------------------------------------------------------------

    async def _fetch_remote(self, url: str) -> AppConfig | None:
        try:
            response = await self.http.get(url)
        except _REMOTE_ERRORS as e:
            logger.warning(
                f"Remote config unreachable, using offline data: {e}",
                extra={"store": "remote"},
            )
            return None
        if not response.is_success:
            logger.warning(
                "Remote config returned error status, using offline data",
                extra={"store": "remote", "status_code": response.status_code},
            )
            return None
        try:
            return from_remote_document(response.json())
        except (ValueError, ValidationError) as e:
            logger.warning(
                f"Remote config unreadable, using offline data: {e}",
                extra={"store": "remote"},
            )
            return None

    # --- local ---------------------------------------------------------------

    async def _read_local(self, key: AppSettingKey) -> Any:
        async with self.db.session() as session:
            row = await session.get(AppSetting, key.value)
            return row.value if row else None

    async def _write_local(self, key: AppSettingKey, value: Any) -> None:
        async with self.db.session() as session:
            row = await session.get(AppSetting, key.value)
            if row is None:
                session.add(AppSetting(key=key.value, value=value))
            else:
                row.value = value
            await session.commit()

    async def _delete_local(self, key: AppSettingKey) -> None:
        async with self.db.session() as session:
            row = await session.get(AppSetting, key.value)
            if row is not None:
                await session.delete(row)
                await session.commit()


# Singleton (initialized on startup)
config_store: ConfigStore | None = None


def init_config_store(
    db: DatabaseSessionManager, default_url: str, timeout_seconds: float = 10.0,
) -> ConfigStore:
    global config_store
    config_store = ConfigStore(
        db, httpx.AsyncClient(timeout=timeout_seconds), default_url,
    )
    return config_store


async def close_config_store() -> None:
    global config_store
    if config_store is not None:
        await config_store.http.aclose()
        config_store = None


def get_config_store() -> ConfigStore:
    """FastAPI dependency for the shared ConfigStore."""
    if not config_store:
        raise RuntimeError("Config store not initialized")
    return config_store
