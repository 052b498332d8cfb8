"""App Config Routes — public redirect lookup and admin management.

Invariants:
    - Public endpoints expose only the redirect URL and click tracking
    - Admin endpoints require X-Admin-Token == settings.admin_token when one is set
    - Admin writes go through ConfigStore.save_app_config (local + remote)

Design Decisions:
    - Shared-token compare via hmac.compare_digest: the admin panel is a
      single-operator tool, not a user system
    - Empty admin_token disables the check (local development only)
"""

import hmac
import logging

from fastapi import APIRouter, Depends, Header

from thaiat.config import get_settings
from thaiat.core.errors import AdminAuthError
from thaiat.schemas.config import (
    AdminConfigUpdate,
    AppConfig,
    ConfigSaveResponse,
    DatabaseUrlResponse,
    DatabaseUrlUpdate,
)
from thaiat.services.config_store import ConfigStore, get_config_store

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1", tags=["config"])


def require_admin(x_admin_token: str | None = Header(None)) -> None:
    """Reject requests without the configured admin token."""
    expected = get_settings().admin_token
    if not expected:
        return
    if not x_admin_token or not hmac.compare_digest(
        x_admin_token.encode(), expected.encode(),
    ):
        raise AdminAuthError()


# --- public ------------------------------------------------------------------

@router.get("/config/redirect")
async def get_redirect(store: ConfigStore = Depends(get_config_store)):
    """Redirect URL for the sponsor gateway ('' when unset)."""
    config = await store.get_app_config()
    return {"redirect_url": config.redirect_url}


@router.post("/config/redirect/click")
async def track_redirect_click(store: ConfigStore = Depends(get_config_store)):
    """Count one click on the sponsor link."""
    updated = await store.track_click()
    return {
        "tracked": updated is not None,
        "redirect_url": updated.redirect_url if updated else "",
    }


# --- admin -------------------------------------------------------------------

@router.get(
    "/admin/config", response_model=AppConfig,
    dependencies=[Depends(require_admin)],
)
async def get_admin_config(store: ConfigStore = Depends(get_config_store)):
    return await store.get_app_config()


@router.put(
    "/admin/config", response_model=ConfigSaveResponse,
    dependencies=[Depends(require_admin)],
)
async def update_admin_config(
    body: AdminConfigUpdate, store: ConfigStore = Depends(get_config_store),
):
    """Save the redirect link; optionally reset the click counter."""
    current = await store.get_app_config()
    updated = current.model_copy(update={
        "redirect_url": body.redirect_url,
        "click_count": 0 if body.reset_clicks else current.click_count,
    })
    remote_saved = await store.save_app_config(updated)
    logger.info(
        "Admin config saved",
        extra={
            "click_count": updated.click_count,
            "store": "remote" if remote_saved else "local",
        },
    )
    return ConfigSaveResponse(config=updated, remote_saved=remote_saved)


@router.get(
    "/admin/database-url", response_model=DatabaseUrlResponse,
    dependencies=[Depends(require_admin)],
)
async def get_database_url(store: ConfigStore = Depends(get_config_store)):
    return DatabaseUrlResponse(
        url=await store.get_database_url(),
        overridden=await store.has_database_url_override(),
    )


@router.put(
    "/admin/database-url", response_model=DatabaseUrlResponse,
    dependencies=[Depends(require_admin)],
)
async def set_database_url(
    body: DatabaseUrlUpdate, store: ConfigStore = Depends(get_config_store),
):
    """Override the remote store URL; empty string restores the default."""
    await store.set_database_url(body.url)
    return DatabaseUrlResponse(
        url=await store.get_database_url(),
        overridden=await store.has_database_url_override(),
    )
