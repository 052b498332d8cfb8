"""Config Schemas — the shared app config document and admin payloads.

Invariants:
    - AppConfig defaults (empty redirect, zero clicks) fill any missing field
    - Unknown keys from the remote document are ignored, never rejected
    - redirect_url is either empty or an absolute http(s) URL
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from thaiat.core.url_rules import is_valid_url


class AppConfig(BaseModel):
    """Redirect URL and click counter shared by every visitor."""
    model_config = ConfigDict(extra="ignore")

    redirect_url: str = ""
    click_count: int = Field(0, ge=0)
    last_updated: int | None = None  # epoch milliseconds


class AdminConfigUpdate(BaseModel):
    """Admin edit of the redirect link."""
    redirect_url: str = Field("", max_length=2000)
    reset_clicks: bool = False

    @field_validator("redirect_url")
    @classmethod
    def check_redirect_url(cls, v: str) -> str:
        v = v.strip()
        if v and not is_valid_url(v):
            raise ValueError("redirect_url must be an absolute http(s) URL")
        return v


class DatabaseUrlUpdate(BaseModel):
    """Admin override of the remote store URL; empty clears it."""
    url: str = Field("", max_length=2000)

    @field_validator("url")
    @classmethod
    def check_url(cls, v: str) -> str:
        v = v.strip()
        if v and not is_valid_url(v):
            raise ValueError("url must be an absolute http(s) URL")
        return v


class ConfigSaveResponse(BaseModel):
    config: AppConfig
    remote_saved: bool


class DatabaseUrlResponse(BaseModel):
    url: str
    overridden: bool
