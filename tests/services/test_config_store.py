"""Config Store tests — remote document, local fallback, click tracking.

Tests cover:
    - Remote camelCase document read and written as-is
    - Remote failures (down, error status) fall back to the local copy
    - save_app_config writes locally even when the remote rejects it
    - track_click increments and stamps last_updated, never raises
    - Database URL override: valid URL wins, empty clears, invalid ignored
"""

import httpx
import pytest

from thaiat.core.domain_types import AppSettingKey
from thaiat.core.errors import DatabaseError
from thaiat.schemas.config import AppConfig
from thaiat.services.config_store import from_remote_document, to_remote_document

REMOTE_URL = "https://store.example.test/destiny_config.json"

OTHER_URL = "https://backup.example.test/config.json"


# --- document conversion --------------------------------------------------------

def test_to_remote_document_uses_camel_case_and_omits_none():
    doc = to_remote_document(AppConfig(redirect_url="https://a.test", click_count=2))
    assert doc == {"redirectUrl": "https://a.test", "clickCount": 2}


def test_from_remote_document_accepts_both_key_styles():
    camel = from_remote_document({"redirectUrl": "https://a.test", "clickCount": 9})
    snake = from_remote_document({"redirect_url": "https://a.test", "click_count": 9})
    assert camel == snake
    assert camel.click_count == 9


@pytest.mark.parametrize("data", [None, [], "text", 42])
def test_from_remote_document_non_object_gives_defaults(data):
    assert from_remote_document(data) == AppConfig()


# --- reads ----------------------------------------------------------------------

async def test_get_app_config_reads_remote(config_store, remote):
    remote.document = {
        "redirectUrl": "https://sponsor.test", "clickCount": 7, "lastUpdated": 1700,
    }
    config = await config_store.get_app_config()
    assert config.redirect_url == "https://sponsor.test"
    assert config.click_count == 7
    assert config.last_updated == 1700
    assert remote.requests == [("GET", REMOTE_URL)]


async def test_get_app_config_empty_remote_gives_defaults(config_store, remote):
    remote.document = None
    assert await config_store.get_app_config() == AppConfig()


async def test_remote_down_falls_back_to_local(config_store, remote):
    remote.down = True
    await config_store.save_app_config(
        AppConfig(redirect_url="https://local.test", click_count=3),
    )
    config = await config_store.get_app_config()
    assert config.redirect_url == "https://local.test"
    assert config.click_count == 3


async def test_remote_error_status_falls_back_to_local(config_store, remote):
    remote.status = 401
    await config_store.save_app_config(AppConfig(click_count=11))
    assert (await config_store.get_app_config()).click_count == 11


async def test_no_remote_and_no_local_gives_defaults(local_store, remote):
    assert await local_store.get_app_config() == AppConfig()
    assert remote.requests == []


async def test_unreadable_local_copy_gives_defaults(local_store):
    await local_store._write_local(AppSettingKey.APP_CONFIG, {"clickCount": -5})
    assert await local_store.get_app_config() == AppConfig()


# --- writes ---------------------------------------------------------------------

async def test_save_app_config_writes_remote_and_local(config_store, remote):
    config = AppConfig(redirect_url="https://sponsor.test", click_count=1, last_updated=5)
    assert await config_store.save_app_config(config) is True
    assert remote.document == {
        "redirectUrl": "https://sponsor.test", "clickCount": 1, "lastUpdated": 5,
    }
    local = await config_store._read_local(AppSettingKey.APP_CONFIG)
    assert local == remote.document


async def test_save_app_config_reports_remote_failure(config_store, remote):
    remote.down = True
    assert await config_store.save_app_config(AppConfig(click_count=2)) is False
    local = await config_store._read_local(AppSettingKey.APP_CONFIG)
    assert local["clickCount"] == 2


async def test_save_without_remote_succeeds_locally(local_store, remote):
    assert await local_store.save_app_config(AppConfig(click_count=4)) is True
    assert remote.requests == []
    assert (await local_store.get_app_config()).click_count == 4


# --- track_click ----------------------------------------------------------------

async def test_track_click_increments_remote_counter(config_store, remote):
    remote.document = {"redirectUrl": "https://sponsor.test", "clickCount": 4}
    updated = await config_store.track_click()
    assert updated.click_count == 5
    assert updated.redirect_url == "https://sponsor.test"
    assert remote.document["clickCount"] == 5
    assert remote.document["lastUpdated"] > 0


async def test_track_click_counts_locally_when_remote_down(config_store, remote):
    remote.down = True
    first = await config_store.track_click()
    second = await config_store.track_click()
    assert first.click_count == 1
    assert second.click_count == 2


async def test_track_click_returns_none_on_database_failure(local_store, monkeypatch):
    async def broken(*args, **kwargs):
        raise DatabaseError("disk full", "commit")

    monkeypatch.setattr(local_store, "_write_local", broken)
    assert await local_store.track_click() is None


# --- database URL override --------------------------------------------------------

async def test_database_url_defaults_to_configured(config_store):
    assert await config_store.get_database_url() == REMOTE_URL
    assert await config_store.has_database_url_override() is False


async def test_database_url_override_and_clear(config_store, remote):
    await config_store.set_database_url(f"  {OTHER_URL} ")
    assert await config_store.get_database_url() == OTHER_URL
    assert await config_store.has_database_url_override() is True

    await config_store.get_app_config()
    assert remote.requests[-1] == ("GET", OTHER_URL)

    await config_store.set_database_url("")
    assert await config_store.get_database_url() == REMOTE_URL
    assert await config_store.has_database_url_override() is False


async def test_invalid_override_is_ignored(config_store):
    await config_store._write_local(AppSettingKey.DATABASE_URL, "not a url")
    assert await config_store.get_database_url() == REMOTE_URL
    assert await config_store.has_database_url_override() is False


async def test_unrequestable_override_is_ignored(config_store, remote):
    """urlparse accepts this URL but httpx rejects its port."""
    await config_store._write_local(
        AppSettingKey.DATABASE_URL, "http://[::1]x/config.json",
    )
    assert await config_store.get_database_url() == REMOTE_URL
    assert await config_store.has_database_url_override() is False
    await config_store.get_app_config()
    assert remote.requests == [("GET", REMOTE_URL)]


# --- remote client errors outside HTTPError ---------------------------------------

async def test_invalid_url_from_client_falls_back_to_local(config_store, remote):
    remote.error = httpx.InvalidURL("Invalid port: 'x'")
    assert await config_store.save_app_config(AppConfig(click_count=6)) is False
    assert (await config_store.get_app_config()).click_count == 6


async def test_track_click_survives_invalid_url(config_store, remote):
    remote.error = httpx.InvalidURL("Invalid port: 'x'")
    updated = await config_store.track_click()
    assert updated.click_count == 1


async def test_track_click_returns_none_on_any_failure(local_store, monkeypatch):
    async def broken():
        raise RuntimeError("unexpected")

    monkeypatch.setattr(local_store, "get_app_config", broken)
    assert await local_store.track_click() is None
