"""공통 fixture."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import pytest
import yaml
from vk_notifier.config import AppConfig, CallbackConfig, GroupConfig, RecipientsConfig, VkApiConfig

_ENV_VARS = (
    "CONFIRMATION_TOKEN", "TOKEN", "VKAPI", "USERID",
    "USERID_CONTROL", "GROUP_ID", "GROUP_NAME",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """개발 환경의 설정 환경변수가 테스트에 새지 않도록 제거."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def _reset_logging() -> Iterator[None]:
    """CLI 테스트가 붙인 핸들러 제거."""
    yield
    logging.getLogger("vk_notifier").handlers.clear()


@pytest.fixture()
def group() -> GroupConfig:
    return GroupConfig(id="12345", name="testclub")


@pytest.fixture()
def app_config(group: GroupConfig) -> AppConfig:
    """수신자 2명(primary + control) 설정."""
    return AppConfig(
        vk=VkApiConfig(access_token="test-token", api_version="5.131", timeout_sec=1.0),
        callback=CallbackConfig(confirmation_token="abc123"),
        group=group,
        recipients=RecipientsConfig(primary="111", control="222"),
    )


@pytest.fixture()
def single_recipient_config(app_config: AppConfig) -> AppConfig:
    return app_config.model_copy(update={"recipients": RecipientsConfig(primary="111")})


@pytest.fixture()
def sample_config_data() -> dict[str, Any]:
    """테스트용 config dict."""
    return {
        "vk": {
            "api_base": "https://api.vk.com/method",
            "api_version": "5.131",
            "timeout_sec": 5,
        },
        "callback": {"confirmation_token": "yaml-confirm"},
        "group": {"id": "12345", "name": "testclub"},
        "recipients": {"primary": "111", "control": ""},
    }


@pytest.fixture()
def tmp_config_file(tmp_path: Path, sample_config_data: dict[str, Any]) -> Path:
    """임시 config.yaml 파일."""
    config_path = tmp_path / "config.yaml"
    config_path.write_text(yaml.dump(sample_config_data), encoding="utf-8")
    return config_path


@pytest.fixture()
def like_video_event() -> dict[str, Any]:
    """like_add (video) 이벤트 샘플."""
    return {
        "type": "like_add",
        "object": {
            "liker_id": 555,
            "object_type": "video",
            "object_owner_id": -12345,
            "object_id": 42,
            "thread_reply_id": 0,
            "post_id": 0,
        },
        "group_id": 12345,
        "event_id": "a1b2c3",
    }


@pytest.fixture()
def message_new_event() -> dict[str, Any]:
    """message_new 이벤트 샘플 (5.103+ 스키마)."""
    return {
        "type": "message_new",
        "object": {
            "message": {
                "id": 10,
                "date": 1718440200,
                "from_id": 555,
                "peer_id": 555,
                "text": "Здравствуйте!",
            },
            "client_info": {"keyboard": True},
        },
        "group_id": 12345,
    }
