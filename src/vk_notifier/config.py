"""YAML 설정 로딩 + Pydantic 모델."""

from __future__ import annotations

import os
from pathlib import Path

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

_DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[2] / "config.yaml"

VK_BASE_URL = "https://vk.com"


# ── 설정 모델 ──────────────────────────────────────────


class VkApiConfig(BaseModel):
    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)

    api_base: str = "https://api.vk.com/method"
    api_version: str = "5.131"
    access_token: str = ""
    timeout_sec: float = 60.0


class CallbackConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    confirmation_token: str = ""


class GroupConfig(BaseModel):
    """커뮤니티 식별자. 딥링크 prefix는 id/name에서 파생된다."""

    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)

    id: str = ""
    name: str = ""

    @property
    def wall_url(self) -> str:
        return f"{VK_BASE_URL}/{self.name}?w=wall-{self.id}_"

    @property
    def photo_album_url(self) -> str:
        return f"{VK_BASE_URL}/photo-{self.id}_"

    @property
    def album_url(self) -> str:
        return f"{VK_BASE_URL}/album-{self.id}_"

    @property
    def video_url(self) -> str:
        return f"{VK_BASE_URL}/{self.name}?z=video-{self.id}_"

    @property
    def photo_url(self) -> str:
        return f"{VK_BASE_URL}/{self.name}?z=photo-{self.id}_"

    @property
    def topic_url(self) -> str:
        return f"{VK_BASE_URL}/topic-{self.id}_"

    @property
    def market_url(self) -> str:
        return f"{VK_BASE_URL}/{self.name}?w=product-{self.id}_"


class RecipientsConfig(BaseModel):
    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)

    primary: str
    control: str = ""  # 선택: 동일 메시지를 추가로 받는 계정

    @field_validator("primary")
    @classmethod
    def primary_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("recipients.primary must be set")
        return v.strip()

    @property
    def ids(self) -> list[str]:
        """알림 수신자 목록 (primary → control 순)."""
        ids = [self.primary]
        if self.control.strip():
            ids.append(self.control.strip())
        return ids


class AppConfig(BaseModel):
    """애플리케이션 전체 설정."""

    model_config = ConfigDict(frozen=True)

    vk: VkApiConfig = Field(default_factory=VkApiConfig)
    callback: CallbackConfig = Field(default_factory=CallbackConfig)
    group: GroupConfig = Field(default_factory=GroupConfig)
    recipients: RecipientsConfig


# ── 로딩 ───────────────────────────────────────────────

# 환경변수 → (섹션, 필드)
_ENV_OVERRIDES: dict[str, tuple[str, str]] = {
    "CONFIRMATION_TOKEN": ("callback", "confirmation_token"),
    "TOKEN": ("vk", "access_token"),
    "VKAPI": ("vk", "api_version"),
    "USERID": ("recipients", "primary"),
    "USERID_CONTROL": ("recipients", "control"),
    "GROUP_ID": ("group", "id"),
    "GROUP_NAME": ("group", "name"),
}


def load_config(path: Path | None = None) -> AppConfig:
    """YAML 설정 파일을 로딩하고 Pydantic 모델로 검증한다.

    환경변수 우선순위: 시스템 환경변수 > .env 파일 > config.yaml 기본값
    기본 경로의 config.yaml이 없으면 환경변수만으로 구성한다 (Lambda 배포).
    """
    config_path = path or _DEFAULT_CONFIG_PATH

    # .env 파일 로딩: config.yaml과 같은 디렉터리의 .env를 탐색
    dotenv_path = config_path.parent / ".env"
    load_dotenv(dotenv_path=dotenv_path, override=False)

    if config_path.exists():
        with open(config_path) as f:
            raw = yaml.safe_load(f)
        if raw is None:
            raise ValueError(f"Empty config file: {config_path}")
    elif path is not None:
        raise FileNotFoundError(f"Config file not found: {config_path}")
    else:
        raw = {}

    # 환경변수 오버라이드
    for env_name, (section, key) in _ENV_OVERRIDES.items():
        if value := os.environ.get(env_name):
            raw.setdefault(section, {})
            raw[section][key] = value

    return AppConfig.model_validate(raw)
