"""VK Callback API 이벤트 데이터 모델."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, Field


class VkEvent(BaseModel):
    """Callback API 이벤트.

    - type만 필수: 나머지 object 필드는 타입별로 의미가 다르다
    - object 스키마가 타입마다 달라 dict 그대로 보관한다
    """

    type: str
    object: dict[str, Any] = Field(default_factory=dict)
    group_id: int = 0
    event_id: str | None = None
    secret: str | None = None


class VkUser(BaseModel):
    """users.get 응답 항목."""

    id: int = 0
    first_name: str = ""
    last_name: str = ""

    @property
    def display_name(self) -> str:
        """'성 이름' 순서의 표시 이름."""
        return f"{self.last_name} {self.first_name}".strip()


@dataclass(frozen=True)
class Notification:
    """수신자 1명에게 보낼 알림."""

    text: str
    recipient_id: str
