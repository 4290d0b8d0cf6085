"""VK API 동기 클라이언트.

users.get / messages.send 두 메서드만 호출한다.
- httpx 기반, 클라이언트 단위 고정 타임아웃
- 재시도 없음: 실패는 VkApiError로 올리고 호출자가 로그 후 무시한다
- HTTP 200이어도 {"error": {...}} 응답은 실패로 취급
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from vk_notifier.config import VkApiConfig
from vk_notifier.models import VkUser

logger = logging.getLogger(__name__)


class VkApiError(Exception):
    """VK API 호출 실패.

    status_code 0은 전송 단계 실패(연결/타임아웃)를 뜻한다.
    """

    def __init__(self, status_code: int, message: str, *, error_code: int | None = None):
        self.status_code = status_code
        self.error_code = error_code
        super().__init__(f"VK API error {status_code}: {message}")


class VkApiClient:
    """VK API 동기 클라이언트."""

    def __init__(self, config: VkApiConfig, token: str | None = None) -> None:
        self._token = token or config.access_token
        if not self._token:
            raise RuntimeError("TOKEN 환경변수가 설정되지 않았습니다")

        self._config = config
        self._client = httpx.Client(
            base_url=config.api_base.rstrip("/"),
            timeout=config.timeout_sec,
        )

    def _call(self, method: str, params: dict[str, Any]) -> dict[str, Any]:
        """공통 GET 요청 (access_token, v 자동 추가)."""
        query = {**params, "access_token": self._token, "v": self._config.api_version}

        try:
            resp = self._client.get(f"/{method}", params=query)
            resp.raise_for_status()
            body = resp.json()
        except httpx.HTTPStatusError as e:
            raise VkApiError(e.response.status_code, str(e)) from e
        except httpx.HTTPError as e:
            raise VkApiError(0, f"{type(e).__name__}: {e}") from e
        except ValueError as e:
            raise VkApiError(resp.status_code, f"Invalid JSON body: {e}") from e

        if not isinstance(body, dict):
            raise VkApiError(resp.status_code, f"Unexpected body type: {type(body).__name__}")

        error = body.get("error")
        if error:
            raise VkApiError(
                resp.status_code,
                str(error.get("error_msg", "unknown error")),
                error_code=error.get("error_code"),
            )

        return body

    def get_users(self, user_ids: str) -> list[VkUser]:
        """users.get 호출.

        Args:
            user_ids: 쉼표로 구분된 사용자 ID

        Returns:
            VkUser 리스트 (없는 ID면 빈 리스트)

        Raises:
            VkApiError: 호출 실패
        """
        body = self._call("users.get", {"user_ids": user_ids})
        items = body.get("response") or []
        if not isinstance(items, list):
            raise VkApiError(200, f"Unexpected users.get response: {type(items).__name__}")

        try:
            return [VkUser.model_validate(item) for item in items]
        except ValidationError as e:
            raise VkApiError(200, f"Invalid users.get item: {e}") from e

    def send_message(self, user_id: str, message: str, *, random_id: int = 0) -> Any:
        """messages.send 호출. VK가 돌려준 response 값을 그대로 반환한다."""
        body = self._call(
            "messages.send",
            {"message": message, "user_id": user_id, "random_id": random_id},
        )
        logger.debug("messages.send response: %s", body)
        return body.get("response")

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> VkApiClient:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()
