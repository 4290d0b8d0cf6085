"""Callback API 이벤트 처리기 + AWS Lambda 엔트리포인트.

decode → classify → resolve identity → format → dispatch → "ok"
응답은 확인 토큰(confirmation) 또는 "ok" 둘 중 하나다.
"""

from __future__ import annotations

import functools
import logging
from typing import Any

import orjson
from pydantic import ValidationError

from vk_notifier.config import AppConfig, load_config
from vk_notifier.formatter import EventFormatter
from vk_notifier.logging_config import setup_logging
from vk_notifier.models import VkEvent
from vk_notifier.notifier import dispatch_all, resolve_identity
from vk_notifier.vk_api import VkApiClient

logger = logging.getLogger(__name__)

ACK = "ok"


def handle_event(
    raw: dict[str, Any],
    *,
    config: AppConfig,
    client: VkApiClient | None = None,
    dry_run: bool = False,
) -> str:
    """이벤트 1건을 처리하고 Callback API 응답 문자열을 돌려준다.

    Args:
        raw: 디코딩된 Callback API JSON
        config: 애플리케이션 설정
        client: 주입할 VK 클라이언트 (없으면 처음 필요할 때 생성하고 끝나면 닫는다)
        dry_run: True이면 이름 조회/발송 없이 문구만 로그

    Returns:
        confirmation이면 확인 토큰, 그 외에는 "ok"
    """
    try:
        event = VkEvent.model_validate(raw)
    except ValidationError as e:
        # 플랫폼 재전송으로 고쳐지지 않으므로 확인 응답만 보낸다
        logger.error(
            "Invalid callback payload: %s", e,
            extra={"event_code": "INVALID_PAYLOAD"},
        )
        return ACK

    logger.info(
        "Received event: %s (group_id=%d)", event.type, event.group_id,
        extra={"event_code": "EVENT_RECEIVED", "event_type": event.type},
    )

    if dry_run:
        result = EventFormatter(config.group, config.callback.confirmation_token).format(event)
        if result.terminal:
            return result.message or ""
        if result.message is not None:
            logger.info("[dry-run] %s", result.message, extra={"event_type": event.type})
        return ACK

    # confirmation/무시 타입은 VK를 호출하지 않으므로 클라이언트는 처음 필요할 때 만든다
    owned: list[VkApiClient] = []

    def get_client() -> VkApiClient:
        if client is not None:
            return client
        if not owned:
            owned.append(VkApiClient(config.vk))
        return owned[0]

    try:
        formatter = EventFormatter(
            config.group,
            config.callback.confirmation_token,
            resolve_name=lambda user_id: resolve_identity(get_client(), user_id),
        )
        result = formatter.format(event)

        if result.terminal:
            return result.message or ""
        if result.suppressed:
            return ACK

        results = dispatch_all(get_client(), result.message or "", config.recipients.ids)
        failed = [r for r, ok in results.items() if not ok]
        if failed:
            logger.warning(
                "Dispatch failed for %d/%d recipients", len(failed), len(results),
                extra={"event_code": "DISPATCH_PARTIAL", "event_type": event.type},
            )
        return ACK
    finally:
        for owned_client in owned:
            owned_client.close()


@functools.lru_cache(maxsize=1)
def _get_config() -> AppConfig:
    """프로세스당 1회 설정 로딩 (Lambda 콜드 스타트)."""
    setup_logging(json_format=True)
    return load_config()


def lambda_handler(event: dict[str, Any], context: Any) -> Any:
    """AWS Lambda 핸들러.

    - Callback JSON이 그대로 들어오면 응답 문자열을 반환
    - API Gateway 프록시 이벤트(body 문자열)면 statusCode/body 형태로 반환
    """
    config = _get_config()

    body = event.get("body")
    if isinstance(body, str):
        try:
            payload = orjson.loads(body)
        except orjson.JSONDecodeError as e:
            logger.error("Undecodable request body: %s", e, extra={"event_code": "INVALID_BODY"})
            payload = {}
        return {
            "statusCode": 200,
            "headers": {"Content-Type": "text/plain"},
            "body": handle_event(payload, config=config),
        }

    return handle_event(event, config=config)
