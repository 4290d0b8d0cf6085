"""사용자 이름 조회 및 알림 발송 모듈.

VK API 실패는 전부 로그만 남기고 삼킨다.
- 이름 조회 실패 → 빈 이름
- 발송 실패 → False 반환, 재시도 없음
"""

from __future__ import annotations

import logging

from vk_notifier.models import Notification, VkUser
from vk_notifier.vk_api import VkApiClient, VkApiError

logger = logging.getLogger(__name__)


def resolve_identity(client: VkApiClient, user_id: int) -> VkUser:
    """user_id의 이름을 조회한다. 실패하거나 응답이 비면 빈 이름을 돌려준다."""
    try:
        users = client.get_users(str(user_id))
    except VkApiError as e:
        logger.warning(
            "users.get failed for %s: %s", user_id, e,
            extra={"event_code": "IDENTITY_LOOKUP_FAILED", "user_id": user_id,
                   "status_code": e.status_code},
        )
        return VkUser(id=user_id)

    if not users:
        logger.warning(
            "users.get returned no users for %s", user_id,
            extra={"event_code": "IDENTITY_EMPTY", "user_id": user_id},
        )
        return VkUser(id=user_id)

    return users[0]


def dispatch(client: VkApiClient, message: str, recipient_id: str) -> bool:
    """messages.send로 메시지 1건을 보낸다.

    - 실패 시 False 반환 + 로그 기록
    - 성공 시 True 반환
    """
    try:
        result = client.send_message(recipient_id, message)
    except VkApiError as e:
        logger.error(
            "messages.send to %s failed: %s", recipient_id, e,
            extra={"event_code": "DISPATCH_FAILED", "recipient_id": recipient_id,
                   "status_code": e.status_code},
        )
        return False

    logger.info(
        "Notification sent to %s (response=%s)", recipient_id, result,
        extra={"event_code": "DISPATCHED", "recipient_id": recipient_id},
    )
    return True


def build_notifications(message: str, recipients: list[str]) -> list[Notification]:
    """수신자별 Notification 생성."""
    return [Notification(text=message, recipient_id=r) for r in recipients]


def dispatch_all(client: VkApiClient, message: str, recipients: list[str]) -> dict[str, bool]:
    """모든 수신자에게 순차 발송. 앞 수신자 실패와 무관하게 다음 수신자를 시도한다."""
    results: dict[str, bool] = {}
    for notification in build_notifications(message, recipients):
        results[notification.recipient_id] = dispatch(
            client, notification.text, notification.recipient_id,
        )
    return results
