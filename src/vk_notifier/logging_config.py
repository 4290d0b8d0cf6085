"""JSON 구조화 로깅 설정.

이벤트 수신(EVENT_RECEIVED), 이름 조회 실패(IDENTITY_LOOKUP_FAILED, IDENTITY_EMPTY),
발송 결과(DISPATCHED, DISPATCH_FAILED, DISPATCH_PARTIAL)를 event_code로 구분하고
event_type, recipient_id, user_id, status_code를 함께 남긴다.
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from typing import Any


class JsonFormatter(logging.Formatter):
    """JSON 형태로 로그 레코드를 포매팅한다."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, Any] = {
            "timestamp": datetime.now(tz=UTC).strftime("%Y-%m-%dT%H:%M:%SZ"),
            "level": record.levelname,
            "message": record.getMessage(),
        }

        # extra 필드 병합 (event_code, event_type, recipient_id 등)
        for key in ("event_code", "event_type", "recipient_id", "user_id", "status_code"):
            value = getattr(record, key, None)
            if value is not None:
                log_entry[key] = value

        return json.dumps(log_entry, ensure_ascii=False)


def setup_logging(*, json_format: bool = True, level: int = logging.INFO) -> None:
    """vk_notifier 로거에 포매터를 설정한다.

    Args:
        json_format: True이면 JSON 포맷, False이면 기본 포맷
        level: 로그 레벨
    """
    root = logging.getLogger("vk_notifier")
    root.setLevel(level)

    # 기존 핸들러 제거 (중복 방지)
    root.handlers.clear()

    handler = logging.StreamHandler()
    handler.setLevel(level)

    if json_format:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s"))

    root.addHandler(handler)
