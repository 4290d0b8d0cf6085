"""Callback API 이벤트 → 알림 문구 변환기.

event.type으로 규칙 테이블을 조회해 문구를 만든다.
- 규칙 = 행위자 필드 목록 + 렌더러
- 알 수 없는 타입은 기본 문구로 처리 (예외 없음)
- confirmation은 확인 토큰을 그대로 응답, message_reply/message_typing_state는 무시
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from vk_notifier.config import VK_BASE_URL, GroupConfig
from vk_notifier.models import VkEvent, VkUser

logger = logging.getLogger(__name__)

NameResolver = Callable[[int], VkUser]

CONFIRMATION_TYPE = "confirmation"

# 발신 메시지 에코(무한 루프)와 타이핑 알림 폭주 방지
SUPPRESSED_TYPES = frozenset({"message_reply", "message_typing_state"})


@dataclass(frozen=True)
class FormatResult:
    """포매팅 결과.

    message가 None이면 알림 없음, terminal이면 message를 응답 본문으로 그대로 반환한다.
    """

    message: str | None
    terminal: bool = False

    @property
    def suppressed(self) -> bool:
        return self.message is None


# Payload accessors


def _lookup(obj: dict[str, Any], path: str) -> Any:
    """'message.from_id' 같은 점 경로로 값을 꺼낸다."""
    value: Any = obj
    for key in path.split("."):
        if not isinstance(value, dict):
            return None
        value = value.get(key)
    return value


def _int(obj: dict[str, Any], path: str) -> int:
    try:
        return int(_lookup(obj, path) or 0)
    except (TypeError, ValueError):
        return 0


def _text(obj: dict[str, Any], *paths: str) -> str:
    """첫 번째로 비어있지 않은 문자열 필드."""
    for path in paths:
        value = _lookup(obj, path)
        if value:
            return str(value)
    return ""


def _join(*parts: str) -> str:
    """빈 조각을 건너뛰고 공백으로 잇는다."""
    return " ".join(p for p in parts if p)


# Renderers: (payload, group, actor) -> 문구


def _render_test_connection(obj: dict[str, Any], group: GroupConfig, actor: str) -> str:
    return "проверка связи"


def _render_message_new(obj: dict[str, Any], group: GroupConfig, actor: str) -> str:
    text = _text(obj, "message.text", "text")
    return _join(f"{_join('входящее сообщение от', actor)}:", text)


def _render_message_allow(obj: dict[str, Any], group: GroupConfig, actor: str) -> str:
    return _join("подписка на сообщения от сообщества: от", actor)


def _render_message_deny(obj: dict[str, Any], group: GroupConfig, actor: str) -> str:
    return _join("новый запрет сообщений от сообщества: от", actor)


def _render_photo_new(obj: dict[str, Any], group: GroupConfig, actor: str) -> str:
    return _join(
        "добавление фотографии в альбом", f"{group.album_url}{_int(obj, 'album_id')}",
        "от", actor,
        "фото", f"{group.photo_album_url}{_int(obj, 'id')}",
    )


def _photo_comment(verb: str) -> Callable[[dict[str, Any], GroupConfig, str], str]:
    def render(obj: dict[str, Any], group: GroupConfig, actor: str) -> str:
        return _join(
            f"{verb} комментарий под фото", f"{group.photo_album_url}{_int(obj, 'photo_id')}",
            _text(obj, "text"), "от", actor,
        )
    return render


def _render_audio_new(obj: dict[str, Any], group: GroupConfig, actor: str) -> str:
    return _join("Добавлена аудиозапись", _text(obj, "title"), "от", actor)


def _render_video_new(obj: dict[str, Any], group: GroupConfig, actor: str) -> str:
    return _join(
        "Добавлена видеозапись", _text(obj, "title"),
        f"{group.video_url}{_int(obj, 'id')}", "от", actor,
    )


def _render_wall_post_new(obj: dict[str, Any], group: GroupConfig, actor: str) -> str:
    return _join(
        "Добавлена запись на стене:", _text(obj, "text"),
        f"{group.wall_url}{_int(obj, 'id')}", "от", actor,
    )


def _render_wall_repost(obj: dict[str, Any], group: GroupConfig, actor: str) -> str:
    return _join("Добавлен репост записи на стене:", _text(obj, "text"), "от", actor)


def _render_wall_reply_new(obj: dict[str, Any], group: GroupConfig, actor: str) -> str:
    return _join(
        actor, "оставил комментарий на стене:", _text(obj, "text"),
        "ссылка на запись", f"{group.wall_url}{_int(obj, 'post_id')}",
    )


# object_type → (문구, GroupConfig 링크 속성). 속성이 비면 ID만 붙인다.
_LIKE_TARGETS: dict[str, tuple[str, str]] = {
    "post": ("под записью", "wall_url"),
    "video": ("под видеозаписью", "video_url"),
    "photo": ("под фото", "photo_url"),
    "comment": ("под комментарием в записи", "wall_url"),
    "note": ("под заметкой", ""),
    "topic_comment": ("под комментарием в обсуждении", ""),
    "photo_comment": ("под комментарием к фото", ""),
    "video_comment": ("под комментарием к видео", ""),
    "market": ("под товаром", "market_url"),
    "market_comment": ("под комментарием к товару", ""),
}


def describe_like_target(object_type: str, object_id: int, group: GroupConfig) -> str:
    """좋아요 대상 설명. 모르는 object_type은 'под <kind> <id>'."""
    target = _LIKE_TARGETS.get(object_type)
    if target is None:
        return _join("под", object_type, str(object_id))
    phrase, link_attr = target
    prefix = getattr(group, link_attr) if link_attr else ""
    return f"{phrase} {prefix}{object_id}"


def _like(verb: str) -> Callable[[dict[str, Any], GroupConfig, str], str]:
    def render(obj: dict[str, Any], group: GroupConfig, actor: str) -> str:
        target = describe_like_target(_text(obj, "object_type"), _int(obj, "object_id"), group)
        return _join(actor, verb, target)
    return render


def _board_post(verb: str) -> Callable[[dict[str, Any], GroupConfig, str], str]:
    def render(obj: dict[str, Any], group: GroupConfig, actor: str) -> str:
        text = _text(obj, "text")
        return _join(
            f"{verb} комментарий в обсуждении:", f"{group.topic_url}{_int(obj, 'topic_id')}",
            "с текстом" if text else "", text, "от", actor,
        )
    return render


def _render_board_post_delete(obj: dict[str, Any], group: GroupConfig, actor: str) -> str:
    return f"Удален комментарий в обсуждении: {group.topic_url}{_int(obj, 'topic_id')}"


def _market_comment(verb: str) -> Callable[[dict[str, Any], GroupConfig, str], str]:
    def render(obj: dict[str, Any], group: GroupConfig, actor: str) -> str:
        return _join(
            f"{verb} к товару:", _text(obj, "text"), "от", actor,
            "идентификатор товара", str(_int(obj, "item_id")),
        )
    return render


def _render_market_comment_delete(obj: dict[str, Any], group: GroupConfig, actor: str) -> str:
    return f"Удаление комментария к товару: идентификатор товара {_int(obj, 'item_id')}"


def _render_group_leave(obj: dict[str, Any], group: GroupConfig, actor: str) -> str:
    return _join(actor, "покинул группу")


_JOIN_TYPES: dict[str, str] = {
    "accepted": "принял приглашение",
    "request": "подал заявку на вступление",
}


def _render_group_join(obj: dict[str, Any], group: GroupConfig, actor: str) -> str:
    return _join(actor, "вступил в группу", _JOIN_TYPES.get(_text(obj, "join_type"), ""))


def _render_poll_vote_new(obj: dict[str, Any], group: GroupConfig, actor: str) -> str:
    return _join("добавление голоса в публичном опросе:", str(_int(obj, "poll_id")), "от", actor)


@dataclass(frozen=True)
class _Rule:
    actor_fields: tuple[str, ...]  # 앞에서부터 0이 아닌 첫 값이 행위자
    render: Callable[[dict[str, Any], GroupConfig, str], str]


_RULES: dict[str, _Rule] = {
    "test_connection": _Rule((), _render_test_connection),
    # 메시지
    "message_new": _Rule(("message.from_id", "from_id"), _render_message_new),
    "message_allow": _Rule(("user_id", "message.from_id"), _render_message_allow),
    "message_deny": _Rule(("user_id", "message.from_id"), _render_message_deny),
    # 사진
    "photo_new": _Rule(("user_id", "message.from_id"), _render_photo_new),
    "photo_comment_new": _Rule(("from_id", "message.from_id"), _photo_comment("Добавлен")),
    "photo_comment_edit": _Rule(("from_id", "message.from_id"), _photo_comment("Отредактирован")),
    "photo_comment_delete": _Rule(("deleter_id", "from_id"), _photo_comment("Удален")),
    # 오디오/비디오
    "audio_new": _Rule(("owner_id",), _render_audio_new),
    "video_new": _Rule(("owner_id",), _render_video_new),
    # 벽
    "wall_post_new": _Rule(("from_id",), _render_wall_post_new),
    "wall_repost": _Rule(("from_id",), _render_wall_repost),
    "wall_reply_new": _Rule(("from_id",), _render_wall_reply_new),
    # 좋아요
    "like_add": _Rule(("liker_id",), _like("поставил лайк")),
    "like_remove": _Rule(("liker_id",), _like("удалил лайк")),
    # 토론
    "board_post_new": _Rule(("from_id",), _board_post("Создан")),
    "board_post_edit": _Rule(("from_id",), _board_post("Отредактирован")),
    "board_post_delete": _Rule((), _render_board_post_delete),
    # 상품
    "market_comment_new": _Rule(("from_id",), _market_comment("Новый комментарий")),
    "market_comment_edit": _Rule(("from_id",), _market_comment("Редактирование комментария")),
    "market_comment_delete": _Rule((), _render_market_comment_delete),
    # 멤버
    "group_leave": _Rule(("user_id",), _render_group_leave),
    "group_join": _Rule(("user_id",), _render_group_join),
    # 기타
    "poll_vote_new": _Rule(("user_id",), _render_poll_vote_new),
}

KNOWN_TYPES = frozenset(_RULES) | SUPPRESSED_TYPES | {CONFIRMATION_TYPE}


def resolve_actor_id(event_type: str, obj: dict[str, Any]) -> int:
    """타입별 필드 테이블에서 행위자 ID를 찾는다. 없으면 0."""
    rule = _RULES.get(event_type)
    if rule is None:
        return 0
    for path in rule.actor_fields:
        if actor_id := _int(obj, path):
            return actor_id
    return 0


class EventFormatter:
    """이벤트 분류 + 문구 생성기."""

    def __init__(
        self,
        group: GroupConfig,
        confirmation_token: str,
        resolve_name: NameResolver | None = None,
    ) -> None:
        self._group = group
        self._confirmation_token = confirmation_token
        self._resolve_name = resolve_name

    def describe_actor(self, actor_id: int) -> str:
        """'성 이름 https://vk.com/id<id>'. 음수 ID는 커뮤니티, 0은 빈 문자열."""
        if actor_id == 0:
            return ""
        if actor_id < 0:
            return f"сообщество {VK_BASE_URL}/club{-actor_id}"

        user = self._resolve_name(actor_id) if self._resolve_name else VkUser(id=actor_id)
        return _join(user.display_name, f"{VK_BASE_URL}/id{actor_id}")

    def format(self, event: VkEvent) -> FormatResult:
        if event.type == CONFIRMATION_TYPE:
            return FormatResult(message=self._confirmation_token, terminal=True)

        if event.type in SUPPRESSED_TYPES:
            logger.debug("Suppressed event: %s", event.type)
            return FormatResult(message=None)

        rule = _RULES.get(event.type)
        if rule is None:
            logger.info(
                "Unknown event type: %s", event.type,
                extra={"event_code": "UNKNOWN_EVENT_TYPE", "event_type": event.type},
            )
            return FormatResult(message=f"Произошло событие: {event.type}")

        actor = self.describe_actor(resolve_actor_id(event.type, event.object))
        return FormatResult(message=rule.render(event.object, self._group, actor))
