"""VK 알림 CLI.

vk-notifier handle event.json --config config.yaml
vk-notifier handle event.json --dry-run
vk-notifier send-test --json-log
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click
import orjson

from vk_notifier.config import load_config
from vk_notifier.handler import handle_event
from vk_notifier.logging_config import setup_logging
from vk_notifier.notifier import dispatch_all
from vk_notifier.vk_api import VkApiClient

logger = logging.getLogger(__name__)

TEST_MESSAGE = "проверка связи"


@click.group()
@click.version_option(version="0.1.0")
def main() -> None:
    """VK Callback API 이벤트 알림."""


@main.command()
@click.argument("event_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--config", "config_path", type=click.Path(exists=True, path_type=Path),
              default=None, help="설정 파일 경로 (기본: config.yaml)")
@click.option("--dry-run", is_flag=True, help="이름 조회/발송 없이 문구만 출력")
@click.option("--json-log", is_flag=True, help="JSON 형태 로그 출력")
def handle(
    event_file: Path,
    config_path: Path | None,
    dry_run: bool,
    json_log: bool,
) -> None:
    """이벤트 JSON 파일을 처리하고 응답을 출력한다."""
    setup_logging(json_format=json_log)
    config = load_config(config_path)

    try:
        raw = orjson.loads(event_file.read_bytes())
    except orjson.JSONDecodeError as e:
        click.echo(f"Invalid JSON in {event_file}: {e}", err=True)
        sys.exit(1)

    if not isinstance(raw, dict):
        click.echo(f"Expected a JSON object in {event_file}", err=True)
        sys.exit(1)

    click.echo(handle_event(raw, config=config, dry_run=dry_run))


@main.command("send-test")
@click.option("--config", "config_path", type=click.Path(exists=True, path_type=Path),
              default=None, help="설정 파일 경로 (기본: config.yaml)")
@click.option("--json-log", is_flag=True, help="JSON 형태 로그 출력")
def send_test(config_path: Path | None, json_log: bool) -> None:
    """모든 수신자에게 연결 확인 메시지를 보낸다."""
    setup_logging(json_format=json_log)
    config = load_config(config_path)

    with VkApiClient(config.vk) as client:
        results = dispatch_all(client, TEST_MESSAGE, config.recipients.ids)

    failed = False
    for recipient_id, ok in results.items():
        if ok:
            click.echo(f"[OK] {recipient_id}")
        else:
            click.echo(f"[FAIL] {recipient_id}", err=True)
            failed = True

    if failed:
        sys.exit(1)
