"""VK API 클라이언트 테스트 (httpx mock)."""

from __future__ import annotations

import httpx
import pytest
from vk_notifier.config import VkApiConfig
from vk_notifier.vk_api import VkApiClient, VkApiError


@pytest.fixture()
def api_config() -> VkApiConfig:
    return VkApiConfig(access_token="test-token", api_version="5.131", timeout_sec=1.0)


class TestGetUsers:
    """users.get 테스트."""

    def test_success(self, httpx_mock, api_config: VkApiConfig) -> None:
        httpx_mock.add_response(
            json={"response": [{"id": 555, "first_name": "Иван", "last_name": "Петров"}]},
        )

        with VkApiClient(api_config) as client:
            users = client.get_users("555")

        assert len(users) == 1
        assert users[0].first_name == "Иван"
        assert users[0].display_name == "Петров Иван"

        request = httpx_mock.get_request()
        assert request.url.path == "/method/users.get"
        assert request.url.params["user_ids"] == "555"
        assert request.url.params["access_token"] == "test-token"
        assert request.url.params["v"] == "5.131"

    def test_empty_response(self, httpx_mock, api_config: VkApiConfig) -> None:
        httpx_mock.add_response(json={"response": []})

        with VkApiClient(api_config) as client:
            assert client.get_users("555") == []

    def test_response_not_a_list(self, httpx_mock, api_config: VkApiConfig) -> None:
        httpx_mock.add_response(json={"response": {"id": 5}})

        with VkApiClient(api_config) as client, pytest.raises(VkApiError, match="Unexpected users.get"):
            client.get_users("5")

    def test_invalid_user_item(self, httpx_mock, api_config: VkApiConfig) -> None:
        httpx_mock.add_response(json={"response": ["id"]})

        with VkApiClient(api_config) as client, pytest.raises(VkApiError, match="Invalid users.get item"):
            client.get_users("5")

    def test_vk_error_payload(self, httpx_mock, api_config: VkApiConfig) -> None:
        httpx_mock.add_response(
            json={"error": {"error_code": 5, "error_msg": "User authorization failed"}},
        )

        with VkApiClient(api_config) as client, pytest.raises(VkApiError) as exc_info:
            client.get_users("555")

        assert exc_info.value.error_code == 5
        assert exc_info.value.status_code == 200

    def test_http_error(self, httpx_mock, api_config: VkApiConfig) -> None:
        httpx_mock.add_response(status_code=502)

        with VkApiClient(api_config) as client, pytest.raises(VkApiError) as exc_info:
            client.get_users("555")

        assert exc_info.value.status_code == 502

    def test_transport_error(self, httpx_mock, api_config: VkApiConfig) -> None:
        httpx_mock.add_exception(httpx.ConnectError("Connection refused"))

        with VkApiClient(api_config) as client, pytest.raises(VkApiError) as exc_info:
            client.get_users("555")

        assert exc_info.value.status_code == 0

    def test_invalid_json(self, httpx_mock, api_config: VkApiConfig) -> None:
        httpx_mock.add_response(text="<html>oops</html>")

        with VkApiClient(api_config) as client, pytest.raises(VkApiError, match="Invalid JSON"):
            client.get_users("555")


class TestSendMessage:
    """messages.send 테스트."""

    def test_query_params(self, httpx_mock, api_config: VkApiConfig) -> None:
        httpx_mock.add_response(json={"response": 1001})

        with VkApiClient(api_config) as client:
            result = client.send_message("111", "привет")

        assert result == 1001
        request = httpx_mock.get_request()
        assert request.method == "GET"
        assert request.url.path == "/method/messages.send"
        assert request.url.params["message"] == "привет"
        assert request.url.params["user_id"] == "111"
        assert request.url.params["random_id"] == "0"
        assert request.url.params["access_token"] == "test-token"
        assert request.url.params["v"] == "5.131"

    def test_no_retry_on_error(self, httpx_mock, api_config: VkApiConfig) -> None:
        httpx_mock.add_response(status_code=500)

        with VkApiClient(api_config) as client, pytest.raises(VkApiError):
            client.send_message("111", "привет")

        assert len(httpx_mock.get_requests()) == 1


class TestClientInit:
    """클라이언트 초기화 테스트."""

    def test_missing_token(self) -> None:
        with pytest.raises(RuntimeError, match="TOKEN"):
            VkApiClient(VkApiConfig())

    def test_explicit_token(self) -> None:
        client = VkApiClient(VkApiConfig(), token="explicit")
        try:
            assert client._token == "explicit"
        finally:
            client.close()
