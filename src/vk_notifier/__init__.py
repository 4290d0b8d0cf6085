"""VK Callback API 이벤트를 텍스트 알림으로 전달하는 웹훅."""

__version__ = "0.1.0"
