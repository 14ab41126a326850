from typing import Protocol


class ConfirmationPort(Protocol):
    """삭제처럼 되돌릴 수 없는 동작 전에 사용자 확인 (window.confirm 대용)"""

    def confirm(self, message: str) -> bool: ...


class NotificationPort(Protocol):
    """사용자에게 보여줄 안내/오류 메시지 (alert 대용). 호출이 흐름을 막지 않는다."""

    def info(self, message: str) -> None: ...
    def error(self, message: str) -> None: ...
