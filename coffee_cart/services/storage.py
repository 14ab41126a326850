from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)

CART_ID_KEY = "cartId"
ADMIN_TOKEN_KEY = "adminToken"


class LocalStorage(Protocol):
    """브라우저 localStorage와 같은 문자열 key/value 저장소"""

    def get_item(self, key: str) -> str | None: ...
    def set_item(self, key: str, value: str) -> None: ...
    def remove_item(self, key: str) -> None: ...


class MemoryStorage:
    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.items: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> str | None:
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.items[key] = value

    def remove_item(self, key: str) -> None:
        self.items.pop(key, None)


class JsonFileStorage:
    """JSON 파일 하나에 key/value를 보관. 쓰기는 임시 파일 교체로 처리."""

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self.path = Path(path).expanduser()

    def _load(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"[storage] 저장소 파일을 읽지 못해 비어있는 것으로 처리: {self.path} ({e})")
            return {}
        if not isinstance(data, dict):
            return {}
        return {str(k): str(v) for k, v in data.items()}

    def _save(self, data: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
        os.replace(tmp, self.path)

    def get_item(self, key: str) -> str | None:
        return self._load().get(key)

    def set_item(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._save(data)

    def remove_item(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._save(data)


class CartIdStore:
    """cartId 한 개만 다루는 get/set/clear 래퍼"""

    def __init__(self, storage: LocalStorage, key: str = CART_ID_KEY) -> None:
        self.storage = storage
        self.key = key

    def get(self) -> int | None:
        raw = self.storage.get_item(self.key)
        if raw is None:
            return None
        try:
            cart_id = int(raw)
        except ValueError:
            logger.warning(f"[storage] 잘못된 cartId 값 무시: {raw!r}")
            return None
        return cart_id if cart_id > 0 else None

    def set(self, cart_id: int) -> None:
        self.storage.set_item(self.key, str(cart_id))

    def clear(self) -> None:
        self.storage.remove_item(self.key)
