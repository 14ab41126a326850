from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Any

import httpx
from pydantic import TypeAdapter, ValidationError

from coffee_cart.core.config import settings
from coffee_cart.schemas.cart import AddCartItemIn, CartSummary, NewCartOut
from coffee_cart.schemas.checkout import PaymentRequest
from coffee_cart.schemas.envelope import RsData
from coffee_cart.schemas.product import CoffeeResponseDto


# 재고/가격은 항상 최신이어야 하므로 캐시 사용 금지
NO_CACHE_HEADERS = {"Cache-Control": "no-cache", "Pragma": "no-cache"}
TEXT_HEADERS = {"Content-Type": "text/plain; charset=UTF-8"}


class ApiClientError(RuntimeError):
    pass


class NetworkFailure(ApiClientError):
    """요청이 서버에 닿지 못함 (연결 실패/타임아웃)"""


class ServerError(ApiClientError):
    """non-2xx 응답 또는 resultCode가 실패인 envelope"""

    def __init__(self, op: str, status_code: int | None, detail: str = "") -> None:
        self.op = op
        self.status_code = status_code
        self.detail = detail
        status = f"HTTP {status_code}" if status_code is not None else "resultCode"
        super().__init__(f"{op} failed: {status} {detail}".rstrip())


class EnvelopeDecodeError(ApiClientError):
    """응답이 {resultCode, msg, data} 형태가 아니거나 data 모양이 다름"""


def decode_envelope(payload: Any, model: Any, op: str = "request") -> Any:
    """envelope를 엄격하게 풀어 data만 반환.

    - envelope가 아닌 응답(data 바로 반환 등)은 추측하지 않고 거부
    - resultCode 실패면 ServerError
    - data가 model과 맞지 않으면 EnvelopeDecodeError
    """
    if not isinstance(payload, dict) or "resultCode" not in payload or "data" not in payload:
        raise EnvelopeDecodeError(f"{op}: response is not a {{resultCode, msg, data}} envelope")
    try:
        env = RsData[Any].model_validate(payload)
    except ValidationError as e:
        raise EnvelopeDecodeError(f"{op}: malformed envelope: {e}") from e

    if not env.is_success:
        raise ServerError(op, None, f"{env.result_code} {env.msg or ''}".strip())

    try:
        return TypeAdapter(model).validate_python(env.data)
    except ValidationError as e:
        raise EnvelopeDecodeError(f"{op}: unexpected data shape: {e}") from e


def _error_detail(r: httpx.Response) -> str:
    try:
        body = r.json()
    except ValueError:
        return r.text[:200]
    if isinstance(body, dict):
        return str(body.get("msg") or body.get("detail") or body.get("message") or "")
    return ""


def _cache_buster() -> int:
    return int(time.time() * 1000)


def _iso_now() -> str:
    # JS Date.toISOString() 형식: 2025-01-01T00:00:00.000Z
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class ApiClient:
    """백엔드 REST 호출 공통 부분 (httpx.AsyncClient 한 개를 재사용)."""

    def __init__(
        self,
        base_url: str | None = None,
        timeout_s: float | None = None,
        http: httpx.AsyncClient | None = None,
    ) -> None:
        base = base_url if base_url is not None else settings.API_BASE_URL
        if not base:
            raise ApiClientError("API_BASE_URL is not set")
        self.base = base.rstrip("/")
        self.timeout_s = timeout_s if timeout_s is not None else settings.API_TIMEOUT_S
        self._http = http or httpx.AsyncClient(timeout=self.timeout_s)

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()

    def _headers(self) -> dict[str, str]:
        return {"Accept": "application/json"}

    async def _request(self, method: str, path: str, *, op: str, **kwargs: Any) -> httpx.Response:
        url = f"{self.base}{path}"
        headers = {**self._headers(), **(kwargs.pop("headers", None) or {})}
        try:
            r = await self._http.request(method, url, headers=headers, **kwargs)
        except httpx.TimeoutException as e:
            raise NetworkFailure(f"{op}: 요청 시간 초과 ({self.timeout_s:g}초)") from e
        except httpx.TransportError as e:
            raise NetworkFailure(f"{op}: 서버 연결 실패 - 네트워크를 확인하세요 ({e})") from e

        if not r.is_success:
            raise ServerError(op, r.status_code, _error_detail(r))
        return r

    async def _get_data(self, method: str, path: str, model: Any, *, op: str, **kwargs: Any) -> Any:
        r = await self._request(method, path, op=op, **kwargs)
        try:
            payload = r.json()
        except ValueError as e:
            raise EnvelopeDecodeError(f"{op}: response is not JSON") from e
        return decode_envelope(payload, model, op=op)

    async def _send(self, method: str, path: str, *, op: str, **kwargs: Any) -> None:
        """본문이 필요 없는 변경 요청. 본문이 envelope면 resultCode만 확인."""
        r = await self._request(method, path, op=op, **kwargs)
        if not r.content:
            return
        try:
            payload = r.json()
        except ValueError:
            return
        if isinstance(payload, dict) and "resultCode" in payload:
            code = str(payload.get("resultCode"))
            if not code.startswith("2"):
                raise ServerError(op, r.status_code, f"{code} {payload.get('msg') or ''}".strip())


class CoffeeApiClient(ApiClient):
    """/coffee/** 엔드포인트 (상품, 장바구니, 결제 정보)"""

    # ---- carts ----
    async def create_cart(self) -> int:
        out: NewCartOut = await self._get_data("POST", "/coffee/carts", NewCartOut, op="createCart")
        return out.cart_id

    async def get_cart_summary(self, cart_id: int) -> CartSummary:
        return await self._get_data(
            "GET",
            f"/coffee/carts/{cart_id}/summary",
            CartSummary,
            op="getSummary",
            params={"t": _cache_buster()},
            headers=NO_CACHE_HEADERS,
        )

    async def add_cart_item(self, cart_id: int, product_id: int) -> None:
        body = AddCartItemIn(cart_id=cart_id, product_id=product_id).model_dump(by_alias=True)
        await self._send("POST", "/coffee/carts/items", op="addCartItem", json=body)

    async def remove_cart_item(self, cart_id: int, product_id: int) -> None:
        await self._send("DELETE", f"/coffee/carts/{cart_id}/items/{product_id}", op="removeCartItem")

    async def increase_item(self, cart_id: int, product_id: int) -> None:
        await self._send("POST", f"/coffee/carts/{cart_id}/items/{product_id}/increase", op="increase")

    async def decrease_item(self, cart_id: int, product_id: int) -> None:
        await self._send("POST", f"/coffee/carts/{cart_id}/items/{product_id}/decrease", op="decrease")

    # ---- checkout ----
    async def set_owner_email(self, cart_id: int, email: str) -> None:
        await self._send(
            "POST", f"/coffee/carts/{cart_id}/email",
            op="setOwnerEmail", content=email.encode("utf-8"), headers=TEXT_HEADERS,
        )

    async def set_order_date(self, cart_id: int, iso: str | None = None) -> None:
        stamp = iso or _iso_now()
        await self._send(
            "POST", f"/coffee/carts/{cart_id}/date",
            op="setOrderDate", content=stamp.encode("utf-8"), headers=TEXT_HEADERS,
        )

    async def create_customer(self, cart_id: int, payment: PaymentRequest) -> None:
        await self._send(
            "POST", f"/coffee/carts/{cart_id}/customer",
            op="createCustomer", json=payment.model_dump(by_alias=True),
        )

    # ---- products ----
    async def list_products(self) -> list[CoffeeResponseDto]:
        return await self._get_data(
            "GET", "/coffee/products", list[CoffeeResponseDto],
            op="getProducts", headers=NO_CACHE_HEADERS,
        )

    async def get_product(self, coffee_id: int) -> CoffeeResponseDto:
        return await self._get_data(
            "GET", f"/coffee/{coffee_id}", CoffeeResponseDto,
            op="getCoffee", headers=NO_CACHE_HEADERS,
        )
