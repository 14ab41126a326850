from __future__ import annotations

import logging
import mimetypes
from pathlib import Path
from typing import Any

import httpx

from coffee_cart.schemas.order import LoginIn, LoginOut, OrderResponse
from coffee_cart.schemas.product import CoffeeResponseDto, ImageUploadOut, Product, ProductCreate
from coffee_cart.services.api_client import ApiClient, NO_CACHE_HEADERS, ServerError
from coffee_cart.services.catalog import to_product
from coffee_cart.services.storage import ADMIN_TOKEN_KEY, LocalStorage

logger = logging.getLogger(__name__)


class AdminAuthError(ServerError):
    """401/403: 토큰이 없거나 만료됨. 다시 로그인 필요."""


class AdminApiClient(ApiClient):
    """관리자 화면용 호출 (주문 조회, 상품 등록).

    - 로그인 토큰은 저장소의 adminToken 키에 보관
    - 모든 요청에 Authorization: Bearer <token> 헤더
    """

    def __init__(
        self,
        storage: LocalStorage,
        base_url: str | None = None,
        timeout_s: float | None = None,
        http: httpx.AsyncClient | None = None,
        image_prefix: str | None = None,
    ) -> None:
        super().__init__(base_url=base_url, timeout_s=timeout_s, http=http)
        self.storage = storage
        self.image_prefix = image_prefix

    @property
    def token(self) -> str | None:
        return self.storage.get_item(ADMIN_TOKEN_KEY)

    def _headers(self) -> dict[str, str]:
        h = super()._headers()
        if self.token:
            h["Authorization"] = f"Bearer {self.token}"
        return h

    async def _request(self, method: str, path: str, *, op: str, **kwargs: Any) -> httpx.Response:
        try:
            return await super()._request(method, path, op=op, **kwargs)
        except ServerError as e:
            if e.status_code in (401, 403):
                self.logout()
                raise AdminAuthError(op, e.status_code, e.detail) from e
            raise

    async def login(self, username: str, password: str) -> str | None:
        """성공 시 토큰 저장 후 반환 (토큰 없는 응답이면 None)"""
        username = username.strip()
        if not username or not password:
            raise ValueError("아이디와 비밀번호를 모두 입력하세요.")

        body = LoginIn(username=username, password=password).model_dump()
        out: LoginOut = await self._get_data("POST", "/admin/login", LoginOut, op="adminLogin", json=body)
        if out.token:
            self.storage.set_item(ADMIN_TOKEN_KEY, out.token)
        logger.info(f"[관리자] 로그인 성공: {username}")
        return out.token

    def logout(self) -> None:
        self.storage.remove_item(ADMIN_TOKEN_KEY)

    async def list_orders(self) -> list[OrderResponse]:
        return await self._get_data(
            "GET", "/admin/orders", list[OrderResponse], op="orders", headers=NO_CACHE_HEADERS,
        )

    async def list_daily_orders(self) -> list[OrderResponse]:
        """금일(일일 배치) 주문"""
        return await self._get_data(
            "GET", "/admin/orders/dailyBatch", list[OrderResponse], op="dailyBatch", headers=NO_CACHE_HEADERS,
        )

    async def list_products(self) -> list[Product]:
        dtos = await self._get_data(
            "GET", "/coffee/products", list[CoffeeResponseDto], op="getProducts", headers=NO_CACHE_HEADERS,
        )
        return [to_product(d, self.image_prefix) for d in dtos]

    async def upload_product_image(self, path: str | Path) -> str:
        """multipart로 이미지 업로드 후 서버가 돌려준 imageUrl 반환"""
        p = Path(path)
        content_type = mimetypes.guess_type(p.name)[0] or "application/octet-stream"
        files = {"file": (p.name, p.read_bytes(), content_type)}
        out: ImageUploadOut = await self._get_data(
            "POST", "/coffee/products/image", ImageUploadOut, op="uploadImage", files=files,
        )
        return out.image_url

    async def add_product(self, product: ProductCreate) -> None:
        await self._send(
            "POST", "/coffee/products/add", op="addProduct", json=product.model_dump(by_alias=True),
        )


def filter_orders(orders: list[OrderResponse], query: str) -> list[OrderResponse]:
    """이메일/주소/우편번호/주문번호 부분일치 검색"""
    q = query.strip().lower()
    if not q:
        return orders
    out = []
    for o in orders:
        fields = [o.customer_email, o.ship_to_address, o.ship_to_zipcode, str(o.order_id)]
        if any(q in f.lower() for f in fields if f):
            out.append(o)
    return out


def filter_products(products: list[Product], query: str) -> list[Product]:
    """상품명/설명/상품번호 부분일치 검색"""
    q = query.strip().lower()
    if not q:
        return products
    return [
        p for p in products
        if any(q in f.lower() for f in (p.name, p.contents, str(p.id)) if f)
    ]
