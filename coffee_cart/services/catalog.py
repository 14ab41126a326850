from __future__ import annotations

import logging
import re

from coffee_cart.core.config import settings
from coffee_cart.model.cart_data import CartData
from coffee_cart.ports import NotificationPort
from coffee_cart.schemas.product import CoffeeResponseDto, Product
from coffee_cart.services.api_client import ApiClientError, CoffeeApiClient

logger = logging.getLogger(__name__)

MSG_PRODUCTS_FAILED = "상품 목록을 불러오지 못했습니다."

# http:, https:, data: 등 스킴이 붙은 값은 그대로 사용
SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*:")


def resolve_image(raw: str | None, prefix: str | None = None) -> str | None:
    """이미지 경로 정규화: 파일명이면 <prefix><파일명>, URL이나 이미 prefix가 붙은 경로는 그대로"""
    if not raw:
        return None
    prefix = prefix if prefix is not None else settings.IMAGE_PATH_PREFIX
    if SCHEME_RE.match(raw) or raw.startswith(prefix):
        return raw
    return f"{prefix}{raw}"


def to_product(dto: CoffeeResponseDto, prefix: str | None = None) -> Product:
    return Product(
        id=dto.coffee_id,
        name=dto.name,
        price=dto.price,
        image_url=resolve_image(dto.image_url, prefix),
        contents=dto.contents,
        stock=dto.stock,
    )


class CatalogLoader:
    def __init__(self, api: CoffeeApiClient, data: CartData, notifier: NotificationPort,
                 image_prefix: str | None = None) -> None:
        self.api = api
        self.data = data
        self.notifier = notifier
        self.image_prefix = image_prefix

    async def load_products(self) -> list[Product]:
        """상품 목록 1회 조회. 실패하면 기존 목록을 그대로 둔다 (재시도 없음)."""
        try:
            dtos = await self.api.list_products()
        except ApiClientError as e:
            logger.error(f"[상품목록] 조회 실패: {e}")
            self.notifier.error(MSG_PRODUCTS_FAILED)
            return self.data.products

        products = [to_product(d, self.image_prefix) for d in dtos]
        self.data.set_products(products)
        logger.info(f"[상품목록] {len(products)}개 로딩")
        return products

    async def get_product_detail(self, coffee_id: int) -> Product | None:
        """상세 모달용 단건 조회. 실패 시 None."""
        try:
            dto = await self.api.get_product(coffee_id)
        except ApiClientError as e:
            logger.error(f"[상품상세] 조회 실패 ({coffee_id}): {e}")
            return None
        return to_product(dto, self.image_prefix)
