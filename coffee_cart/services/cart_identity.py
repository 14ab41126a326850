from __future__ import annotations

import asyncio
import logging

from coffee_cart.model.cart_data import CartData
from coffee_cart.services.api_client import ApiClientError, CoffeeApiClient
from coffee_cart.services.storage import CartIdStore

logger = logging.getLogger(__name__)

MSG_CART_CREATE_FAILED = "장바구니 생성에 실패했습니다."


class CartCreationError(RuntimeError):
    pass


class StateInconsistency(RuntimeError):
    """카트가 없는데 기존 카트가 필요한 작업(수량 변경 등)을 시도함"""


class CartIdentityProvider:
    """cartId 발급/보관/폐기.

    - lazy: 첫 담기(또는 결제) 시점에 ensure_cart_id()로 생성
    - eager: 화면 진입 시 바로 ensure_cart_id() 호출
    두 방식 모두 같은 ensure_cart_id() 계약을 쓴다.
    """

    def __init__(self, api: CoffeeApiClient, store: CartIdStore, data: CartData) -> None:
        self.api = api
        self.store = store
        self.data = data
        self._create_lock = asyncio.Lock()

    @property
    def cart_id(self) -> int | None:
        return self.data.get_cart_id()

    def require_cart_id(self) -> int:
        """이미 있는 카트만 사용 (새로 만들지 않음)"""
        cart_id = self.cart_id
        if cart_id is None:
            raise StateInconsistency("no cart identity")
        return cart_id

    def restore(self) -> int | None:
        """저장소에 남아있는 cartId를 메모리로 복구 (없거나 이상하면 None)"""
        saved = self.store.get()
        if saved is not None:
            self.data.set_cart_id(saved)
            logger.info(f"[카트복구] 저장된 cartId 사용: {saved}")
        return saved

    async def ensure_cart_id(self) -> int:
        if self.data.get_cart_id() is not None:
            return self.data.get_cart_id()

        async with self._create_lock:
            # 대기 중 다른 호출이 이미 만들었으면 그대로 사용
            if self.data.get_cart_id() is not None:
                return self.data.get_cart_id()

            logger.info("[카트생성] 카트 생성 요청 시작")
            try:
                new_id = await self.api.create_cart()
            except ApiClientError as e:
                logger.error(f"[카트생성] 카트 생성 실패: {e}")
                raise CartCreationError(f"createCart failed: {e}") from e

            self.store.set(new_id)
            self.data.set_cart_id(new_id)
            logger.info(f"[카트생성] 카트 생성 완료: {new_id}")
            return new_id

    def reset_identity(self) -> None:
        """다음에 필요할 때 새로 발급받도록 cartId 폐기"""
        self.store.clear()
        self.data.set_cart_id(None)
        logger.info("[카트초기화] cartId 삭제")
