from __future__ import annotations

import logging

from coffee_cart.model.cart_data import CartData
from coffee_cart.ports import ConfirmationPort, NotificationPort
from coffee_cart.services.api_client import ApiClientError, CoffeeApiClient
from coffee_cart.services.cart_identity import (
    MSG_CART_CREATE_FAILED,
    CartCreationError,
    CartIdentityProvider,
    StateInconsistency,
)
from coffee_cart.services.cart_summary import CartSummarySynchronizer

logger = logging.getLogger(__name__)

MSG_CONFIRM_REMOVE = "상품을 삭제하시겠습니까?"
MSG_ADD_FAILED = "상품을 장바구니에 담지 못했습니다."
MSG_REMOVE_FAILED = "상품을 삭제하지 못했습니다."
MSG_QTY_FAILED = "수량을 변경하지 못했습니다."
MSG_NO_CART = "장바구니가 없습니다. 먼저 상품을 담아주세요."


class CartMutations:
    """담기/삭제/수량 증감. 성공하면 항상 서버 요약을 다시 받는다 (낙관적 갱신 없음).

    같은 상품에 대한 요청은 한 번에 하나만 진행된다.
    """

    def __init__(
        self,
        api: CoffeeApiClient,
        identity: CartIdentityProvider,
        synchronizer: CartSummarySynchronizer,
        data: CartData,
        confirmer: ConfirmationPort,
        notifier: NotificationPort,
    ) -> None:
        self.api = api
        self.identity = identity
        self.synchronizer = synchronizer
        self.data = data
        self.confirmer = confirmer
        self.notifier = notifier
        self._in_flight: set[int] = set()

    def is_busy(self, product_id: int) -> bool:
        return product_id in self._in_flight

    def _acquire(self, product_id: int, op: str) -> bool:
        if product_id in self._in_flight:
            logger.info(f"[{op}] 진행 중인 요청이 있어 무시 (product={product_id})")
            return False
        self._in_flight.add(product_id)
        return True

    def _release(self, product_id: int) -> None:
        self._in_flight.discard(product_id)

    async def toggle(self, product_id: int, checked: bool) -> bool:
        """체크박스 토글: checked면 담기, 아니면 삭제"""
        if checked:
            return await self.toggle_add(product_id)
        return await self.toggle_remove(product_id)

    async def toggle_add(self, product_id: int) -> bool:
        if not self._acquire(product_id, "담기"):
            return False
        try:
            if self.data.is_in_cart(product_id):
                return False
            try:
                cart_id = await self.identity.ensure_cart_id()
            except CartCreationError:
                self.notifier.error(MSG_CART_CREATE_FAILED)
                return False

            await self.api.add_cart_item(cart_id, product_id)
            logger.info(f"[담기] 완료 (cart={cart_id}, product={product_id})")
            await self.synchronizer.refresh_summary(cart_id)
            return True
        except ApiClientError as e:
            logger.error(f"[담기] 실패: {e}")
            self.notifier.error(MSG_ADD_FAILED)
            return False
        finally:
            self._release(product_id)

    async def toggle_remove(self, product_id: int) -> bool:
        if not self._acquire(product_id, "삭제"):
            return False
        try:
            cart_id = self.identity.cart_id
            if cart_id is None or not self.data.is_in_cart(product_id):
                return False
            if not self.confirmer.confirm(MSG_CONFIRM_REMOVE):
                return False

            await self.api.remove_cart_item(cart_id, product_id)
            logger.info(f"[삭제] 완료 (cart={cart_id}, product={product_id})")
            await self.synchronizer.refresh_summary(cart_id)
            return True
        except ApiClientError as e:
            logger.error(f"[삭제] 실패: {e}")
            self.notifier.error(MSG_REMOVE_FAILED)
            return False
        finally:
            self._release(product_id)

    async def increase_quantity(self, product_id: int) -> bool:
        return await self._change_quantity(product_id, increase=True)

    async def decrease_quantity(self, product_id: int) -> bool:
        # 1 미만으로 내려갈 때의 처리(라인 삭제 등)는 서버가 결정
        return await self._change_quantity(product_id, increase=False)

    async def _change_quantity(self, product_id: int, increase: bool) -> bool:
        op = "수량증가" if increase else "수량감소"
        if not self._acquire(product_id, op):
            return False
        try:
            cart_id = self.identity.require_cart_id()
            if increase:
                await self.api.increase_item(cart_id, product_id)
            else:
                await self.api.decrease_item(cart_id, product_id)
            await self.synchronizer.refresh_summary(cart_id)
            return True
        except StateInconsistency:
            logger.warning(f"[{op}] 카트 없음 (product={product_id})")
            self.notifier.error(MSG_NO_CART)
            return False
        except ApiClientError as e:
            logger.error(f"[{op}] 실패: {e}")
            self.notifier.error(MSG_QTY_FAILED)
            return False
        finally:
            self._release(product_id)
