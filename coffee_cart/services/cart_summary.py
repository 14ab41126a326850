from __future__ import annotations

import itertools
import logging

from coffee_cart.model.cart_data import CartData
from coffee_cart.ports import NotificationPort
from coffee_cart.schemas.cart import CartSummary
from coffee_cart.services.api_client import ApiClientError, CoffeeApiClient

logger = logging.getLogger(__name__)

MSG_SUMMARY_FAILED = "장바구니 정보를 불러오지 못했습니다."


class CartSummarySynchronizer:
    """서버 요약(summary)을 다시 받아 CartData에 통째로 반영.

    요청마다 증가하는 순번을 붙이고, 이미 더 최신 응답이 반영됐거나
    그 사이 cartId가 바뀐 경우 늦게 도착한 응답은 버린다.
    """

    def __init__(self, api: CoffeeApiClient, data: CartData, notifier: NotificationPort) -> None:
        self.api = api
        self.data = data
        self.notifier = notifier
        self._seq = itertools.count(1)
        self._applied_seq = 0

    async def refresh_summary(self, cart_id: int) -> CartSummary | None:
        seq = next(self._seq)
        try:
            summary = await self.api.get_cart_summary(cart_id)
        except ApiClientError as e:
            # 이전 요약은 그대로 보여준다
            logger.error(f"[요약] 조회 실패 (cart={cart_id}): {e}")
            self.notifier.error(MSG_SUMMARY_FAILED)
            return None

        if cart_id != self.data.get_cart_id():
            logger.info(f"[요약] 현재 카트가 아닌 응답 무시 (cart={cart_id})")
            return None
        if seq < self._applied_seq:
            logger.info(f"[요약] 오래된 응답 무시 (seq={seq} < {self._applied_seq})")
            return None

        self._applied_seq = seq
        self.data.set_summary(summary)
        return summary

    def reset(self) -> None:
        self.data.set_summary(CartSummary.empty())
