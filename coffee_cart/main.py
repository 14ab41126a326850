from __future__ import annotations

import logging

import httpx

from coffee_cart.core.config import Settings, settings as default_settings
from coffee_cart.model.cart_data import CartData
from coffee_cart.ports import ConfirmationPort, NotificationPort
from coffee_cart.services.admin_client import AdminApiClient
from coffee_cart.services.api_client import CoffeeApiClient
from coffee_cart.services.cart_identity import MSG_CART_CREATE_FAILED, CartCreationError, CartIdentityProvider
from coffee_cart.services.cart_mutations import CartMutations
from coffee_cart.services.cart_summary import CartSummarySynchronizer
from coffee_cart.services.catalog import CatalogLoader
from coffee_cart.services.checkout import CheckoutGate
from coffee_cart.services.storage import CartIdStore, JsonFileStorage, LocalStorage

logger = logging.getLogger(__name__)


class ShopApp:
    """주문 화면 하나에 해당하는 구성 루트. 화면(콘솔 등)은 이 객체만 호출한다."""

    def __init__(
        self,
        confirmer: ConfirmationPort,
        notifier: NotificationPort,
        storage: LocalStorage | None = None,
        settings: Settings | None = None,
        http: httpx.AsyncClient | None = None,
    ):
        self.settings = settings or default_settings
        self.storage = storage if storage is not None else JsonFileStorage(self.settings.STORAGE_PATH)
        self.notifier = notifier

        # 장바구니 데이터 모델 생성
        self.data = CartData()

        self.http = http or httpx.AsyncClient(timeout=self.settings.API_TIMEOUT_S)
        self.api = CoffeeApiClient(
            base_url=self.settings.API_BASE_URL, timeout_s=self.settings.API_TIMEOUT_S, http=self.http,
        )
        self.admin = AdminApiClient(
            self.storage, base_url=self.settings.API_BASE_URL, timeout_s=self.settings.API_TIMEOUT_S,
            http=self.http, image_prefix=self.settings.IMAGE_PATH_PREFIX,
        )

        self.identity = CartIdentityProvider(self.api, CartIdStore(self.storage), self.data)
        self.catalog = CatalogLoader(self.api, self.data, notifier, image_prefix=self.settings.IMAGE_PATH_PREFIX)
        self.synchronizer = CartSummarySynchronizer(self.api, self.data, notifier)
        self.mutations = CartMutations(self.api, self.identity, self.synchronizer, self.data, confirmer, notifier)
        self.checkout = CheckoutGate(self.api, self.identity, self.synchronizer, self.data, notifier)

    async def mount(self) -> None:
        """초기 진입: 상품 로딩 + cartId 복구(eager면 생성) + 요약 조회"""
        await self.catalog.load_products()

        cart_id = self.identity.restore()
        if cart_id is None and self.settings.CART_CREATION_MODE == "eager":
            try:
                cart_id = await self.identity.ensure_cart_id()
            except CartCreationError:
                self.notifier.error(MSG_CART_CREATE_FAILED)
                return

        if cart_id is not None:
            await self.synchronizer.refresh_summary(cart_id)

    def reset_cart(self) -> None:
        """명시적 초기화: cartId, 요약, 입력값 모두 비움"""
        self.checkout.reset_after_pay()

    async def aclose(self) -> None:
        await self.http.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        await self.aclose()
