"""
Tests for ShopApp wiring (mount, lazy/eager cart creation, reset)
"""

import pytest

from coffee_cart.core.config import Settings
from coffee_cart.main import ShopApp
from coffee_cart.services.storage import MemoryStorage
from conftest import BASE_URL, RecordingNotifier, StubConfirmation


class TestMount:
    @pytest.mark.asyncio
    async def test_lazy_mount_loads_products_only(self, app, backend):
        await app.mount()

        assert len(app.data.products) == 2
        assert app.identity.cart_id is None
        assert backend.count("POST", "/coffee/carts") == 0

    @pytest.mark.asyncio
    async def test_mount_restores_persisted_cart(self, http, backend):
        backend.carts[42] = {7: 2}
        app = ShopApp(
            StubConfirmation(), RecordingNotifier(), storage=MemoryStorage({"cartId": "42"}),
            settings=Settings(_env_file=None, API_BASE_URL=BASE_URL), http=http,
        )

        await app.mount()

        assert app.identity.cart_id == 42
        assert app.data.get_total_quantity() == 2
        assert backend.count("POST", "/coffee/carts") == 0

    @pytest.mark.asyncio
    async def test_eager_mount_creates_cart(self, http, backend, storage):
        app = ShopApp(
            StubConfirmation(), RecordingNotifier(), storage=storage,
            settings=Settings(_env_file=None, API_BASE_URL=BASE_URL, CART_CREATION_MODE="eager"), http=http,
        )

        await app.mount()

        assert app.identity.cart_id == 42
        assert storage.get_item("cartId") == "42"
        assert backend.count("GET", "/coffee/carts/42/summary") == 1

    @pytest.mark.asyncio
    async def test_eager_mount_creation_failure(self, http, backend, storage):
        notifier = RecordingNotifier()
        backend.fail[("POST", "/coffee/carts")] = 500
        app = ShopApp(
            StubConfirmation(), notifier, storage=storage,
            settings=Settings(_env_file=None, API_BASE_URL=BASE_URL, CART_CREATION_MODE="eager"), http=http,
        )

        await app.mount()

        assert app.identity.cart_id is None
        assert len(notifier.errors) == 1


class TestReset:
    @pytest.mark.asyncio
    async def test_reset_cart_clears_everything(self, app, storage):
        await app.mutations.toggle_add(7)

        app.reset_cart()

        assert app.identity.cart_id is None
        assert storage.get_item("cartId") is None
        assert app.data.summary.is_empty()
