"""
Tests for cart id creation, reuse and reset
"""

import asyncio

import pytest

from coffee_cart.model.cart_data import CartData
from coffee_cart.services.api_client import CoffeeApiClient
from coffee_cart.services.cart_identity import CartCreationError, CartIdentityProvider, StateInconsistency
from coffee_cart.services.storage import CartIdStore, MemoryStorage
from conftest import BASE_URL


@pytest.fixture
def provider(http, storage):
    return CartIdentityProvider(CoffeeApiClient(base_url=BASE_URL, http=http), CartIdStore(storage), CartData())


class TestEnsureCartId:
    @pytest.mark.asyncio
    async def test_creates_and_persists(self, provider, backend, storage):
        cart_id = await provider.ensure_cart_id()

        assert cart_id == 42
        assert provider.cart_id == 42
        assert storage.get_item("cartId") == "42"
        assert backend.count("POST", "/coffee/carts") == 1

    @pytest.mark.asyncio
    async def test_idempotent_while_held(self, provider, backend):
        first = await provider.ensure_cart_id()
        second = await provider.ensure_cart_id()
        third = await provider.ensure_cart_id()

        assert first == second == third
        assert backend.count("POST", "/coffee/carts") == 1

    @pytest.mark.asyncio
    async def test_concurrent_calls_share_one_creation(self, provider, backend):
        gate = asyncio.Event()
        backend.gates[("POST", "/coffee/carts")] = gate

        tasks = [asyncio.create_task(provider.ensure_cart_id()) for _ in range(3)]
        await asyncio.sleep(0)
        gate.set()
        ids = await asyncio.gather(*tasks)

        assert set(ids) == {42}
        assert backend.count("POST", "/coffee/carts") == 1

    @pytest.mark.asyncio
    async def test_failure_leaves_state_unchanged(self, provider, backend, storage):
        backend.fail[("POST", "/coffee/carts")] = 503

        with pytest.raises(CartCreationError):
            await provider.ensure_cart_id()

        assert provider.cart_id is None
        assert storage.get_item("cartId") is None

    @pytest.mark.asyncio
    async def test_network_failure_is_creation_error(self, provider, backend):
        backend.offline.add(("POST", "/coffee/carts"))

        with pytest.raises(CartCreationError):
            await provider.ensure_cart_id()


class TestRestoreAndReset:
    def test_restore_uses_persisted_id(self, http):
        data = CartData()
        provider = CartIdentityProvider(
            CoffeeApiClient(base_url=BASE_URL, http=http), CartIdStore(MemoryStorage({"cartId": "77"})), data,
        )

        assert provider.restore() == 77
        assert data.get_cart_id() == 77

    @pytest.mark.asyncio
    async def test_restored_id_skips_creation(self, http, backend):
        provider = CartIdentityProvider(
            CoffeeApiClient(base_url=BASE_URL, http=http), CartIdStore(MemoryStorage({"cartId": "77"})), CartData(),
        )
        provider.restore()

        assert await provider.ensure_cart_id() == 77
        assert backend.count("POST", "/coffee/carts") == 0

    @pytest.mark.asyncio
    async def test_reset_forces_new_identity(self, provider, backend, storage):
        await provider.ensure_cart_id()
        provider.reset_identity()

        assert provider.cart_id is None
        assert storage.get_item("cartId") is None
        assert await provider.ensure_cart_id() == 43


class TestRequireCartId:
    def test_without_identity_raises(self, provider, backend):
        with pytest.raises(StateInconsistency):
            provider.require_cart_id()
        assert backend.requests == []

    @pytest.mark.asyncio
    async def test_returns_held_identity(self, provider):
        await provider.ensure_cart_id()
        assert provider.require_cart_id() == 42
