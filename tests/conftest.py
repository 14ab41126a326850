"""Pytest configuration and fixtures"""
import asyncio
import json
import os
import re

import httpx
import pytest

# Set test environment variables
os.environ.setdefault("API_BASE_URL", "http://testserver")
os.environ.setdefault("CART_CREATION_MODE", "lazy")

from coffee_cart.core.config import Settings
from coffee_cart.main import ShopApp
from coffee_cart.services.storage import MemoryStorage

BASE_URL = "http://testserver"
ADMIN_TOKEN = "admin-token-123"


def envelope(data, code="200-1", msg="OK", status=200):
    return httpx.Response(status, json={"resultCode": code, "msg": msg, "data": data})


class FakeBackend:
    """Coffee backend kept in memory and served through httpx.MockTransport."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.products = {
            7: {"coffeeId": 7, "name": "Columbia Nariñó", "price": 5000,
                "contents": "산미가 좋은 원두", "imageUrl": "columbia.png", "stock": 10},
            8: {"coffeeId": 8, "name": "Brazil Serra Do Caparaó", "price": 6000,
                "imageUrl": "http://cdn.example.com/brazil.png", "stock": 3},
        }
        self.carts: dict[int, dict[int, int]] = {}
        self.next_cart_id = 42
        self.emails: dict[int, str] = {}
        self.dates: dict[int, str] = {}
        self.customers: dict[int, dict] = {}
        self.added_products: list[dict] = []
        # (method, path) -> HTTP status to fail with
        self.fail: dict[tuple[str, str], int] = {}
        # (method, path) -> raise transport error
        self.offline: set[tuple[str, str]] = set()
        # (method, path) -> event the request waits on
        self.gates: dict[tuple[str, str], asyncio.Event] = {}

    # ---- helpers for assertions ----
    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]

    def count(self, method: str, path: str) -> int:
        return len(self.calls(method, path))

    def summary(self, cart_id: int) -> dict:
        items = []
        for pid, qty in self.carts.get(cart_id, {}).items():
            price = self.products[pid]["price"]
            items.append({
                "itemId": cart_id * 100 + pid,
                "productId": pid,
                "name": self.products[pid]["name"],
                "unitPrice": price,
                "qty": qty,
                "lineTotal": price * qty,
            })
        return {"items": items, "totalAmount": sum(i["lineTotal"] for i in items)}

    # ---- transport ----
    async def handler(self, request: httpx.Request) -> httpx.Response:
        await request.aread()
        self.requests.append(request)
        key = (request.method, request.url.path)

        gate = self.gates.get(key)
        if gate is not None:
            await gate.wait()
        if key in self.offline:
            raise httpx.ConnectError("connection refused", request=request)
        if key in self.fail:
            return httpx.Response(self.fail[key], json={"resultCode": f"{self.fail[key]}-1", "msg": "fail", "data": None})

        return self.route(request)

    def route(self, request: httpx.Request) -> httpx.Response:
        method, path = request.method, request.url.path

        if path.startswith("/admin/") and path != "/admin/login" or path.startswith("/coffee/products/"):
            if request.headers.get("Authorization") != f"Bearer {ADMIN_TOKEN}":
                return httpx.Response(401, json={"resultCode": "401-1", "msg": "unauthorized", "data": None})

        if method == "POST" and path == "/coffee/carts":
            cart_id = self.next_cart_id
            self.next_cart_id += 1
            self.carts[cart_id] = {}
            return envelope({"cartId": cart_id})

        if method == "GET" and path == "/coffee/products":
            return envelope(list(self.products.values()))

        m = re.fullmatch(r"/coffee/(\d+)", path)
        if method == "GET" and m:
            p = self.products.get(int(m.group(1)))
            if p is None:
                return httpx.Response(404, json={"resultCode": "404-1", "msg": "not found", "data": None})
            return envelope(p)

        m = re.fullmatch(r"/coffee/carts/(\d+)/summary", path)
        if method == "GET" and m:
            return envelope(self.summary(int(m.group(1))))

        if method == "POST" and path == "/coffee/carts/items":
            body = json.loads(request.content)
            self.carts.setdefault(body["cartId"], {})[body["productId"]] = 1
            return envelope(None, code="201-1")

        m = re.fullmatch(r"/coffee/carts/(\d+)/items/(\d+)(?:/(increase|decrease))?", path)
        if m:
            cart = self.carts.setdefault(int(m.group(1)), {})
            pid, action = int(m.group(2)), m.group(3)
            if method == "DELETE" and action is None:
                cart.pop(pid, None)
                return envelope(None)
            if method == "POST" and action == "increase":
                cart[pid] = cart.get(pid, 0) + 1
                return envelope(None)
            if method == "POST" and action == "decrease":
                cart[pid] = cart.get(pid, 0) - 1
                if cart[pid] <= 0:
                    del cart[pid]
                return envelope(None)

        m = re.fullmatch(r"/coffee/carts/(\d+)/(email|date|customer)", path)
        if method == "POST" and m:
            cart_id, what = int(m.group(1)), m.group(2)
            if what == "email":
                self.emails[cart_id] = request.content.decode("utf-8")
            elif what == "date":
                self.dates[cart_id] = request.content.decode("utf-8")
            else:
                self.customers[cart_id] = json.loads(request.content)
            return envelope(None)

        if method == "POST" and path == "/admin/login":
            body = json.loads(request.content)
            if body == {"username": "admin", "password": "secret"}:
                return envelope({"token": ADMIN_TOKEN})
            return httpx.Response(401, json={"resultCode": "401-1", "msg": "bad credentials", "data": None})

        if method == "GET" and path in ("/admin/orders", "/admin/orders/dailyBatch"):
            return envelope([{
                "orderId": 42,
                "customerEmail": "kim@example.com",
                "shipToAddress": "서울시 강남구",
                "shipToZipcode": "06236",
                "orderDate": "2025-01-02T10:30:00",
                "orderItems": [{
                    "orderItemId": 1, "productId": 7, "productName": "Columbia Nariñó",
                    "quantity": 2, "unitPrice": 5000, "subtotalPrice": 10000,
                }],
                "totalAmount": 10000,
            }])

        if method == "POST" and path == "/coffee/products/image":
            return envelope({"imageUrl": "/images/uploaded.png"})

        if method == "POST" and path == "/coffee/products/add":
            self.added_products.append(json.loads(request.content))
            return envelope(None)

        return httpx.Response(404, json={"resultCode": "404-1", "msg": "no route", "data": None})


class RecordingNotifier:
    def __init__(self):
        self.infos: list[str] = []
        self.errors: list[str] = []

    def info(self, message):
        self.infos.append(message)

    def error(self, message):
        self.errors.append(message)


class StubConfirmation:
    def __init__(self, answer=True):
        self.answer = answer
        self.asked: list[str] = []

    def confirm(self, message):
        self.asked.append(message)
        return self.answer


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def http(backend):
    return httpx.AsyncClient(transport=httpx.MockTransport(backend.handler))


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def confirmer():
    return StubConfirmation()


@pytest.fixture
def test_settings():
    return Settings(_env_file=None, API_BASE_URL=BASE_URL, CART_CREATION_MODE="lazy")


@pytest.fixture
def app(http, storage, notifier, confirmer, test_settings):
    return ShopApp(confirmer, notifier, storage=storage, settings=test_settings, http=http)
