from datetime import datetime
from pydantic import Field
from coffee_cart.schemas.common import WireModel

class OrderItemResponse(WireModel):
    order_item_id: int = Field(alias="orderItemId")
    product_id: int = Field(alias="productId")
    product_name: str = Field(alias="productName")
    quantity: int
    unit_price: int = Field(alias="unitPrice")
    subtotal_price: int = Field(alias="subtotalPrice")

class OrderResponse(WireModel):
    order_id: int = Field(alias="orderId")  # = cart id
    customer_email: str | None = Field(default=None, alias="customerEmail")
    ship_to_address: str | None = Field(default=None, alias="shipToAddress")
    ship_to_zipcode: str | None = Field(default=None, alias="shipToZipcode")
    order_date: datetime | None = Field(default=None, alias="orderDate")
    order_items: tuple[OrderItemResponse, ...] = Field(default=(), alias="orderItems")
    total_amount: int = Field(default=0, alias="totalAmount")

class LoginIn(WireModel):
    username: str
    password: str

class LoginOut(WireModel):
    token: str | None = None
