from pydantic import ConfigDict, Field
from coffee_cart.schemas.common import WireModel

class NewCartOut(WireModel):
    cart_id: int = Field(alias="cartId", gt=0)

class CartLine(WireModel):
    line_id: int = Field(alias="itemId")
    product_id: int = Field(alias="productId")
    name: str
    unit_price: int = Field(alias="unitPrice")
    quantity: int = Field(alias="qty")
    line_total: int = Field(alias="lineTotal")

class CartSummary(WireModel):
    """서버가 계산한 장바구니 요약. 합계는 클라이언트에서 다시 계산하지 않는다."""
    # 응답은 {items, totalAmount} 그대로여야 함 (빈 dict 등은 거부)
    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="forbid")

    lines: tuple[CartLine, ...] = Field(alias="items")
    total_amount: int = Field(alias="totalAmount")

    @classmethod
    def empty(cls) -> "CartSummary":
        return cls(lines=(), total_amount=0)

    @property
    def product_ids(self) -> frozenset[int]:
        return frozenset(line.product_id for line in self.lines)

    @property
    def total_quantity(self) -> int:
        # 화면 표시용 (품목 n개 중 총 수량)
        return sum(line.quantity for line in self.lines)

    def contains(self, product_id: int) -> bool:
        return product_id in self.product_ids

    def is_empty(self) -> bool:
        return not self.lines

class AddCartItemIn(WireModel):
    cart_id: int = Field(alias="cartId")
    product_id: int = Field(alias="productId")
