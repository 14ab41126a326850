from coffee_cart.schemas.cart import CartSummary
from coffee_cart.schemas.checkout import CheckoutInfo
from coffee_cart.schemas.product import Product


class CartData:
    """화면들이 공유하는 클라이언트 상태. summary는 서버 응답을 통째로 교체만 한다."""

    def __init__(self):
        self.cart_id = None
        self.summary = CartSummary.empty()
        self.products = []
        self.checkout = CheckoutInfo()

    def set_cart_id(self, cart_id):
        self.cart_id = cart_id

    def get_cart_id(self):
        return self.cart_id

    def set_summary(self, summary: CartSummary):
        self.summary = summary

    def set_products(self, products: list[Product]):
        self.products = list(products)

    def set_checkout(self, info: CheckoutInfo):
        self.checkout = info

    def is_in_cart(self, product_id):
        return self.summary.contains(product_id)

    def get_item_quantity(self, product_id):
        for line in self.summary.lines:
            if line.product_id == product_id:
                return line.quantity
        return 0

    def get_total_amount(self):
        return self.summary.total_amount

    def get_total_quantity(self):
        return self.summary.total_quantity

    def clear(self):
        """결제 완료 후 장바구니 초기화"""
        self.cart_id = None
        self.summary = CartSummary.empty()
        self.checkout = CheckoutInfo()
