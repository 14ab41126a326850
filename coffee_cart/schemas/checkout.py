from pydantic import BaseModel, Field
from coffee_cart.schemas.common import WireModel

class CheckoutInfo(BaseModel):
    """결제 화면에서 입력받는 고객 정보 (검증 전 원본 값)"""
    email: str = ""
    address: str = ""
    zip_code: str = ""

class PaymentRequest(WireModel):
    """백엔드 PaymentRequest와 동일"""
    customer_email: str = Field(alias="customerEmail")
    address: str
    zipcode: str
