from __future__ import annotations

import logging
import re

from coffee_cart.model.cart_data import CartData
from coffee_cart.ports import NotificationPort
from coffee_cart.schemas.cart import CartSummary
from coffee_cart.schemas.checkout import CheckoutInfo, PaymentRequest
from coffee_cart.services.api_client import ApiClientError, CoffeeApiClient
from coffee_cart.services.cart_identity import MSG_CART_CREATE_FAILED, CartCreationError, CartIdentityProvider
from coffee_cart.services.cart_summary import CartSummarySynchronizer

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")
ZIP_RE = re.compile(r"[0-9]{5}")

MSG_EMPTY_CART = "장바구니가 비어 있습니다. 상품을 추가해주세요."
MSG_INVALID_EMAIL = "이메일 형식이 올바르지 않습니다."
MSG_EMPTY_ADDRESS = "주소를 입력하세요."
MSG_INVALID_ZIP = "우편번호는 5자리 숫자입니다."
MSG_CUSTOMER_FAILED = "고객 정보 저장에 실패했습니다."
MSG_CHECKOUT_DONE = "결제 요청이 완료되었습니다."


class ValidationFailure(ValueError):
    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


def format_krw(n: int | None) -> str:
    return f"{n or 0:,}원"


def validate_checkout(summary: CartSummary, info: CheckoutInfo) -> PaymentRequest:
    """첫 번째 실패에서 ValidationFailure. 통과하면 공백 제거된 결제 요청을 반환."""
    if summary.is_empty():
        raise ValidationFailure(MSG_EMPTY_CART)

    email = info.email.strip()
    address = info.address.strip()
    zipcode = info.zip_code.strip()

    if not EMAIL_RE.fullmatch(email):
        raise ValidationFailure(MSG_INVALID_EMAIL)
    if not address:
        raise ValidationFailure(MSG_EMPTY_ADDRESS)
    if not ZIP_RE.fullmatch(zipcode):
        raise ValidationFailure(MSG_INVALID_ZIP)

    return PaymentRequest(customer_email=email, address=address, zipcode=zipcode)


def order_announcement(summary: CartSummary, payment: PaymentRequest) -> str:
    return (
        "결제 요청\n"
        f"- 품목: {len(summary.lines)}개 ({summary.total_quantity}개)\n"
        f"- 총금액: {format_krw(summary.total_amount)}\n"
        f"- 이메일: {payment.customer_email}\n"
        f"- 주소: {payment.address}\n"
        f"- 우편번호: {payment.zipcode}"
    )


class CheckoutGate:
    """검증 후 이메일 -> 주문시간 -> 고객정보 순서로 저장.

    이메일/주문시간 실패는 진행, 고객정보 실패는 중단(카트 유지).
    앞 단계는 되돌리지 않는다.
    """

    def __init__(
        self,
        api: CoffeeApiClient,
        identity: CartIdentityProvider,
        synchronizer: CartSummarySynchronizer,
        data: CartData,
        notifier: NotificationPort,
    ) -> None:
        self.api = api
        self.identity = identity
        self.synchronizer = synchronizer
        self.data = data
        self.notifier = notifier
        self._paying = False

    async def submit_checkout(self, info: CheckoutInfo) -> bool:
        if self._paying:
            logger.info("[결제] 이미 진행 중인 결제 요청이 있어 무시")
            return False
        self._paying = True
        try:
            return await self._submit(info)
        finally:
            self._paying = False

    async def _submit(self, info: CheckoutInfo) -> bool:
        self.data.set_checkout(info)
        summary = self.data.summary

        try:
            payment = validate_checkout(summary, info)
        except ValidationFailure as e:
            self.notifier.error(e.message)
            return False

        try:
            cart_id = await self.identity.ensure_cart_id()
        except CartCreationError:
            self.notifier.error(MSG_CART_CREATE_FAILED)
            return False

        self.notifier.info(order_announcement(summary, payment))

        try:
            await self.api.set_owner_email(cart_id, payment.customer_email)
        except ApiClientError as e:
            logger.warning(f"[결제] 이메일 저장 실패 (계속 진행): {e}")

        try:
            await self.api.set_order_date(cart_id)
        except ApiClientError as e:
            logger.debug(f"[결제] 주문시간 저장 실패 (선택): {e}")

        try:
            await self.api.create_customer(cart_id, payment)
        except ApiClientError as e:
            logger.error(f"[결제] 고객 정보 저장 실패: {e}")
            self.notifier.error(MSG_CUSTOMER_FAILED)
            return False

        logger.info(f"[결제] 완료 (cart={cart_id})")
        self.reset_after_pay()
        self.notifier.info(MSG_CHECKOUT_DONE)
        return True

    def reset_after_pay(self) -> None:
        self.identity.reset_identity()
        self.synchronizer.reset()
        self.data.clear()
