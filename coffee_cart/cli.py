from __future__ import annotations

import argparse
import asyncio
import getpass
import logging
import sys

from pydantic import ValidationError

from coffee_cart.core.config import settings
from coffee_cart.main import ShopApp
from coffee_cart.model.cart_data import CartData
from coffee_cart.schemas.checkout import CheckoutInfo
from coffee_cart.schemas.product import ProductCreate
from coffee_cart.services.admin_client import AdminAuthError, filter_orders, filter_products
from coffee_cart.services.api_client import ApiClientError, ServerError
from coffee_cart.services.checkout import format_krw


class ConsoleConfirmation:
    def __init__(self, assume_yes: bool = False) -> None:
        self.assume_yes = assume_yes

    def confirm(self, message: str) -> bool:
        if self.assume_yes:
            return True
        answer = input(f"{message} [y/N] ")
        return answer.strip().lower() in ("y", "yes")


class ConsoleNotifier:
    def info(self, message: str) -> None:
        print(message)

    def error(self, message: str) -> None:
        print(f"[오류] {message}", file=sys.stderr)


def print_products(data: CartData) -> None:
    if not data.products:
        print("상품을 불러오는 중이거나, 등록된 상품이 없습니다.")
        return
    for p in data.products:
        if data.is_in_cart(p.id):
            print(f"[x] {p.id:>4}  {p.name}  {format_krw(p.price)}  x{data.get_item_quantity(p.id)}")
        else:
            print(f"[ ] {p.id:>4}  {p.name}  {format_krw(p.price)}")


def print_summary(data: CartData) -> None:
    if data.summary.is_empty():
        print("장바구니가 비어 있습니다.")
        return
    for line in data.summary.lines:
        print(f"{line.product_id:>4}  {line.name} x{line.quantity}  {format_krw(line.line_total)}")
    print(f"총 {data.get_total_quantity()}개  {format_krw(data.get_total_amount())}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="coffee-cart", description="커피 주문 콘솔")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("products", help="상품 목록")
    p = sub.add_parser("detail", help="상품 상세")
    p.add_argument("product_id", type=int)
    sub.add_parser("summary", help="장바구니 요약")

    p = sub.add_parser("add", help="장바구니 담기")
    p.add_argument("product_id", type=int)
    p = sub.add_parser("remove", help="장바구니에서 삭제")
    p.add_argument("product_id", type=int)
    p.add_argument("--yes", action="store_true", help="삭제 확인 생략")
    p = sub.add_parser("inc", help="수량 증가")
    p.add_argument("product_id", type=int)
    p = sub.add_parser("dec", help="수량 감소")
    p.add_argument("product_id", type=int)

    p = sub.add_parser("checkout", help="결제")
    p.add_argument("--email", required=True)
    p.add_argument("--address", required=True)
    p.add_argument("--zip", dest="zip_code", required=True)

    sub.add_parser("reset", help="장바구니 초기화")

    admin = sub.add_parser("admin", help="관리자 기능")
    admin_sub = admin.add_subparsers(dest="admin_command", required=True)
    p = admin_sub.add_parser("login")
    p.add_argument("-u", "--username", required=True)
    p.add_argument("-p", "--password")
    admin_sub.add_parser("logout")
    p = admin_sub.add_parser("orders")
    p.add_argument("--daily", action="store_true", help="금일 주문만")
    p.add_argument("-q", "--query", default="")
    p = admin_sub.add_parser("products")
    p.add_argument("-q", "--query", default="")
    p = admin_sub.add_parser("add-product")
    p.add_argument("--name", required=True)
    p.add_argument("--price", type=int, required=True)
    p.add_argument("--contents", required=True)
    p.add_argument("--stock", type=int, required=True)
    p.add_argument("--image", required=True, help="업로드할 이미지 파일 경로")
    return parser


async def run_admin(app: ShopApp, args: argparse.Namespace) -> int:
    admin = app.admin
    cmd = args.admin_command
    try:
        if cmd == "login":
            password = args.password or getpass.getpass("비밀번호: ")
            try:
                await admin.login(args.username, password)
            except (AdminAuthError, ServerError):
                print("[오류] 로그인에 실패했습니다. 아이디/비밀번호를 확인해주세요.", file=sys.stderr)
                return 1
            print("로그인 되었습니다.")
        elif cmd == "logout":
            admin.logout()
            print("로그아웃 되었습니다.")
        elif cmd == "orders":
            orders = await (admin.list_daily_orders() if args.daily else admin.list_orders())
            for o in filter_orders(orders, args.query):
                when = o.order_date.strftime("%Y.%m.%d %H:%M") if o.order_date else "—"
                print(f"#{o.order_id}  {when}  {o.customer_email or '-'}  "
                      f"{o.ship_to_address or '-'} ({o.ship_to_zipcode or '-'})  {format_krw(o.total_amount)}")
                for it in o.order_items:
                    print(f"    {it.product_name} x{it.quantity}  {format_krw(it.subtotal_price)}")
        elif cmd == "products":
            for p in filter_products(await admin.list_products(), args.query):
                print(f"{p.id:>4}  {p.name}  {format_krw(p.price)}  재고 {p.stock if p.stock is not None else '-'}  {p.image_url or ''}")
        elif cmd == "add-product":
            # 가격/재고 등 입력 검증을 업로드 전에 먼저 수행
            ProductCreate(name=args.name.strip(), price=args.price, contents=args.contents.strip(),
                          image_url="pending", stock=args.stock)
            image_url = await admin.upload_product_image(args.image)
            await admin.add_product(ProductCreate(
                name=args.name.strip(), price=args.price, contents=args.contents.strip(),
                image_url=image_url, stock=args.stock,
            ))
            print("등록되었습니다.")
    except AdminAuthError:
        print("[오류] 관리자 로그인이 필요합니다.", file=sys.stderr)
        return 1
    except (ValueError, ValidationError) as e:
        print(f"[오류] {e}", file=sys.stderr)
        return 1
    except (ApiClientError, OSError) as e:
        logging.error(f"[관리자] 요청 실패: {e}")
        print("[오류] 요청을 처리하지 못했습니다.", file=sys.stderr)
        return 1
    return 0


async def run(args: argparse.Namespace) -> int:
    confirmer = ConsoleConfirmation(assume_yes=getattr(args, "yes", False))
    async with ShopApp(confirmer, ConsoleNotifier()) as app:
        if args.command == "admin":
            return await run_admin(app, args)
        if args.command == "reset":
            app.reset_cart()
            print("장바구니를 초기화했습니다.")
            return 0

        await app.mount()

        ok = True
        if args.command == "products":
            print_products(app.data)
        elif args.command == "detail":
            product = await app.catalog.get_product_detail(args.product_id)
            if product is None:
                print("상품 정보를 불러오지 못했습니다.", file=sys.stderr)
                return 1
            print(f"{product.name}  {format_krw(product.price)}")
            print(product.contents or "설명 정보가 없습니다.")
            if product.image_url:
                print(product.image_url)
        elif args.command == "summary":
            print_summary(app.data)
        elif args.command in ("add", "remove"):
            ok = await app.mutations.toggle(args.product_id, args.command == "add")
            print_summary(app.data)
        elif args.command == "inc":
            ok = await app.mutations.increase_quantity(args.product_id)
            print_summary(app.data)
        elif args.command == "dec":
            ok = await app.mutations.decrease_quantity(args.product_id)
            print_summary(app.data)
        elif args.command == "checkout":
            info = CheckoutInfo(email=args.email, address=args.address, zip_code=args.zip_code)
            ok = await app.checkout.submit_checkout(info)
        return 0 if ok else 1


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    args = build_parser().parse_args(argv)
    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
