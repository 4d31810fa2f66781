import logging

from bookshop.application.ports import UnitOfWork
from bookshop.application.use_cases.cart import load_cart_with_items
from bookshop.domain.errors import EmptyCartError, ProductUnavailableError
from bookshop.domain.order import (
    Order,
    OrderData,
    OrderItemData,
    OrderLine,
    OrderStatus,
    OrderWithItems,
)

logger = logging.getLogger(__name__)


class PlaceOrderUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    # 注文の作成・明細のスナップショット・カートのクリアを 1 つのトランザクションで行う
    def execute(self, user_id: int, address: str, phone: str) -> Order:
        with self.uow:
            cart = self.uow.carts.get_by_user_id(user_id)
            if cart is None:
                raise EmptyCartError(f"User {user_id} has no cart")
            cart_with_items = load_cart_with_items(self.uow, cart)
            if cart_with_items.is_empty:
                raise EmptyCartError(f"Cart {cart.id} is empty")
            for line in cart_with_items.items:
                if not line.product.in_stock:
                    raise ProductUnavailableError(f"Product {line.product_id} is out of stock")

            # カートを先に空にして確保する。読み込んだ明細と削除件数が一致しなければ
            # 同じカートを別のリクエストが先に注文している
            claimed = self.uow.cart_items.delete_by_cart(cart.id)
            if claimed != len(cart_with_items.items):
                raise EmptyCartError(f"Cart {cart.id} was checked out by another request")

            order = self.uow.orders.add(
                OrderData(
                    user_id=user_id,
                    total=cart_with_items.total_price,
                    status=OrderStatus.PENDING,
                    address=address,
                    phone=phone,
                )
            )
            for line in cart_with_items.items:
                self.uow.order_items.add(
                    OrderItemData(
                        order_id=order.id,
                        product_id=line.product_id,
                        quantity=line.quantity,
                        price=line.unit_price,
                    )
                )
            self.uow.commit()
            logger.info(
                f"Placed order {order.id} for user {user_id}: "
                f"{len(cart_with_items.items)} lines, total {order.total}"
            )
            return order


class GetOrderWithItemsUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    def execute(self, order_id: int) -> OrderWithItems | None:
        with self.uow:
            order = self.uow.orders.get(order_id)
            if order is None:
                return None
            lines = [
                OrderLine(**item.model_dump(), product=self.uow.products.get(item.product_id))
                for item in self.uow.order_items.list_by_order(order_id)
            ]
            return OrderWithItems(**order.model_dump(), items=lines)


class ListUserOrdersUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    # 新しい注文から順に返す
    def execute(self, user_id: int) -> list[Order]:
        with self.uow:
            orders = self.uow.orders.list_by_user(user_id)
        return sorted(orders, key=lambda order: (order.created_at, order.id), reverse=True)


class UpdateOrderStatusUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    def execute(self, order_id: int, status: OrderStatus) -> Order | None:
        with self.uow:
            order = self.uow.orders.get(order_id)
            if order is None:
                return None
            previous = order.status
            order.change_status(status)
            order = self.uow.orders.update(order_id, {"status": order.status})
            self.uow.commit()
            logger.info(f"Order {order_id} status changed from {previous.value} to {order.status.value}")
            return order
