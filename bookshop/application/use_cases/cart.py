import logging

from bookshop.application.ports import UnitOfWork
from bookshop.domain.cart import Cart, CartData, CartItem, CartItemData, CartLine, CartWithItems
from bookshop.domain.errors import DataIntegrityError, InvalidQuantityError, ProductUnavailableError

logger = logging.getLogger(__name__)


def _check_quantity(quantity: int) -> None:
    # bool は int のサブクラスなので明示的に除外する
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
        raise InvalidQuantityError(f"Quantity must be a positive integer, got {quantity!r}")


# カート明細と商品を結合する (unit of work の中で呼ぶこと)
def load_cart_with_items(uow: UnitOfWork, cart: Cart) -> CartWithItems:
    lines = []
    for item in uow.cart_items.list_by_cart(cart.id):
        product = uow.products.get(item.product_id)
        if product is None:
            raise DataIntegrityError(
                f"Cart item {item.id} in cart {cart.id} references missing product {item.product_id}"
            )
        lines.append(CartLine(**item.model_dump(), product=product))
    return CartWithItems(**cart.model_dump(), items=lines)


def get_or_create_cart(uow: UnitOfWork, user_id: int) -> Cart:
    cart = uow.carts.get_by_user_id(user_id)
    if cart is None:
        cart = uow.carts.add(CartData(user_id=user_id))
        logger.info(f"Created cart {cart.id} for user {user_id}")
    return cart


class GetOrCreateCartUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    def execute(self, user_id: int) -> Cart:
        with self.uow:
            cart = get_or_create_cart(self.uow, user_id)
            self.uow.commit()
            return cart


class GetCartWithItemsUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    def execute(self, cart_id: int) -> CartWithItems | None:
        with self.uow:
            cart = self.uow.carts.get(cart_id)
            if cart is None:
                return None
            return load_cart_with_items(self.uow, cart)


class AddCartItemUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    # 同じ商品がすでにカートにあれば行を増やさず数量を合算する
    def execute(self, cart_id: int, product_id: int, quantity: int = 1) -> CartItem | None:
        _check_quantity(quantity)
        with self.uow:
            if self.uow.carts.get(cart_id) is None:
                return None
            product = self.uow.products.get(product_id)
            if product is None:
                return None
            if not product.in_stock:
                raise ProductUnavailableError(f"Product {product_id} is out of stock")
            existing = self.uow.cart_items.find_in_cart(cart_id, product_id)
            if existing:
                item = self.uow.cart_items.update(existing.id, {"quantity": existing.quantity + quantity})
            else:
                item = self.uow.cart_items.add(
                    CartItemData(cart_id=cart_id, product_id=product_id, quantity=quantity)
                )
            self.uow.commit()
            return item


class UpdateCartItemQuantityUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    # 数量 0 への更新は受け付けない (削除は RemoveCartItemUseCase で行う)
    def execute(self, item_id: int, quantity: int, cart_id: int | None = None) -> CartItem | None:
        _check_quantity(quantity)
        with self.uow:
            item = self.uow.cart_items.get(item_id)
            if item is None or (cart_id is not None and item.cart_id != cart_id):
                return None
            item = self.uow.cart_items.update(item_id, {"quantity": quantity})
            self.uow.commit()
            return item


class RemoveCartItemUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    def execute(self, item_id: int, cart_id: int | None = None) -> bool:
        with self.uow:
            item = self.uow.cart_items.get(item_id)
            if item is None or (cart_id is not None and item.cart_id != cart_id):
                return False
            removed = self.uow.cart_items.delete(item_id)
            self.uow.commit()
            return removed


class ClearCartUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    def execute(self, cart_id: int) -> bool:
        with self.uow:
            self.uow.cart_items.delete_by_cart(cart_id)
            self.uow.commit()
            return True
