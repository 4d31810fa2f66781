from datetime import datetime, timezone
from typing import Any, Callable, Generic, Mapping, TypeVar

from pydantic import BaseModel

from bookshop.application.ports import (
    CartItemRepository,
    CartRepository,
    CategoryRepository,
    OrderItemRepository,
    OrderRepository,
    ProductRepository,
    ReviewRepository,
    UserRepository,
)
from bookshop.adapters.db.memory.store import InMemoryStore
from bookshop.domain.user import User
from bookshop.domain.catalog import Category, Product, ProductFlag, Review
from bookshop.domain.cart import Cart, CartItem
from bookshop.domain.order import Order, OrderItem

D = TypeVar("D", bound=BaseModel)
E = TypeVar("E", bound=BaseModel)

_IMMUTABLE_FIELDS = {"id", "created_at"}


class InMemoryRepository(Generic[D, E]):
    entity_type: type[BaseModel]
    table: str

    def __init__(self, store: InMemoryStore, saved: dict[str, dict[int, Any]]):
        self.store = store
        # unit of work が持つ変更前のテーブル。最初に書き込むときだけコピーする
        self._saved = saved

    @property
    def _rows(self) -> dict[int, Any]:
        return self.store.tables[self.table]

    @property
    def _writable_rows(self) -> dict[int, Any]:
        if self.table not in self._saved:
            self._saved[self.table] = dict(self.store.tables[self.table])
        return self.store.tables[self.table]

    def add(self, data: D) -> E:
        fields = data.model_dump()
        if "created_at" in self.entity_type.model_fields:
            fields["created_at"] = datetime.now(timezone.utc)
        entity = self.entity_type(id=self.store.next_id(self.table), **fields)
        self._writable_rows[entity.id] = entity
        return entity.model_copy(deep=True)

    def get(self, id: int) -> E | None:
        entity = self._rows.get(id)
        if entity is None:
            return None
        return entity.model_copy(deep=True)

    def update(self, id: int, changes: Mapping[str, Any]) -> E | None:
        current = self._rows.get(id)
        if current is None:
            return None
        updated = current.model_copy(deep=True)
        # フィールドごとに代入する (validate_assignment で型も検証される)
        for name, value in changes.items():
            if name in _IMMUTABLE_FIELDS or name not in self.entity_type.model_fields:
                raise ValueError(f"{self.entity_type.__name__} has no updatable field '{name}'")
            setattr(updated, name, value)
        self._writable_rows[id] = updated
        return updated.model_copy(deep=True)

    def list_all(self) -> list[E]:
        return self._filter(lambda entity: True)

    def _filter(self, predicate: Callable[[Any], bool]) -> list[E]:
        return [entity.model_copy(deep=True) for entity in self._rows.values() if predicate(entity)]

    def _first(self, predicate: Callable[[Any], bool]) -> E | None:
        for entity in self._rows.values():
            if predicate(entity):
                return entity.model_copy(deep=True)
        return None


class InMemoryUserRepository(InMemoryRepository, UserRepository):
    entity_type = User
    table = "users"

    def get_by_username(self, username: str) -> User | None:
        return self._first(lambda user: user.username == username)

    def get_by_email(self, email: str) -> User | None:
        return self._first(lambda user: user.email == email)


class InMemoryCategoryRepository(InMemoryRepository, CategoryRepository):
    entity_type = Category
    table = "categories"


class InMemoryProductRepository(InMemoryRepository, ProductRepository):
    entity_type = Product
    table = "products"

    def list_by_category(self, category_id: int) -> list[Product]:
        return self._filter(lambda product: product.category_id == category_id)

    def list_by_flag(self, flag: ProductFlag) -> list[Product]:
        return self._filter(lambda product: product.has_flag(flag))

    def search(self, term: str) -> list[Product]:
        return self._filter(lambda product: product.matches(term))


class InMemoryReviewRepository(InMemoryRepository, ReviewRepository):
    entity_type = Review
    table = "reviews"

    def list_by_product(self, product_id: int) -> list[Review]:
        return self._filter(lambda review: review.product_id == product_id)


class InMemoryCartRepository(InMemoryRepository, CartRepository):
    entity_type = Cart
    table = "carts"

    def get_by_user_id(self, user_id: int) -> Cart | None:
        return self._first(lambda cart: cart.user_id == user_id)


class InMemoryCartItemRepository(InMemoryRepository, CartItemRepository):
    entity_type = CartItem
    table = "cart_items"

    def list_by_cart(self, cart_id: int) -> list[CartItem]:
        return self._filter(lambda item: item.cart_id == cart_id)

    def find_in_cart(self, cart_id: int, product_id: int) -> CartItem | None:
        return self._first(lambda item: item.cart_id == cart_id and item.product_id == product_id)

    def delete(self, id: int) -> bool:
        if id not in self._rows:
            return False
        del self._writable_rows[id]
        return True

    def delete_by_cart(self, cart_id: int) -> int:
        item_ids = [item.id for item in self._rows.values() if item.cart_id == cart_id]
        if not item_ids:
            return 0
        rows = self._writable_rows
        for item_id in item_ids:
            del rows[item_id]
        return len(item_ids)


class InMemoryOrderRepository(InMemoryRepository, OrderRepository):
    entity_type = Order
    table = "orders"

    def list_by_user(self, user_id: int) -> list[Order]:
        return self._filter(lambda order: order.user_id == user_id)


class InMemoryOrderItemRepository(InMemoryRepository, OrderItemRepository):
    entity_type = OrderItem
    table = "order_items"

    def list_by_order(self, order_id: int) -> list[OrderItem]:
        return self._filter(lambda item: item.order_id == order_id)
