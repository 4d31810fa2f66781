from abc import ABC, abstractmethod
from typing import Any, Generic, Mapping, TypeVar

from pydantic import BaseModel

from bookshop.domain.user import User, UserData
from bookshop.domain.catalog import Category, CategoryData, Product, ProductData, ProductFlag, Review, ReviewData
from bookshop.domain.cart import Cart, CartData, CartItem, CartItemData
from bookshop.domain.order import Order, OrderData, OrderItem, OrderItemData

D = TypeVar("D", bound=BaseModel)
E = TypeVar("E", bound=BaseModel)

#
# リポジトリ (エンティティごと)
# add で ID を採番し、get / update は存在しなければ None を返す
#
class Repository(ABC, Generic[D, E]):
    @abstractmethod
    def add(self, data: D) -> E: ...

    @abstractmethod
    def get(self, id: int) -> E | None: ...

    # 浅いマージ: 指定されたフィールドだけを上書きする
    @abstractmethod
    def update(self, id: int, changes: Mapping[str, Any]) -> E | None: ...

    @abstractmethod
    def list_all(self) -> list[E]: ...


class UserRepository(Repository[UserData, User]):
    @abstractmethod
    def get_by_username(self, username: str) -> User | None: ...

    @abstractmethod
    def get_by_email(self, email: str) -> User | None: ...


class CategoryRepository(Repository[CategoryData, Category]): ...


class ProductRepository(Repository[ProductData, Product]):
    @abstractmethod
    def list_by_category(self, category_id: int) -> list[Product]: ...

    @abstractmethod
    def list_by_flag(self, flag: ProductFlag) -> list[Product]: ...

    # 商品名または説明文に対する大文字小文字を区別しない部分一致
    @abstractmethod
    def search(self, term: str) -> list[Product]: ...


class ReviewRepository(Repository[ReviewData, Review]):
    @abstractmethod
    def list_by_product(self, product_id: int) -> list[Review]: ...


class CartRepository(Repository[CartData, Cart]):
    @abstractmethod
    def get_by_user_id(self, user_id: int) -> Cart | None: ...


class CartItemRepository(Repository[CartItemData, CartItem]):
    @abstractmethod
    def list_by_cart(self, cart_id: int) -> list[CartItem]: ...

    @abstractmethod
    def find_in_cart(self, cart_id: int, product_id: int) -> CartItem | None: ...

    @abstractmethod
    def delete(self, id: int) -> bool: ...

    @abstractmethod
    def delete_by_cart(self, cart_id: int) -> int: ...


class OrderRepository(Repository[OrderData, Order]):
    @abstractmethod
    def list_by_user(self, user_id: int) -> list[Order]: ...


class OrderItemRepository(Repository[OrderItemData, OrderItem]):
    @abstractmethod
    def list_by_order(self, order_id: int) -> list[OrderItem]: ...


class UnitOfWork(ABC):
    @abstractmethod
    def __enter__(self) -> "UnitOfWork": ...

    @abstractmethod
    def __exit__(self, exc_type, exc_value, traceback) -> None: ...

    @property
    @abstractmethod
    def users(self) -> UserRepository: ...

    @property
    @abstractmethod
    def categories(self) -> CategoryRepository: ...

    @property
    @abstractmethod
    def products(self) -> ProductRepository: ...

    @property
    @abstractmethod
    def reviews(self) -> ReviewRepository: ...

    @property
    @abstractmethod
    def carts(self) -> CartRepository: ...

    @property
    @abstractmethod
    def cart_items(self) -> CartItemRepository: ...

    @property
    @abstractmethod
    def orders(self) -> OrderRepository: ...

    @property
    @abstractmethod
    def order_items(self) -> OrderItemRepository: ...

    @abstractmethod
    def commit(self) -> None: ...

    @abstractmethod
    def rollback(self) -> None: ...


class PasswordHasher(ABC):
    @abstractmethod
    def hash(self, raw: str) -> str: ...

    @abstractmethod
    def verify(self, raw: str, hashed: str) -> bool: ...
