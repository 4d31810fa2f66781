from datetime import datetime, timezone
from typing import Any, Generic, Mapping, TypeVar

from pydantic import BaseModel
from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

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
from bookshop.adapters.db.sqlalchemy import models
from bookshop.domain.user import User
from bookshop.domain.catalog import Category, Product, ProductFlag, Review
from bookshop.domain.cart import Cart, CartData, CartItem, CartItemData
from bookshop.domain.order import Order, OrderItem
from bookshop.domain.errors import DataIntegrityError

D = TypeVar("D", bound=BaseModel)
E = TypeVar("E", bound=BaseModel)

_IMMUTABLE_FIELDS = {"id", "created_at"}


class SQLAlchemyRepository(Generic[D, E]):
    model: type[models.Base]
    entity_type: type[BaseModel]

    def __init__(self, session: Session):
        self.session = session

    def _to_domain(self, row) -> E:
        return self.entity_type.model_validate(row, from_attributes=True)

    def _insert(self, data: D):
        row = self.model(**data.model_dump(mode="json"))
        if "created_at" in self.entity_type.model_fields:
            row.created_at = datetime.now(timezone.utc)
        self.session.add(row)
        self.session.flush()  # ID を採番させる
        return row

    def add(self, data: D) -> E:
        return self._to_domain(self._insert(data))

    # 一意制約に違反した場合はセーブポイントまで戻して None を返す
    def _try_insert(self, data: D):
        try:
            with self.session.begin_nested():
                return self._insert(data)
        except IntegrityError:
            return None

    def get(self, id: int) -> E | None:
        row = self.session.get(self.model, id)
        if row is None:
            return None
        return self._to_domain(row)

    def update(self, id: int, changes: Mapping[str, Any]) -> E | None:
        row = self.session.get(self.model, id)
        if row is None:
            return None
        # ドメインモデルに代入して検証してから行に反映する
        entity = self._to_domain(row)
        for name, value in changes.items():
            if name in _IMMUTABLE_FIELDS or name not in self.entity_type.model_fields:
                raise ValueError(f"{self.entity_type.__name__} has no updatable field '{name}'")
            setattr(entity, name, value)
        for name, value in entity.model_dump(mode="json", include=set(changes)).items():
            setattr(row, name, value)
        self.session.flush()
        return self._to_domain(row)

    def list_all(self) -> list[E]:
        rows = self.session.query(self.model).order_by(self.model.id).all()
        return [self._to_domain(row) for row in rows]

    def _filter_by(self, **criteria) -> list[E]:
        rows = self.session.query(self.model).filter_by(**criteria).order_by(self.model.id).all()
        return [self._to_domain(row) for row in rows]

    def _first_by(self, **criteria) -> E | None:
        row = self.session.query(self.model).filter_by(**criteria).order_by(self.model.id).first()
        if row is None:
            return None
        return self._to_domain(row)

    # 他のトランザクションがコミットした最新の行を読む (MySQL の REPEATABLE READ 対策)
    def _locked_first_by(self, **criteria) -> E | None:
        row = (
            self.session.query(self.model)
            .filter_by(**criteria)
            .with_for_update()
            .populate_existing()
            .first()
        )
        if row is None:
            return None
        return self._to_domain(row)


class SQLAlchemyUserRepository(SQLAlchemyRepository, UserRepository):
    model = models.User
    entity_type = User

    def get_by_username(self, username: str) -> User | None:
        return self._first_by(username=username)

    def get_by_email(self, email: str) -> User | None:
        return self._first_by(email=email)


class SQLAlchemyCategoryRepository(SQLAlchemyRepository, CategoryRepository):
    model = models.Category
    entity_type = Category


class SQLAlchemyProductRepository(SQLAlchemyRepository, ProductRepository):
    model = models.Product
    entity_type = Product

    def list_by_category(self, category_id: int) -> list[Product]:
        return self._filter_by(category_id=category_id)

    def list_by_flag(self, flag: ProductFlag) -> list[Product]:
        return self._filter_by(**{flag.value: True})

    def search(self, term: str) -> list[Product]:
        needle = term.lower()
        rows = (
            self.session.query(models.Product)
            .filter(
                or_(
                    func.lower(models.Product.name).contains(needle, autoescape=True),
                    func.lower(models.Product.description).contains(needle, autoescape=True),
                )
            )
            .order_by(models.Product.id)
            .all()
        )
        return [self._to_domain(row) for row in rows]


class SQLAlchemyReviewRepository(SQLAlchemyRepository, ReviewRepository):
    model = models.Review
    entity_type = Review

    def list_by_product(self, product_id: int) -> list[Review]:
        return self._filter_by(product_id=product_id)


class SQLAlchemyCartRepository(SQLAlchemyRepository, CartRepository):
    model = models.Cart
    entity_type = Cart

    # 同じユーザーのカートが先に作られていたらそれを返す
    def add(self, data: CartData) -> Cart:
        row = self._try_insert(data)
        if row is not None:
            return self._to_domain(row)
        existing = self._locked_first_by(user_id=data.user_id)
        if existing is None:
            raise DataIntegrityError(f"Could not create cart for user {data.user_id}")
        return existing

    def get_by_user_id(self, user_id: int) -> Cart | None:
        return self._first_by(user_id=user_id)


class SQLAlchemyCartItemRepository(SQLAlchemyRepository, CartItemRepository):
    model = models.CartItem
    entity_type = CartItem

    def list_by_cart(self, cart_id: int) -> list[CartItem]:
        return self._filter_by(cart_id=cart_id)

    # 同じ商品の行が先に作られていたら数量を合算する
    def add(self, data: CartItemData) -> CartItem:
        row = self._try_insert(data)
        if row is not None:
            return self._to_domain(row)
        existing = self._locked_first_by(cart_id=data.cart_id, product_id=data.product_id)
        if existing is None:
            raise DataIntegrityError(
                f"Could not add product {data.product_id} to cart {data.cart_id}"
            )
        return self.update(existing.id, {"quantity": existing.quantity + data.quantity})

    def find_in_cart(self, cart_id: int, product_id: int) -> CartItem | None:
        return self._first_by(cart_id=cart_id, product_id=product_id)

    def delete(self, id: int) -> bool:
        row = self.session.get(models.CartItem, id)
        if row is None:
            return False
        self.session.delete(row)
        self.session.flush()
        return True

    def delete_by_cart(self, cart_id: int) -> int:
        return self.session.query(models.CartItem).filter_by(cart_id=cart_id).delete()


class SQLAlchemyOrderRepository(SQLAlchemyRepository, OrderRepository):
    model = models.Order
    entity_type = Order

    def list_by_user(self, user_id: int) -> list[Order]:
        return self._filter_by(user_id=user_id)


class SQLAlchemyOrderItemRepository(SQLAlchemyRepository, OrderItemRepository):
    model = models.OrderItem
    entity_type = OrderItem

    def list_by_order(self, order_id: int) -> list[OrderItem]:
        return self._filter_by(order_id=order_id)
