from sqlalchemy.orm import sessionmaker, Session

from bookshop.application.ports import (
    CartItemRepository,
    CartRepository,
    CategoryRepository,
    OrderItemRepository,
    OrderRepository,
    ProductRepository,
    ReviewRepository,
    UnitOfWork,
    UserRepository,
)
from bookshop.adapters.db.sqlalchemy.repositories import (
    SQLAlchemyCartItemRepository,
    SQLAlchemyCartRepository,
    SQLAlchemyCategoryRepository,
    SQLAlchemyOrderItemRepository,
    SQLAlchemyOrderRepository,
    SQLAlchemyProductRepository,
    SQLAlchemyReviewRepository,
    SQLAlchemyUserRepository,
)

# データベースの変更を伴う単一のビジネスロジック全体をラップするデザインパターン
class SQLAlchemyUnitOfWork(UnitOfWork):
    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory
        self.session: Session | None = None

    def __enter__(self) -> "SQLAlchemyUnitOfWork":
        self.session = self._session_factory()
        assert self.session is not None, "UnitOfWork is not entered."
        self.session.begin()
        self._users = SQLAlchemyUserRepository(self.session)
        self._categories = SQLAlchemyCategoryRepository(self.session)
        self._products = SQLAlchemyProductRepository(self.session)
        self._reviews = SQLAlchemyReviewRepository(self.session)
        self._carts = SQLAlchemyCartRepository(self.session)
        self._cart_items = SQLAlchemyCartItemRepository(self.session)
        self._orders = SQLAlchemyOrderRepository(self.session)
        self._order_items = SQLAlchemyOrderItemRepository(self.session)
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        try:
            if exc_type:
                self.rollback()
        finally:
            # commit されていない変更は close 時に破棄される
            if self.session:
                self.session.close()
            self.session = None

    def _check_entered(self) -> None:
        assert self.session is not None, "UnitOfWork is not entered."

    @property
    def users(self) -> UserRepository:
        self._check_entered()
        return self._users

    @property
    def categories(self) -> CategoryRepository:
        self._check_entered()
        return self._categories

    @property
    def products(self) -> ProductRepository:
        self._check_entered()
        return self._products

    @property
    def reviews(self) -> ReviewRepository:
        self._check_entered()
        return self._reviews

    @property
    def carts(self) -> CartRepository:
        self._check_entered()
        return self._carts

    @property
    def cart_items(self) -> CartItemRepository:
        self._check_entered()
        return self._cart_items

    @property
    def orders(self) -> OrderRepository:
        self._check_entered()
        return self._orders

    @property
    def order_items(self) -> OrderItemRepository:
        self._check_entered()
        return self._order_items

    def commit(self) -> None:
        self._check_entered()
        self.session.commit()

    def rollback(self) -> None:
        self._check_entered()
        self.session.rollback()
