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
from bookshop.adapters.db.memory.store import InMemoryStore
from bookshop.adapters.db.memory.repositories import (
    InMemoryCartItemRepository,
    InMemoryCartRepository,
    InMemoryCategoryRepository,
    InMemoryOrderItemRepository,
    InMemoryOrderRepository,
    InMemoryProductRepository,
    InMemoryReviewRepository,
    InMemoryUserRepository,
)


# with ブロックの間はストアをロックする。
# 書き込まれたテーブルだけ変更前のコピーを保持し、commit されずにブロックを抜けたら戻す
class InMemoryUnitOfWork(UnitOfWork):
    def __init__(self, store: InMemoryStore):
        self.store = store
        self._saved: dict[str, dict] = {}
        self._entered = False

    def __enter__(self) -> "InMemoryUnitOfWork":
        self.store.lock.acquire()
        self._entered = True
        self._saved = {}
        self._users = InMemoryUserRepository(self.store, self._saved)
        self._categories = InMemoryCategoryRepository(self.store, self._saved)
        self._products = InMemoryProductRepository(self.store, self._saved)
        self._reviews = InMemoryReviewRepository(self.store, self._saved)
        self._carts = InMemoryCartRepository(self.store, self._saved)
        self._cart_items = InMemoryCartItemRepository(self.store, self._saved)
        self._orders = InMemoryOrderRepository(self.store, self._saved)
        self._order_items = InMemoryOrderItemRepository(self.store, self._saved)
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        try:
            self.rollback()
        finally:
            self._entered = False
            self.store.lock.release()

    def _check_entered(self) -> None:
        assert self._entered, "UnitOfWork is not entered."

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
        self._saved.clear()

    def rollback(self) -> None:
        self._check_entered()
        for name, rows in self._saved.items():
            self.store.tables[name] = rows
        self._saved.clear()
