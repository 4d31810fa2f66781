"""Shared fixtures: every storage-backed test runs against both adapters."""

import pytest

from bookshop.adapters.db.memory.store import InMemoryStore
from bookshop.adapters.db.memory.uow import InMemoryUnitOfWork
from bookshop.adapters.db.sqlalchemy.session import build_session_factory
from bookshop.adapters.db.sqlalchemy.uow import SQLAlchemyUnitOfWork
from bookshop.adapters.security.hasher import SimplePasswordHasher
from bookshop.domain.catalog import CategoryData, ProductData
from bookshop.domain.user import UserData


@pytest.fixture(params=["memory", "sqlalchemy"])
def uow_factory(request):
    """A fresh, empty store for each test, once per storage backend."""
    if request.param == "memory":
        store = InMemoryStore()
        return lambda: InMemoryUnitOfWork(store)
    session_factory = build_session_factory("sqlite://")
    return lambda: SQLAlchemyUnitOfWork(session_factory)


@pytest.fixture
def uow(uow_factory):
    return uow_factory()


@pytest.fixture
def hasher():
    return SimplePasswordHasher()


@pytest.fixture
def make_category(uow_factory):
    def _make(name="Roman", icon="fas fa-book"):
        with uow_factory() as uow:
            category = uow.categories.add(CategoryData(name=name, icon=icon))
            uow.commit()
            return category
    return _make


@pytest.fixture
def make_product(uow_factory):
    """Insert a product straight through the repository (no count refresh)."""
    def _make(category_id, name="Dune", price=100.0, **fields):
        data = ProductData(
            name=name,
            price=price,
            category_id=category_id,
            image_url=f"https://example.com/{name}.jpg",
            **fields,
        )
        with uow_factory() as uow:
            product = uow.products.add(data)
            uow.commit()
            return product
    return _make


@pytest.fixture
def make_user(uow_factory, hasher):
    def _make(username="ayse", email=None, password="password123"):
        with uow_factory() as uow:
            user = uow.users.add(
                UserData(
                    username=username,
                    email=email or f"{username}@example.com",
                    password=hasher.hash(password),
                )
            )
            uow.commit()
            return user
    return _make
