"""Repository contract shared by the in-memory and SQLAlchemy adapters."""

import pytest
from pydantic import ValidationError

from bookshop.adapters.db.memory.store import InMemoryStore
from bookshop.adapters.db.memory.uow import InMemoryUnitOfWork
from bookshop.domain.cart import CartData, CartItemData
from bookshop.domain.catalog import CategoryData


class TestInsertAndGet:
    def test_ids_start_at_one_and_increase(self, uow):
        with uow:
            first = uow.categories.add(CategoryData(name="Roman", icon="a"))
            second = uow.categories.add(CategoryData(name="Tarih", icon="b"))
            uow.commit()
        assert (first.id, second.id) == (1, 2)

    def test_ids_are_counted_per_table(self, uow):
        with uow:
            uow.categories.add(CategoryData(name="Roman", icon="a"))
            cart = uow.carts.add(CartData(user_id=1))
            uow.commit()
        assert cart.id == 1

    def test_created_at_is_stamped(self, uow):
        with uow:
            cart = uow.carts.add(CartData(user_id=7))
            uow.commit()
        assert cart.created_at is not None

    def test_get_missing_returns_none(self, uow):
        with uow:
            assert uow.products.get(999) is None

    def test_committed_rows_are_visible_to_later_units(self, uow_factory, make_category):
        category = make_category("Bilim Kurgu")
        with uow_factory() as uow:
            assert uow.categories.get(category.id).name == "Bilim Kurgu"

    def test_returned_entities_are_copies(self, uow_factory, make_category):
        category = make_category()
        category.name = "changed"
        with uow_factory() as uow:
            assert uow.categories.get(category.id).name == "Roman"


class TestUpdate:
    def test_update_merges_only_given_fields(self, uow_factory, make_category, make_product):
        category = make_category()
        product = make_product(category.id, price=89.0, discount_price=75.0, description="klasik")
        with uow_factory() as uow:
            updated = uow.products.update(product.id, {"price": 95.0})
            uow.commit()
        assert updated.price == 95.0
        assert updated.discount_price == 75.0
        assert updated.description == "klasik"

    def test_update_missing_returns_none(self, uow):
        with uow:
            assert uow.products.update(42, {"price": 1.0}) is None

    def test_update_unknown_field_is_rejected(self, uow_factory, make_category):
        category = make_category()
        with pytest.raises(ValueError):
            with uow_factory() as uow:
                uow.categories.update(category.id, {"colour": "red"})

    def test_update_id_is_rejected(self, uow_factory, make_category):
        category = make_category()
        with pytest.raises(ValueError):
            with uow_factory() as uow:
                uow.categories.update(category.id, {"id": 99})

    def test_update_is_validated(self, uow_factory, make_category, make_product):
        product = make_product(make_category().id)
        with pytest.raises(ValidationError):
            with uow_factory() as uow:
                uow.products.update(product.id, {"price": -5})
        with uow_factory() as uow:
            assert uow.products.get(product.id).price == product.price


class TestDelete:
    def test_delete_cart_item(self, uow):
        with uow:
            item = uow.cart_items.add(CartItemData(cart_id=1, product_id=1, quantity=2))
            assert uow.cart_items.delete(item.id) is True
            assert uow.cart_items.delete(item.id) is False
            assert uow.cart_items.get(item.id) is None

    def test_delete_by_cart_only_touches_that_cart(self, uow):
        with uow:
            uow.cart_items.add(CartItemData(cart_id=1, product_id=1))
            uow.cart_items.add(CartItemData(cart_id=1, product_id=2))
            other = uow.cart_items.add(CartItemData(cart_id=2, product_id=1))
            assert uow.cart_items.delete_by_cart(1) == 2
            assert uow.cart_items.list_by_cart(1) == []
            assert uow.cart_items.get(other.id) is not None


class TestUnitOfWork:
    def test_uncommitted_changes_are_discarded(self, uow_factory):
        with uow_factory() as uow:
            uow.categories.add(CategoryData(name="Roman", icon="a"))
        with uow_factory() as uow:
            assert uow.categories.list_all() == []

    def test_exception_rolls_back(self, uow_factory):
        with pytest.raises(RuntimeError):
            with uow_factory() as uow:
                uow.categories.add(CategoryData(name="Roman", icon="a"))
                raise RuntimeError("boom")
        with uow_factory() as uow:
            assert uow.categories.list_all() == []

    def test_explicit_rollback(self, uow_factory, make_category):
        category = make_category()
        with uow_factory() as uow:
            uow.categories.update(category.id, {"name": "Tarih"})
            uow.rollback()
            assert uow.categories.get(category.id).name == "Roman"

    def test_repositories_require_entered_unit(self, uow):
        with pytest.raises(AssertionError):
            uow.products


class TestInMemoryIds:
    def test_ids_are_not_reused_after_rollback(self):
        store = InMemoryStore()
        with InMemoryUnitOfWork(store) as uow:
            uow.categories.add(CategoryData(name="Roman", icon="a"))
        with InMemoryUnitOfWork(store) as uow:
            category = uow.categories.add(CategoryData(name="Tarih", icon="b"))
            uow.commit()
        assert category.id == 2

    def test_ids_are_not_reused_after_delete(self):
        store = InMemoryStore()
        with InMemoryUnitOfWork(store) as uow:
            first = uow.cart_items.add(CartItemData(cart_id=1, product_id=1))
            uow.cart_items.delete(first.id)
            second = uow.cart_items.add(CartItemData(cart_id=1, product_id=1))
            uow.commit()
        assert second.id == first.id + 1


class TestInMemoryCopyOnWrite:
    @pytest.fixture
    def store(self):
        store = InMemoryStore()
        with InMemoryUnitOfWork(store) as uow:
            uow.categories.add(CategoryData(name="Roman", icon="a"))
            uow.commit()
        return store

    def test_read_only_unit_copies_no_table(self, store):
        tables = dict(store.tables)
        with InMemoryUnitOfWork(store) as uow:
            uow.categories.list_all()
            uow.products.get(1)
        assert all(store.tables[name] is rows for name, rows in tables.items())

    def test_rollback_restores_only_written_tables(self, store):
        tables = dict(store.tables)
        with InMemoryUnitOfWork(store) as uow:
            uow.categories.update(1, {"name": "Tarih"})
            uow.carts.get(1)
        assert store.tables["carts"] is tables["carts"]
        assert store.tables["categories"][1].name == "Roman"

    def test_commit_keeps_writes_made_before_it(self, store):
        with InMemoryUnitOfWork(store) as uow:
            uow.categories.update(1, {"name": "Tarih"})
            uow.commit()
            uow.categories.add(CategoryData(name="Akademik", icon="b"))
        assert [category.name for category in store.tables["categories"].values()] == ["Tarih"]
