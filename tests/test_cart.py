"""Cart use cases: quantity merging, totals and integrity checks."""

import pytest

from bookshop.application.use_cases.cart import (
    AddCartItemUseCase,
    ClearCartUseCase,
    GetCartWithItemsUseCase,
    GetOrCreateCartUseCase,
    RemoveCartItemUseCase,
    UpdateCartItemQuantityUseCase,
)
from bookshop.application.use_cases.catalog import DeleteProductUseCase
from bookshop.domain.cart import CartItemData
from bookshop.domain.errors import DataIntegrityError, InvalidQuantityError, ProductUnavailableError


@pytest.fixture
def shelf(make_category, make_product):
    """Two products: one discounted (89 -> 75) and one at list price 129."""
    category = make_category()
    discounted = make_product(category.id, name="Suc ve Ceza", price=89.0, discount_price=75.0)
    regular = make_product(category.id, name="Dune", price=129.0)
    return discounted, regular


@pytest.fixture
def cart(uow_factory):
    return GetOrCreateCartUseCase(uow_factory()).execute(user_id=1)


def view(uow_factory, cart):
    return GetCartWithItemsUseCase(uow_factory()).execute(cart.id)


class TestGetOrCreate:
    def test_same_cart_is_returned(self, uow_factory):
        first = GetOrCreateCartUseCase(uow_factory()).execute(user_id=3)
        second = GetOrCreateCartUseCase(uow_factory()).execute(user_id=3)
        assert first.id == second.id

    def test_each_user_has_own_cart(self, uow_factory):
        first = GetOrCreateCartUseCase(uow_factory()).execute(user_id=3)
        second = GetOrCreateCartUseCase(uow_factory()).execute(user_id=4)
        assert first.id != second.id

    def test_missing_cart(self, uow_factory):
        assert GetCartWithItemsUseCase(uow_factory()).execute(12) is None


class TestAddItem:
    def test_adding_same_product_merges_quantity(self, uow_factory, shelf, cart):
        discounted, _ = shelf
        AddCartItemUseCase(uow_factory()).execute(cart.id, discounted.id, 2)
        item = AddCartItemUseCase(uow_factory()).execute(cart.id, discounted.id, 3)
        assert item.quantity == 5

        current = view(uow_factory, cart)
        assert len(current.items) == 1
        assert current.total_price == 375.0

    def test_default_quantity_is_one(self, uow_factory, shelf, cart):
        _, regular = shelf
        item = AddCartItemUseCase(uow_factory()).execute(cart.id, regular.id)
        assert item.quantity == 1

    def test_missing_product_or_cart(self, uow_factory, shelf, cart):
        discounted, _ = shelf
        assert AddCartItemUseCase(uow_factory()).execute(cart.id, 404) is None
        assert AddCartItemUseCase(uow_factory()).execute(404, discounted.id) is None
        assert view(uow_factory, cart).is_empty

    @pytest.mark.parametrize("quantity", [0, -1, 1.5, True])
    def test_invalid_quantity(self, uow_factory, shelf, cart, quantity):
        discounted, _ = shelf
        with pytest.raises(InvalidQuantityError):
            AddCartItemUseCase(uow_factory()).execute(cart.id, discounted.id, quantity)
        assert view(uow_factory, cart).is_empty

    def test_out_of_stock_product(self, uow_factory, shelf, cart):
        _, regular = shelf
        DeleteProductUseCase(uow_factory()).execute(regular.id)
        with pytest.raises(ProductUnavailableError):
            AddCartItemUseCase(uow_factory()).execute(cart.id, regular.id)


class TestTotals:
    def test_total_follows_add_update_remove(self, uow_factory, shelf, cart):
        discounted, regular = shelf
        first = AddCartItemUseCase(uow_factory()).execute(cart.id, discounted.id, 2)
        AddCartItemUseCase(uow_factory()).execute(cart.id, regular.id, 1)
        assert view(uow_factory, cart).total_price == 279.0

        UpdateCartItemQuantityUseCase(uow_factory()).execute(first.id, 1)
        assert view(uow_factory, cart).total_price == 204.0

        assert RemoveCartItemUseCase(uow_factory()).execute(first.id) is True
        current = view(uow_factory, cart)
        assert current.total_price == 129.0
        assert [line.product.name for line in current.items] == ["Dune"]

    def test_total_uses_current_product_price(self, uow_factory, shelf, cart):
        _, regular = shelf
        AddCartItemUseCase(uow_factory()).execute(cart.id, regular.id, 2)
        with uow_factory() as uow:
            uow.products.update(regular.id, {"discount_price": 100.0})
            uow.commit()
        assert view(uow_factory, cart).total_price == 200.0


class TestUpdateAndRemove:
    def test_update_missing_item_changes_nothing(self, uow_factory, shelf, cart):
        discounted, _ = shelf
        AddCartItemUseCase(uow_factory()).execute(cart.id, discounted.id, 2)
        assert UpdateCartItemQuantityUseCase(uow_factory()).execute(999, 4) is None
        assert view(uow_factory, cart).items[0].quantity == 2

    def test_update_item_in_other_cart(self, uow_factory, shelf, cart):
        discounted, _ = shelf
        item = AddCartItemUseCase(uow_factory()).execute(cart.id, discounted.id, 2)
        other = GetOrCreateCartUseCase(uow_factory()).execute(user_id=2)
        assert UpdateCartItemQuantityUseCase(uow_factory()).execute(item.id, 5, cart_id=other.id) is None
        assert RemoveCartItemUseCase(uow_factory()).execute(item.id, cart_id=other.id) is False
        assert view(uow_factory, cart).items[0].quantity == 2

    def test_update_rejects_zero(self, uow_factory, shelf, cart):
        discounted, _ = shelf
        item = AddCartItemUseCase(uow_factory()).execute(cart.id, discounted.id)
        with pytest.raises(InvalidQuantityError):
            UpdateCartItemQuantityUseCase(uow_factory()).execute(item.id, 0)

    def test_remove_twice(self, uow_factory, shelf, cart):
        discounted, _ = shelf
        item = AddCartItemUseCase(uow_factory()).execute(cart.id, discounted.id)
        assert RemoveCartItemUseCase(uow_factory()).execute(item.id) is True
        assert RemoveCartItemUseCase(uow_factory()).execute(item.id) is False


class TestClear:
    def test_clear_empties_cart(self, uow_factory, shelf, cart):
        discounted, regular = shelf
        AddCartItemUseCase(uow_factory()).execute(cart.id, discounted.id)
        AddCartItemUseCase(uow_factory()).execute(cart.id, regular.id)
        assert ClearCartUseCase(uow_factory()).execute(cart.id) is True
        current = view(uow_factory, cart)
        assert current.items == []
        assert current.total_price == 0

    def test_clear_empty_cart(self, uow_factory, cart):
        assert ClearCartUseCase(uow_factory()).execute(cart.id) is True


class TestIntegrity:
    def test_line_for_missing_product(self, uow_factory, cart):
        with uow_factory() as uow:
            uow.cart_items.add(CartItemData(cart_id=cart.id, product_id=555, quantity=1))
            uow.commit()
        with pytest.raises(DataIntegrityError):
            view(uow_factory, cart)
