"""Catalog use cases: listing, search, details and category counts."""

from bookshop.application.dto import ProductUpdateInput
from bookshop.application.use_cases.catalog import (
    CreateCategoryUseCase,
    CreateProductUseCase,
    DeleteProductUseCase,
    GetCategoryUseCase,
    GetProductUseCase,
    GetProductWithDetailsUseCase,
    ListCategoriesUseCase,
    ListProductsByFlagUseCase,
    ListProductsUseCase,
    SearchProductsUseCase,
    UpdateProductUseCase,
)
from bookshop.domain.catalog import CategoryData, ProductData, ProductFlag, ReviewData


def product_data(category_id, name="Dune", price=100.0, **fields):
    return ProductData(
        name=name,
        price=price,
        category_id=category_id,
        image_url="https://example.com/cover.jpg",
        **fields,
    )


def names(products):
    return [product.name for product in products]


class TestCategories:
    def test_create_and_list(self, uow_factory):
        created = CreateCategoryUseCase(uow_factory()).execute(CategoryData(name="Roman", icon="fas fa-book"))
        assert created.product_count == 0
        assert [c.name for c in ListCategoriesUseCase(uow_factory()).execute()] == ["Roman"]
        assert GetCategoryUseCase(uow_factory()).execute(created.id).name == "Roman"

    def test_get_missing_category(self, uow_factory):
        assert GetCategoryUseCase(uow_factory()).execute(5) is None

    def test_counts_follow_product_creation_and_moves(self, uow_factory, make_category):
        roman = make_category("Roman")
        tarih = make_category("Tarih")
        create = lambda **kw: CreateProductUseCase(uow_factory()).execute(product_data(**kw))
        create(category_id=roman.id, name="A")
        create(category_id=roman.id, name="B")
        moved = create(category_id=roman.id, name="C")

        counts = {c.id: c.product_count for c in ListCategoriesUseCase(uow_factory()).execute()}
        assert counts == {roman.id: 3, tarih.id: 0}

        UpdateProductUseCase(uow_factory()).execute(moved.id, ProductUpdateInput(category_id=tarih.id))
        counts = {c.id: c.product_count for c in ListCategoriesUseCase(uow_factory()).execute()}
        assert counts == {roman.id: 2, tarih.id: 1}

    def test_create_product_in_missing_category(self, uow_factory):
        assert CreateProductUseCase(uow_factory()).execute(product_data(category_id=99)) is None
        assert ListProductsUseCase(uow_factory()).execute() == []


class TestListing:
    def test_filters(self, uow_factory, make_category, make_product):
        roman = make_category("Roman")
        tarih = make_category("Tarih")
        make_product(roman.id, name="1984", description="Orwell distopyasi", is_featured=True)
        make_product(tarih.id, name="Nutuk", is_bestseller=True)
        make_product(roman.id, name="Hayvan Ciftligi", description="Bir Orwell klasigi", is_new=True)

        assert names(ListProductsUseCase(uow_factory()).execute()) == ["1984", "Nutuk", "Hayvan Ciftligi"]
        assert names(ListProductsUseCase(uow_factory()).execute(category_id=roman.id)) == ["1984", "Hayvan Ciftligi"]
        assert names(ListProductsUseCase(uow_factory()).execute(search="ORWELL")) == ["1984", "Hayvan Ciftligi"]
        assert names(ListProductsByFlagUseCase(uow_factory()).execute(ProductFlag.FEATURED)) == ["1984"]
        assert names(ListProductsByFlagUseCase(uow_factory()).execute(ProductFlag.BESTSELLER)) == ["Nutuk"]
        assert names(ListProductsByFlagUseCase(uow_factory()).execute(ProductFlag.NEW)) == ["Hayvan Ciftligi"]

    def test_category_takes_precedence_over_search(self, uow_factory, make_category, make_product):
        roman = make_category("Roman")
        tarih = make_category("Tarih")
        make_product(roman.id, name="Dune")
        make_product(tarih.id, name="Nutuk")
        result = ListProductsUseCase(uow_factory()).execute(category_id=tarih.id, search="dune")
        assert names(result) == ["Nutuk"]

    def test_search_without_match(self, uow_factory, make_category, make_product):
        make_product(make_category().id, name="Dune")
        assert SearchProductsUseCase(uow_factory()).execute("tolkien") == []

    def test_search_treats_wildcards_literally(self, uow_factory, make_category, make_product):
        category = make_category()
        make_product(category.id, name="100% Kahve")
        make_product(category.id, name="1000 Soru")
        assert names(SearchProductsUseCase(uow_factory()).execute("100%")) == ["100% Kahve"]


class TestDetails:
    def test_average_rating_and_count(self, uow_factory, make_category, make_product):
        category = make_category()
        product = make_product(category.id)
        with uow_factory() as uow:
            for rating in (5, 4, 3):
                uow.reviews.add(ReviewData(product_id=product.id, user_id=1, rating=rating))
            uow.commit()

        details = GetProductWithDetailsUseCase(uow_factory()).execute(product.id)
        assert details.avg_rating == 4.0
        assert details.review_count == 3
        assert details.category.id == category.id

    def test_without_reviews(self, uow_factory, make_category, make_product):
        product = make_product(make_category().id)
        details = GetProductWithDetailsUseCase(uow_factory()).execute(product.id)
        assert details.avg_rating == 0
        assert details.review_count == 0

    def test_missing_product(self, uow_factory):
        assert GetProductWithDetailsUseCase(uow_factory()).execute(1) is None

    def test_product_with_missing_category_is_not_found(self, uow_factory, make_product):
        orphan = make_product(category_id=77)
        assert GetProductUseCase(uow_factory()).execute(orphan.id) is not None
        assert GetProductWithDetailsUseCase(uow_factory()).execute(orphan.id) is None


class TestAdministration:
    def test_partial_update(self, uow_factory, make_category, make_product):
        product = make_product(make_category().id, price=89.0, discount_price=75.0)
        updated = UpdateProductUseCase(uow_factory()).execute(product.id, ProductUpdateInput(price=99.0))
        assert updated.price == 99.0
        assert updated.discount_price == 75.0

    def test_update_missing_product(self, uow_factory):
        assert UpdateProductUseCase(uow_factory()).execute(3, ProductUpdateInput(price=1.0)) is None

    def test_update_into_missing_category(self, uow_factory, make_category, make_product):
        category = make_category()
        product = make_product(category.id)
        assert UpdateProductUseCase(uow_factory()).execute(product.id, ProductUpdateInput(category_id=50)) is None
        assert GetProductUseCase(uow_factory()).execute(product.id).category_id == category.id

    def test_delete_is_soft(self, uow_factory, make_category, make_product):
        category = make_category()
        product = make_product(category.id)
        deleted = DeleteProductUseCase(uow_factory()).execute(product.id)
        assert deleted.in_stock is False
        assert names(ListProductsUseCase(uow_factory()).execute()) == ["Dune"]

    def test_delete_missing_product(self, uow_factory):
        assert DeleteProductUseCase(uow_factory()).execute(8) is None
