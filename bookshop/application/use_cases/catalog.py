import logging

from bookshop.application.ports import UnitOfWork
from bookshop.application.dto import ProductUpdateInput
from bookshop.domain.catalog import (
    Category,
    CategoryData,
    Product,
    ProductData,
    ProductFlag,
    ProductWithDetails,
)
from bookshop.domain.services import average_rating, count_products_by_category

logger = logging.getLogger(__name__)


# 全商品を走査してカテゴリの商品数を更新する (unit of work の中で呼ぶこと)
def refresh_category_product_counts(uow: UnitOfWork) -> None:
    categories = uow.categories.list_all()
    counts = count_products_by_category(categories, uow.products.list_all())
    for category in categories:
        if category.product_count != counts[category.id]:
            uow.categories.update(category.id, {"product_count": counts[category.id]})

###################################
# カテゴリ
###################################

class ListCategoriesUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    def execute(self) -> list[Category]:
        with self.uow:
            return self.uow.categories.list_all()


class GetCategoryUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    def execute(self, category_id: int) -> Category | None:
        with self.uow:
            return self.uow.categories.get(category_id)


class CreateCategoryUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    def execute(self, data: CategoryData) -> Category:
        with self.uow:
            category = self.uow.categories.add(data)
            self.uow.commit()
            logger.info(f"Created category {category.id} ({category.name})")
            return category

###################################
# 商品の参照
###################################

class ListProductsUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    # category_id と search が両方指定された場合は category_id を優先する
    def execute(self, category_id: int | None = None, search: str | None = None) -> list[Product]:
        with self.uow:
            if category_id is not None:
                return self.uow.products.list_by_category(category_id)
            if search:
                return self.uow.products.search(search)
            return self.uow.products.list_all()


class ListProductsByFlagUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    def execute(self, flag: ProductFlag) -> list[Product]:
        with self.uow:
            return self.uow.products.list_by_flag(flag)


class SearchProductsUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    def execute(self, term: str) -> list[Product]:
        with self.uow:
            return self.uow.products.search(term)


class GetProductUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    def execute(self, product_id: int) -> Product | None:
        with self.uow:
            return self.uow.products.get(product_id)


class GetProductWithDetailsUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    def execute(self, product_id: int) -> ProductWithDetails | None:
        with self.uow:
            product = self.uow.products.get(product_id)
            if product is None:
                return None
            category = self.uow.categories.get(product.category_id)
            if category is None:
                # 参照先のカテゴリがない商品は見つからなかったものとして扱う
                logger.warning(f"Product {product.id} references missing category {product.category_id}")
                return None
            reviews = self.uow.reviews.list_by_product(product.id)
            return ProductWithDetails(
                **product.model_dump(),
                category=category,
                avg_rating=average_rating(reviews),
                review_count=len(reviews),
            )

###################################
# 商品の管理
###################################

class CreateProductUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    def execute(self, data: ProductData) -> Product | None:
        with self.uow:
            if self.uow.categories.get(data.category_id) is None:
                return None
            product = self.uow.products.add(data)
            refresh_category_product_counts(self.uow)
            self.uow.commit()
            logger.info(f"Created product {product.id} ({product.name}) in category {product.category_id}")
            return product


class UpdateProductUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    def execute(self, product_id: int, input: ProductUpdateInput) -> Product | None:
        changes = input.model_dump(exclude_unset=True)
        with self.uow:
            current = self.uow.products.get(product_id)
            if current is None:
                return None
            new_category_id = changes.get("category_id")
            category_changed = new_category_id is not None and new_category_id != current.category_id
            if category_changed and self.uow.categories.get(new_category_id) is None:
                return None
            product = self.uow.products.update(product_id, changes)
            if category_changed:
                refresh_category_product_counts(self.uow)
            self.uow.commit()
            return product


class DeleteProductUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    # 論理削除: 注文履歴から参照できるようにレコードは残す
    def execute(self, product_id: int) -> Product | None:
        with self.uow:
            product = self.uow.products.get(product_id)
            if product is None:
                return None
            product.discontinue()
            product = self.uow.products.update(product_id, {"in_stock": product.in_stock})
            self.uow.commit()
            logger.info(f"Product {product_id} marked as out of stock")
            return product
