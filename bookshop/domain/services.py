from collections import Counter
from typing import Iterable

from bookshop.domain.catalog import Category, Product, Review

####################################
# ドメインサービス (派生値の計算)
####################################

# 全商品を走査してカテゴリごとの商品数を数え直す。
# 商品を持たないカテゴリも 0 として返す
def count_products_by_category(
    categories: Iterable[Category],
    products: Iterable[Product],
) -> dict[int, int]:
    counts = Counter(product.category_id for product in products)
    return {category.id: counts.get(category.id, 0) for category in categories}


def average_rating(reviews: Iterable[Review]) -> float:
    ratings = [review.rating for review in reviews]
    if not ratings:
        return 0.0
    return sum(ratings) / len(ratings)
