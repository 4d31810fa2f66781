from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
import enum

_ENTITY_CONFIG = ConfigDict(
    extra="forbid",           # 未定義の属性があるとエラーにする
    validate_assignment=True, # 属性の再代入時にもバリデーションを行う
)

##################################
# カテゴリ
##################################

class CategoryData(BaseModel):
    name: str
    icon: str
    model_config = _ENTITY_CONFIG


class Category(CategoryData):
    id: int
    # 派生値: このカテゴリに属する商品数 (商品の作成・カテゴリ変更時に再計算)
    product_count: int = Field(default=0, ge=0)

##################################
# 商品
##################################

class ProductFlag(str, enum.Enum):
    FEATURED = "is_featured"
    BESTSELLER = "is_bestseller"
    NEW = "is_new"


class ProductData(BaseModel):
    name: str
    description: str | None = None
    price: float = Field(ge=0)
    discount_price: float | None = Field(default=None, ge=0)
    category_id: int
    image_url: str
    in_stock: bool = True
    is_featured: bool = False
    is_bestseller: bool = False
    is_new: bool = False
    # 表示用のメタデータ。price / discount_price からは導出しない
    discount_percentage: int | None = Field(default=None, ge=0, le=100)
    model_config = _ENTITY_CONFIG


class Product(ProductData):
    id: int
    created_at: datetime

    @property
    def unit_price(self) -> float:
        if self.discount_price is not None:
            return self.discount_price
        return self.price

    def has_flag(self, flag: ProductFlag) -> bool:
        return bool(getattr(self, flag.value))

    def matches(self, term: str) -> bool:
        needle = term.lower()
        if needle in self.name.lower():
            return True
        return self.description is not None and needle in self.description.lower()

    # 論理削除: レコードは残し、在庫なしとして扱う
    def discontinue(self):
        self.in_stock = False


class ProductWithDetails(Product):
    category: Category
    avg_rating: float
    review_count: int

##################################
# レビュー
##################################

class ReviewData(BaseModel):
    product_id: int
    user_id: int
    rating: int = Field(ge=1, le=5)
    comment: str | None = None
    model_config = _ENTITY_CONFIG


class Review(ReviewData):
    id: int
    created_at: datetime


class ReviewAuthor(BaseModel):
    id: int
    username: str
    full_name: str | None = None
    avatar: str | None = None


class ReviewWithUser(Review):
    user: ReviewAuthor | None = None
