from pydantic import BaseModel, ConfigDict, Field, computed_field
from datetime import datetime

from bookshop.domain.catalog import Product

_ENTITY_CONFIG = ConfigDict(
    extra="forbid",
    validate_assignment=True,
)

##################################
# エンティティ
##################################

class CartData(BaseModel):
    user_id: int
    model_config = _ENTITY_CONFIG


class Cart(CartData):
    id: int
    created_at: datetime


class CartItemData(BaseModel):
    cart_id: int
    product_id: int
    quantity: int = Field(default=1, ge=1)
    model_config = _ENTITY_CONFIG


class CartItem(CartItemData):
    id: int

##################################
# 読み取りモデル (カート + 明細 + 商品)
##################################

class CartLine(CartItem):
    product: Product
    # computed_field の出力を含む dict からも復元できるようにする
    model_config = ConfigDict(extra="ignore")

    @computed_field
    @property
    def unit_price(self) -> float:
        return self.product.unit_price

    @computed_field  # シリアライズ時にも "subtotal" として出力される
    @property
    def subtotal(self) -> float:
        return self.product.unit_price * self.quantity


class CartWithItems(Cart):
    items: list[CartLine] = Field(default_factory=list)
    model_config = ConfigDict(extra="ignore")

    @computed_field
    @property
    def total_price(self) -> float:
        total = 0.0
        for item in self.items:
            total += item.subtotal
        return total

    @property
    def is_empty(self) -> bool:
        return not self.items
