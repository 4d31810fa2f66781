from pydantic import BaseModel, ConfigDict, Field, computed_field
from datetime import datetime
import enum

from bookshop.domain.catalog import Product
from bookshop.domain.errors import InvalidStatusTransitionError

_ENTITY_CONFIG = ConfigDict(
    extra="forbid",
    validate_assignment=True,
)


class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# 許可されるステータス遷移 (completed / cancelled は終端)
_TRANSITIONS: dict[OrderStatus, set[OrderStatus]] = {
    OrderStatus.PENDING: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.COMPLETED, OrderStatus.CANCELLED},
    OrderStatus.COMPLETED: set(),
    OrderStatus.CANCELLED: set(),
}

##################################
# エンティティ
##################################

class OrderData(BaseModel):
    user_id: int
    total: float = Field(ge=0)
    status: OrderStatus = OrderStatus.PENDING
    address: str
    phone: str
    model_config = _ENTITY_CONFIG


class Order(OrderData):
    id: int
    created_at: datetime

    def can_transition_to(self, new_status: OrderStatus) -> bool:
        return new_status in _TRANSITIONS[self.status]

    def change_status(self, new_status: OrderStatus):
        if not self.can_transition_to(new_status):
            raise InvalidStatusTransitionError(
                f"cannot change order status from {self.status.value} to {new_status.value}"
            )
        self.status = new_status


class OrderItemData(BaseModel):
    order_id: int
    product_id: int
    quantity: int = Field(ge=1)
    # 注文時点の単価のスナップショット。後から商品価格が変わっても再計算しない
    price: float = Field(ge=0)
    model_config = _ENTITY_CONFIG


class OrderItem(OrderItemData):
    id: int

##################################
# 読み取りモデル
##################################

class OrderLine(OrderItem):
    # 表示用。価格は必ずスナップショット (price) を使う
    product: Product | None = None
    model_config = ConfigDict(extra="ignore")

    @computed_field
    @property
    def subtotal(self) -> float:
        return self.price * self.quantity


class OrderWithItems(Order):
    items: list[OrderLine] = Field(default_factory=list)
    model_config = ConfigDict(extra="ignore")
