from pydantic import BaseModel, ConfigDict, Field

from bookshop.domain.order import OrderStatus

class RegisterRequest(BaseModel):
    username: str = Field(min_length=1)
    email: str
    password: str = Field(min_length=1)
    full_name: str | None = None
    avatar: str | None = None
    address: str | None = None
    phone: str | None = None

class LoginRequest(BaseModel):
    username: str
    password: str

class ReviewRequest(BaseModel):
    rating: int = Field(ge=1, le=5)
    comment: str | None = None

class AddCartItemRequest(BaseModel):
    product_id: int
    quantity: int = Field(default=1, ge=1)
    model_config = ConfigDict(extra="forbid")

class UpdateCartItemRequest(BaseModel):
    quantity: int = Field(ge=1)

class PlaceOrderRequest(BaseModel):
    address: str = Field(min_length=5)
    phone: str = Field(min_length=10)

class OrderStatusRequest(BaseModel):
    status: OrderStatus

class MessageResponse(BaseModel):
    success: bool
    message: str
