from pydantic import BaseModel, ConfigDict
from datetime import datetime

from bookshop.domain.user import User

# DTO (Data Transfer Object - データ転送オブジェクト)

class RegisterUserInput(BaseModel):
    username: str
    email: str
    password: str
    full_name: str | None = None
    avatar: str | None = None
    address: str | None = None
    phone: str | None = None


# 指定されたフィールドだけを更新する (model_fields_set で判定)
class ProfileUpdateInput(BaseModel):
    full_name: str | None = None
    phone: str | None = None
    address: str | None = None
    avatar: str | None = None
    model_config = ConfigDict(extra="forbid")


class ProductUpdateInput(BaseModel):
    name: str | None = None
    description: str | None = None
    price: float | None = None
    discount_price: float | None = None
    category_id: int | None = None
    image_url: str | None = None
    in_stock: bool | None = None
    is_featured: bool | None = None
    is_bestseller: bool | None = None
    is_new: bool | None = None
    discount_percentage: int | None = None
    model_config = ConfigDict(extra="forbid")


class UserOutput(BaseModel):
    id: int
    username: str
    email: str
    full_name: str | None = None
    avatar: str | None = None
    address: str | None = None
    phone: str | None = None
    created_at: datetime

    # パスワードは出力に含めない
    @classmethod
    def from_user(cls, user: User) -> "UserOutput":
        return cls(
            id=user.id,
            username=user.username,
            email=user.email,
            full_name=user.full_name,
            avatar=user.avatar,
            address=user.address,
            phone=user.phone,
            created_at=user.created_at,
        )
