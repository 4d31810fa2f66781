from pydantic import BaseModel, ConfigDict, field_validator
from datetime import datetime

#
# エンティティ
#
class UserData(BaseModel):
    username: str
    email: str
    password: str  # PasswordHasher が返した値をそのまま保存する
    full_name: str | None = None
    avatar: str | None = None
    address: str | None = None
    phone: str | None = None
    model_config = ConfigDict(
        extra="forbid",
        validate_assignment=True,
    )

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        if "@" not in v:
            raise ValueError("Invalid email address")
        return v


class User(UserData):
    id: int
    created_at: datetime
