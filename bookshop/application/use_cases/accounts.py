import logging

from bookshop.application.ports import UnitOfWork, PasswordHasher
from bookshop.application.dto import RegisterUserInput, ProfileUpdateInput, UserOutput
from bookshop.domain.errors import DuplicateEmailError, DuplicateUsernameError
from bookshop.domain.user import UserData

logger = logging.getLogger(__name__)


class RegisterUserUseCase:
    def __init__(self, uow: UnitOfWork, hasher: PasswordHasher):
        self.uow = uow
        self.hasher = hasher

    def execute(self, input: RegisterUserInput) -> UserOutput:
        with self.uow:
            if self.uow.users.get_by_username(input.username):
                raise DuplicateUsernameError(f"Username {input.username} is already in use.")
            if self.uow.users.get_by_email(input.email):
                raise DuplicateEmailError(f"Email {input.email} is already in use.")
            user = self.uow.users.add(
                UserData(
                    username=input.username,
                    email=input.email,
                    password=self.hasher.hash(input.password),
                    full_name=input.full_name,
                    avatar=input.avatar,
                    address=input.address,
                    phone=input.phone,
                )
            )
            self.uow.commit()
            logger.info(f"Registered user {user.id} ({user.username})")
            return UserOutput.from_user(user)


class AuthenticateUserUseCase:
    def __init__(self, uow: UnitOfWork, hasher: PasswordHasher):
        self.uow = uow
        self.hasher = hasher

    def execute(self, username: str, password: str) -> UserOutput | None:
        with self.uow:
            user = self.uow.users.get_by_username(username)
            if user is None or not self.hasher.verify(password, user.password):
                return None
            return UserOutput.from_user(user)


class GetUserUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    def execute(self, user_id: int) -> UserOutput | None:
        with self.uow:
            user = self.uow.users.get(user_id)
            if user is None:
                return None
            return UserOutput.from_user(user)


class UpdateProfileUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    def execute(self, user_id: int, input: ProfileUpdateInput) -> UserOutput | None:
        with self.uow:
            # 送られてこなかった項目は元の値を保持する
            user = self.uow.users.update(user_id, input.model_dump(exclude_unset=True))
            if user is None:
                return None
            self.uow.commit()
            return UserOutput.from_user(user)
