import structlog
from passlib.context import CryptContext
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.settings import Settings
from shared.exceptions import ConflictError, InvalidCredentialsError
from shared.observability.metrics import warehouse_login_total
from shared.security.jwt_handler import create_access_token

from .models import User
from .repository import UserRepository
from .schemas import LoginRequest, RegisterRequest

log = structlog.get_logger(__name__)

_pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class AuthService:

    def __init__(self, settings: Settings):
        self.settings = settings

    @staticmethod
    def _hash_password(password: str) -> str:
        return _pwd_context.hash(password)

    @staticmethod
    def _verify_password(plain: str, hashed: str) -> bool:
        return _pwd_context.verify(plain, hashed)

    async def register(self, db: AsyncSession, data: RegisterRequest) -> User:
        existing = await UserRepository.get_by_username(db, data.username)
        if existing:
            raise ConflictError("Username exists")

        user = User(
            username=data.username,
            password=self._hash_password(data.password),
            role=data.role.value,
        )
        try:
            user = await UserRepository.create(db, user)
        except IntegrityError:
            # Lost a race with a concurrent registration; the unique index caught it.
            await db.rollback()
            raise ConflictError("Username exists")

        log.info("user_registered", user_id=user.id, username=user.username, role=user.role)
        return user

    async def login(self, db: AsyncSession, data: LoginRequest) -> str:
        """Verify credentials and return a signed access token."""
        user = await UserRepository.get_by_username(db, data.username)
        if not user or not self._verify_password(data.password, user.password):
            warehouse_login_total.labels(status="failed").inc()
            log.warning("login_failed", username=data.username)
            raise InvalidCredentialsError()

        warehouse_login_total.labels(status="success").inc()
        log.info("login_succeeded", user_id=user.id, username=user.username)
        return create_access_token(
            data={"sub": str(user.id), "name": user.username, "role": user.role},
            settings=self.settings,
        )
