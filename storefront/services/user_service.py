from typing import Any, Dict

from sqlalchemy.orm import Session

from storefront.data.models.user import UserModel
from storefront.domain.errors import NotFound
from storefront.domain.schemas import UserCreate, UserRead
from storefront.repos.user_repo import UserRepo
from storefront.services.audit_service import AuditService
from storefront.services.order_service import OrderService
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class UserService:
    """
    Users are registered by the identity provider, this only mirrors the
    id and the email address confirmations go to.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo = UserRepo(db)

    def create_user(self, payload: UserCreate) -> UserRead:
        # idempotent on id
        existing = self.repo.get_user(payload.id)
        if existing:
            return UserRead.model_validate(existing)

        user = self.repo.add_user(UserModel(id=payload.id, name=payload.name, email=payload.email))
        self.repo.commit()

        logger.info(f"User {user.id} registered")
        return UserRead.model_validate(user)

    def get_user(self, user_id: int) -> UserRead:
        user = self.repo.get_user(user_id)
        if not user:
            raise NotFound("User", user_id)
        return UserRead.model_validate(user)

    # admin
    def list_users(self, search: str | None = None, limit: int = 20, offset: int = 0) -> Dict[str, Any]:
        users = self.repo.list_users(search, limit=limit, offset=offset)
        return {
            "users": [UserRead.model_validate(u) for u in users],
            "total": self.repo.count_users(search),
            "limit": limit,
            "offset": offset,
        }

    def get_user_detail(self, user_id: int, log_limit: int = 100) -> Dict[str, Any]:
        """User, all their orders and their latest activity entries."""
        user = self.get_user(user_id)
        return {
            "user": user,
            "orders": OrderService(self.db).list_orders(user_id),
            "logs": AuditService(self.db).list_for_user(user_id, limit=log_limit),
        }
