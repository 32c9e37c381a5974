import math

from sqlalchemy.orm import Session
from storefront.data.models.user import UserModel
from storefront.domain.errors import NotFoundError
from storefront.repos.user_repo import UserRepo
from storefront.domain.schemas import Principal, UserCreate, UserRead
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

USER_ROLES = ("user", "admin")


class UserService:
    """Profiles of identities issued upstream, the id is never generated here."""

    def __init__(self, db: Session):
        self.repo = UserRepo(db)

    def create_user(self, payload: UserCreate) -> UserRead:
        # registering an existing id is a no-op, the stored profile wins
        existing = self.repo.get_user(payload.id)
        if existing:
            logger.info(f"User {payload.id} already registered")
            return UserRead.model_validate(existing)

        created = self.repo.create_user(UserModel(**payload.model_dump()))
        logger.info(f"User {created.id} registered with role {created.role}")
        return UserRead.model_validate(created)

    def get_user(self, user_id: int) -> UserRead:
        user = self.repo.get_user(user_id)
        if not user:
            raise NotFoundError("User not found")
        return UserRead.model_validate(user)

    # admin
    def list_users(self, page: int = 1, limit: int = 20) -> dict:
        total = self.repo.count_users()
        users = self.repo.list_users(offset=(page - 1) * limit, limit=limit)
        return {
            "users": [UserRead.model_validate(u) for u in users],
            "current_page": page,
            "total_pages": math.ceil(total / limit),
            "total_users": total,
        }

    def set_role(self, user_id: int, role: str) -> UserRead:
        if role not in USER_ROLES:
            raise ValueError(f"Invalid role. Must be one of: {', '.join(USER_ROLES)}")

        user = self.repo.get_user(user_id)
        if not user:
            raise NotFoundError("User not found")

        user.role = role
        self.repo.commit()
        logger.info(f"User {user_id} role set to {role}")
        return UserRead.model_validate(user)

    def delete_user(self, user_id: int, principal: Principal) -> None:
        if user_id == principal.user_id:
            raise ValueError("You cannot delete your own account")

        user = self.repo.get_user(user_id)
        if not user:
            raise NotFoundError("User not found")

        # orders keep their user_id, they are history
        self.repo.delete_user(user)
        self.repo.commit()
        logger.info(f"User {user_id} deleted by admin {principal.user_id}")
