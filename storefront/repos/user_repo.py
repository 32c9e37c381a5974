from sqlalchemy import select, func
from sqlalchemy.orm import Session
from storefront.data.models.user import UserModel

class UserRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_user(self, user_id: int) -> UserModel | None:
        return self.db.get(UserModel, user_id)

    def list_users(self, offset: int, limit: int) -> list[UserModel]:
        # newest first, ids are handed out in registration order
        return list(
            self.db.execute(
                select(UserModel).order_by(UserModel.id.desc()).offset(offset).limit(limit)
            ).scalars()
        )

    def count_users(self) -> int:
        return self.db.execute(select(func.count(UserModel.id))).scalar_one()

    def create_user(self, user: UserModel) -> UserModel:
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        return user

    def delete_user(self, user: UserModel) -> None:
        self.db.delete(user)
        self.db.flush()

    def commit(self):
        self.db.commit()
