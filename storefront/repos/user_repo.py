from typing import List

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from storefront.data.models.user import UserModel


class UserRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_user(self, user_id: int) -> UserModel | None:
        return self.db.get(UserModel, user_id)

    def get_email(self, user_id: int) -> str | None:
        return self.db.execute(
            select(UserModel.email).where(UserModel.id == user_id)
        ).scalar_one_or_none()

    @staticmethod
    def _matching(stmt, search: str | None):
        if search:
            pattern = f"%{search}%"
            stmt = stmt.where(or_(UserModel.email.ilike(pattern), UserModel.name.ilike(pattern)))
        return stmt

    def list_users(self, search: str | None = None, limit: int = 20, offset: int = 0) -> List[UserModel]:
        stmt = self._matching(select(UserModel), search).order_by(UserModel.id).limit(limit).offset(offset)
        return list(self.db.execute(stmt).scalars().all())

    def count_users(self, search: str | None = None) -> int:
        return self.db.execute(self._matching(select(func.count(UserModel.id)), search)).scalar_one()

    def add_user(self, user: UserModel) -> UserModel:
        self.db.add(user)
        self.db.flush()
        return user

    def commit(self):
        self.db.commit()
