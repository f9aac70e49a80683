# storefront/repos/activity_repo.py
from typing import List

from sqlalchemy import select
from sqlalchemy.orm import Session

from storefront.data.models.activity_log import ActivityLogModel
from storefront.data.models.product import ProductModel


class ActivityRepo:
    def __init__(self, db: Session):
        self.db = db

    def add_entries(self, entries: List[ActivityLogModel]) -> None:
        self.db.add_all(entries)
        self.db.flush()

    def list_for_user(self, user_id: int, limit: int = 100):
        """
        Newest first, with the product name when the product still exists.
        """
        stmt = (
            select(ActivityLogModel, ProductModel.name)
            .outerjoin(ProductModel, ProductModel.id == ActivityLogModel.product_id)
            .where(ActivityLogModel.user_id == user_id)
            .order_by(ActivityLogModel.created_at.desc(), ActivityLogModel.id.desc())
            .limit(limit)
        )
        return self.db.execute(stmt).all()

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
