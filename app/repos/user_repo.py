from typing import List, Tuple

from sqlalchemy import select, func, or_
from sqlalchemy.orm import Session

from app.data.models.user import UserModel
from app.data.models.order import OrderModel


class UserRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_user(self, user_id: str) -> UserModel | None:
        return self.db.get(UserModel, user_id)

    def list_customers(self, page: int, limit: int, search: str = "") -> Tuple[List[Tuple[UserModel, int]], int]:
        filters = [UserModel.role == "customer", UserModel.is_active.is_(True)]
        if search:
            term = f"%{search.lower()}%"
            filters.append(
                or_(
                    func.lower(UserModel.first_name).like(term),
                    func.lower(UserModel.last_name).like(term),
                    func.lower(UserModel.email).like(term),
                )
            )

        total = self.db.execute(select(func.count(UserModel.id)).where(*filters)).scalar_one()

        rows = self.db.execute(
            select(UserModel, func.count(OrderModel.id).label("order_count"))
            .outerjoin(OrderModel, OrderModel.user_id == UserModel.id)
            .where(*filters)
            .group_by(UserModel.id)
            .order_by(UserModel.created_at.desc())
            .limit(limit)
            .offset((page - 1) * limit)
        ).all()
        return [(user, count) for user, count in rows], total
