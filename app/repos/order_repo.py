# app/repos/order_repo.py
from typing import List, Tuple

from sqlalchemy import select, func, update
from sqlalchemy.orm import Session, selectinload

from app.data.models.order import OrderModel
from app.data.models.order_item import OrderItemModel


def _with_details(stmt):
    return stmt.options(
        selectinload(OrderModel.items).selectinload(OrderItemModel.product),
        selectinload(OrderModel.user),
    )


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    def add_order(self, order: OrderModel) -> OrderModel:
        # bez commita, transakcja nalezy do OrderService
        self.db.add(order)
        self.db.flush()
        return order

    def get_order(self, order_id: str, user_id: str = "") -> OrderModel | None:
        stmt = select(OrderModel).where(OrderModel.id == order_id)
        if user_id:
            stmt = stmt.where(OrderModel.user_id == user_id)
        return self.db.execute(_with_details(stmt)).scalar_one_or_none()

    def list_orders(
        self,
        page: int,
        limit: int,
        status: str = "",
        user_id: str = "",
    ) -> Tuple[List[OrderModel], int]:
        filters = []
        if status:
            filters.append(OrderModel.status == status)
        if user_id:
            filters.append(OrderModel.user_id == user_id)

        total = self.db.execute(
            select(func.count(OrderModel.id)).where(*filters)
        ).scalar_one()

        stmt = (
            select(OrderModel)
            .where(*filters)
            .order_by(OrderModel.created_at.desc())
            .limit(limit)
            .offset((page - 1) * limit)
        )
        orders = self.db.execute(_with_details(stmt)).scalars().all()
        return list(orders), total

    def set_status(self, order_id: str, status: str, only_from: frozenset | None = None) -> int:
        stmt = update(OrderModel).where(OrderModel.id == order_id)
        if only_from is not None:
            # warunek w SQL, stan mogl sie zmienic od odczytu
            stmt = stmt.where(OrderModel.status.in_(only_from))
        result = self.db.execute(
            stmt
            .values(status=status)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
