# app/repos/product_repo.py
from sqlalchemy import select, update
from sqlalchemy.orm import Session

from app.data.models.product import ProductModel


class ProductRepo:
    def __init__(self, db: Session):
        self.db = db

    def get(self, product_id: str) -> ProductModel | None:
        return self.db.get(ProductModel, product_id)

    def get_for_update(self, product_id: str) -> ProductModel | None:
        # SELECT ... FOR UPDATE, wiersz zablokowany do konca transakcji
        return self.db.execute(
            select(ProductModel)
            .where(ProductModel.id == product_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def decrement_inventory(self, product_id: str, quantity: int) -> bool:
        """
        Warunkowy UPDATE, stan nigdy nie spadnie ponizej zera
        nawet gdy silnik nie wspiera FOR UPDATE.
        Zwraca False gdy zabraklo towaru.
        """
        result = self.db.execute(
            update(ProductModel)
            .where(ProductModel.id == product_id, ProductModel.inventory >= quantity)
            .values(inventory=ProductModel.inventory - quantity)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1
