from typing import Dict, Iterable
from sqlalchemy.orm import Session
from models.products import Product


class CatalogService:
    """Read-only product lookups used by the cart and checkout."""

    @staticmethod
    def find_by_id(db: Session, product_id: int) -> Product | None:
        return db.query(Product).filter(Product.id == product_id).one_or_none()

    @staticmethod
    def find_available(db: Session, product_id: int) -> Product | None:
        product = CatalogService.find_by_id(db, product_id)
        if product is None or not product.is_available:
            return None
        return product

    @staticmethod
    def find_many(db: Session, product_ids: Iterable[int]) -> Dict[int, Product]:
        ids = list(set(product_ids))
        if not ids:
            return {}
        products = db.query(Product).filter(Product.id.in_(ids)).all()
        return {p.id: p for p in products}
