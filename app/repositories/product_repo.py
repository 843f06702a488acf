# app/repositories/product_repo.py
import uuid

from sqlmodel import Session, col, or_, select

from app.models.product import Product


class ProductRepository:
    """
    Data access layer for catalog products.

    - Pure DB operations (CRUD + queries).
    - No FastAPI, no business logic.
    """

    def get_by_id(self, session: Session, product_id: uuid.UUID) -> Product | None:
        return session.get(Product, product_id)

    def get_by_code(self, session: Session, product_code: str) -> Product | None:
        stmt = select(Product).where(Product.product_code == product_code)
        return session.exec(stmt).first()

    def list_products(
        self,
        session: Session,
        skip: int = 0,
        limit: int = 50,
        search: str | None = None,
    ) -> list[Product]:
        stmt = select(Product)
        if search:
            pattern = f"%{search}%"
            stmt = stmt.where(
                or_(
                    col(Product.product_code).ilike(pattern),
                    col(Product.product_name).ilike(pattern),
                )
            )
        stmt = stmt.order_by(col(Product.created_at).desc()).offset(skip).limit(limit)
        return session.exec(stmt).all()

    def list_codes_with_prefix(self, session: Session, prefix: str) -> list[str]:
        stmt = select(Product.product_code).where(
            col(Product.product_code).startswith(prefix)
        )
        return session.exec(stmt).all()

    def find_existing_codes(self, session: Session, codes: list[str]) -> list[str]:
        if not codes:
            return []
        stmt = select(Product.product_code).where(col(Product.product_code).in_(codes))
        return session.exec(stmt).all()

    def list_by_codes(self, session: Session, codes: list[str]) -> list[Product]:
        if not codes:
            return []
        stmt = select(Product).where(col(Product.product_code).in_(codes))
        return session.exec(stmt).all()

    def list_variants(self, session: Session, base_code: str) -> list[Product]:
        stmt = (
            select(Product)
            .where(col(Product.product_code).startswith(base_code))
            .where(Product.product_code != base_code)
            .where(col(Product.variant).is_not(None))
            .order_by(Product.product_code)
        )
        return session.exec(stmt).all()

    def list_by_base_code(self, session: Session, base_code: str) -> list[Product]:
        """Variant rows created from `base_code` (exact base match)."""
        stmt = (
            select(Product)
            .where(Product.base_product_code == base_code)
            .order_by(Product.product_code)
        )
        return session.exec(stmt).all()

    def create(self, session: Session, product: Product) -> Product:
        session.add(product)
        session.commit()
        session.refresh(product)
        return product

    def update(self, session: Session, product: Product) -> Product:
        session.add(product)
        session.commit()
        session.refresh(product)
        return product

    def delete(self, session: Session, product: Product) -> None:
        session.delete(product)
        session.commit()

    def add_all(self, session: Session, products: list[Product]) -> list[Product]:
        """
        Stage several products without committing.

        The caller commits (or rolls back) the whole batch.
        """
        session.add_all(products)
        session.flush()
        return products
