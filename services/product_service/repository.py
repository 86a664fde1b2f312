from typing import Optional

from sqlalchemy import select, text
from sqlalchemy.ext.asyncio import AsyncSession

from .models import Product
from .schemas import ProductRead

# Accepted sort keys (lower-cased) -> column identifiers. Only these values
# are ever placed in ORDER BY; caller text never is.
SORTABLE_COLUMNS = {
    "id": "id",
    "name": "name",
    "quantity": "quantity",
    "description": "description",
}

SEARCH_LIMIT = 10


class ProductRepository:

    @staticmethod
    async def get_product_by_id(db: AsyncSession, product_id: int) -> Optional[Product]:
        return await db.get(Product, product_id)

    @staticmethod
    async def create_product(db: AsyncSession, name: str, quantity: int, description: str) -> int:
        result = await db.execute(
            text(
                "INSERT INTO products (name, quantity, description) "
                "VALUES (:name, :quantity, :description) RETURNING id"
            ),
            {"name": name, "quantity": quantity, "description": description},
        )
        product_id = result.scalar_one()
        await db.commit()
        return product_id

    @staticmethod
    async def update_product(
        db: AsyncSession, product_id: int, name: str, quantity: int, description: str
    ) -> Optional[Product]:
        product = await db.get(Product, product_id)
        if product is None:
            return None

        product.name = name
        product.quantity = quantity
        product.description = description
        await db.commit()
        await db.refresh(product)
        return product

    @staticmethod
    async def delete_product(db: AsyncSession, product_id: int) -> None:
        await db.execute(text("DELETE FROM products WHERE id = :id"), {"id": product_id})
        await db.commit()

    @staticmethod
    async def search_products_by_name(db: AsyncSession, name_part: str) -> list[Product]:
        result = await db.execute(
            select(Product)
            .where(Product.name.icontains(name_part, autoescape=True))
            .order_by(Product.name)
            .limit(SEARCH_LIMIT)
        )
        return list(result.scalars().all())

    @staticmethod
    async def get_products_page(
        db: AsyncSession, offset: int, limit: int, column: str, ascending: bool
    ) -> list[ProductRead]:
        if column not in SORTABLE_COLUMNS.values():
            raise ValueError(f"Unsupported sort column: {column!r}")
        direction = "ASC" if ascending else "DESC"
        result = await db.execute(
            text(
                "SELECT id, name, quantity, description FROM products "
                f"ORDER BY {column} {direction}, id {direction} "
                "LIMIT :limit OFFSET :offset"
            ),
            {"limit": limit, "offset": offset},
        )
        return [ProductRead.model_validate(dict(row)) for row in result.mappings()]
