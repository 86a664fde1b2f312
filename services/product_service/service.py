from typing import Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from shared.exceptions import InvalidSortFieldError
from shared.observability.metrics import warehouse_product_list_cache_total

from .cache import ProductListCache, ProductListKey
from .models import Product
from .repository import SORTABLE_COLUMNS, ProductRepository
from .schemas import ProductForm, ProductRead

log = structlog.get_logger(__name__)

DEFAULT_SORT_FIELD = "id"


class ProductService:
    """Product use-cases on top of the repository, with a cached listing."""

    def __init__(self, cache: ProductListCache[list[ProductRead]]):
        self.cache = cache

    @staticmethod
    def resolve_sort_column(sort_field: str) -> str:
        column = SORTABLE_COLUMNS.get(sort_field.lower())
        if column is None:
            raise InvalidSortFieldError(sort_field)
        return column

    async def get_products_page(
        self,
        db: AsyncSession,
        page_number: int,
        page_size: int,
        sort_field: Optional[str],
        ascending: bool,
    ) -> list[ProductRead]:
        sort_field = sort_field or DEFAULT_SORT_FIELD
        column = self.resolve_sort_column(sort_field)

        key = ProductListKey(page_number, page_size, sort_field, ascending)
        products = self.cache.get(key)
        if products is not None:
            warehouse_product_list_cache_total.labels(result="hit").inc()
            return products

        warehouse_product_list_cache_total.labels(result="miss").inc()
        offset = (page_number - 1) * page_size
        products = await ProductRepository.get_products_page(
            db, offset=offset, limit=page_size, column=column, ascending=ascending
        )
        self.cache.set(key, products)
        log.info(
            "product_page_cached",
            page_number=page_number,
            page_size=page_size,
            sort_field=sort_field,
            ascending=ascending,
            count=len(products),
        )
        return products

    @staticmethod
    async def get_product_by_id(db: AsyncSession, product_id: int) -> Optional[Product]:
        return await ProductRepository.get_product_by_id(db, product_id)

    @staticmethod
    async def create_product(db: AsyncSession, data: ProductForm) -> int:
        return await ProductRepository.create_product(
            db, name=data.name, quantity=data.quantity, description=data.description
        )

    @staticmethod
    async def update_product(db: AsyncSession, product_id: int, data: ProductForm) -> Optional[Product]:
        # A missing product is a silent no-op.
        return await ProductRepository.update_product(
            db,
            product_id,
            name=data.name,
            quantity=data.quantity,
            description=data.description,
        )

    @staticmethod
    async def delete_product(db: AsyncSession, product_id: int) -> None:
        await ProductRepository.delete_product(db, product_id)

    @staticmethod
    async def search_products_by_name(db: AsyncSession, name_part: str) -> list[Product]:
        return await ProductRepository.search_products_by_name(db, name_part)
