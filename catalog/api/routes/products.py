"""
Product management endpoints.
"""
import time
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query, status
from loguru import logger

from catalog.db import repository
from catalog.db.postgres import get_session
from catalog.db.query_builder import ProductFilters
from catalog.errors import CatalogError
from catalog.schemas.product import (
    Product,
    ProductCreate,
    ProductDeleted,
    ProductSearchResult,
    ProductUpdate,
)
from catalog.utils.metrics import observe_store_duration, record_product_write, record_search

router = APIRouter()


def _failure(action: str, error: Exception) -> HTTPException:
    logger.error(f"Failed to {action}: {error}")
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Failed to {action}: {error}",
    )


@router.get("/products", response_model=List[Product])
async def list_products(
    category: Optional[str] = Query(None, description="Exact category"),
    tag: Optional[str] = Query(None, description="Tag the product must carry"),
    search: Optional[str] = Query(None, description="Full-text search on description"),
    attribute: Optional[str] = Query(None, description="Attribute name, used with attrValue"),
    attr_value: Optional[str] = Query(None, alias="attrValue", description="Attribute value"),
):
    """
    List products, newest first.

    All filters are optional and combined with AND. ``attribute`` and
    ``attrValue`` only apply when both are given.
    """
    start_time = time.time()
    filters = ProductFilters(
        category=category,
        tag=tag,
        search=search,
        attribute=attribute,
        attr_value=attr_value,
    )

    try:
        async with get_session() as session:
            products = await repository.list_products(session, filters)
        observe_store_duration("list", time.time() - start_time)
        return products

    except CatalogError:
        raise
    except Exception as e:
        raise _failure("list products", e)


@router.get("/products/search", response_model=List[ProductSearchResult])
async def search_products(
    q: Optional[str] = Query(None, description="Search text"),
):
    """
    Full-text search over descriptions, best match first.
    """
    start_time = time.time()

    try:
        logger.info(f"Text search: '{q}'")
        async with get_session() as session:
            rows = await repository.search_products(session, q)

        results = [
            ProductSearchResult(**Product.model_validate(product).model_dump(), rank=rank)
            for product, rank in rows
        ]
        duration = time.time() - start_time
        observe_store_duration("search", duration)
        record_search(len(results))
        logger.info(f"Text search completed: {len(results)} results in {int(duration * 1000)}ms")
        return results

    except CatalogError:
        raise
    except Exception as e:
        raise _failure("search products", e)


@router.get("/products/{product_id}", response_model=Product)
async def get_product(product_id: int):
    """
    Get product by ID.
    """
    start_time = time.time()

    try:
        async with get_session() as session:
            product = await repository.get_product(session, product_id)
        observe_store_duration("get", time.time() - start_time)
        return product

    except CatalogError:
        raise
    except Exception as e:
        raise _failure("get product", e)


@router.post("/products", response_model=Product, status_code=status.HTTP_201_CREATED)
async def create_product(product: ProductCreate):
    """
    Create a new product.

    ``name``, ``category`` and ``price`` are required.
    """
    start_time = time.time()

    try:
        async with get_session() as session:
            created = await repository.create_product(session, product.model_dump())
        observe_store_duration("create", time.time() - start_time)
        record_product_write("create")
        return created

    except CatalogError:
        raise
    except Exception as e:
        raise _failure("create product", e)


@router.put("/products/{product_id}", response_model=Product)
async def update_product(product_id: int, product: ProductUpdate):
    """
    Update a product. Omitted or null fields keep their stored values.
    """
    start_time = time.time()

    try:
        async with get_session() as session:
            updated = await repository.update_product(session, product_id, product.model_dump())
        observe_store_duration("update", time.time() - start_time)
        record_product_write("update")
        return updated

    except CatalogError:
        raise
    except Exception as e:
        raise _failure("update product", e)


@router.delete("/products/{product_id}", response_model=ProductDeleted)
async def delete_product(product_id: int):
    """
    Delete a product.
    """
    start_time = time.time()

    try:
        async with get_session() as session:
            deleted_id = await repository.delete_product(session, product_id)
        observe_store_duration("delete", time.time() - start_time)
        record_product_write("delete")
        return ProductDeleted(id=deleted_id)

    except CatalogError:
        raise
    except Exception as e:
        raise _failure("delete product", e)
