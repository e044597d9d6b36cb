"""
Product repository: CRUD operations and distinct-value projections.

Each function runs a single statement on the given session. Store failures
are translated into catalog errors by ``translate_store_errors``.
"""
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from loguru import logger

from catalog.db.postgres import Product, translate_store_errors
from catalog.db.query_builder import ProductFilters, build_list_query, build_search_query
from catalog.errors import InvalidArgumentError, ProductNotFoundError


MUTABLE_FIELDS = (
    "name",
    "category",
    "price",
    "image_url",
    "attributes",
    "tags",
    "description",
)

REQUIRED_FIELDS = ("name", "category", "price")


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


@translate_store_errors
async def list_products(
    session: AsyncSession,
    filters: Optional[ProductFilters] = None,
) -> List[Product]:
    """
    List products matching every given filter, newest first.

    Args:
        session: Database session
        filters: Optional filters; None returns all products

    Returns:
        List of Product instances
    """
    stmt = build_list_query(filters)
    result = await session.execute(stmt)
    products = list(result.scalars().all())
    logger.debug(f"Retrieved {len(products)} products (filters={filters})")
    return products


@translate_store_errors
async def search_products(session: AsyncSession, query: Optional[str]) -> List[Tuple[Product, float]]:
    """
    Full-text search over descriptions.

    Args:
        session: Database session
        query: Search text

    Returns:
        ``(product, rank)`` pairs, best match first

    Raises:
        InvalidArgumentError: If the query is empty
    """
    stmt = build_search_query(query)
    result = await session.execute(stmt)
    rows = [(product, float(rank)) for product, rank in result.all()]
    logger.debug(f"Search '{query}' matched {len(rows)} products")
    return rows


@translate_store_errors
async def get_product(session: AsyncSession, product_id: int) -> Product:
    """
    Get product by ID.

    Raises:
        ProductNotFoundError: If no product has this ID
    """
    stmt = select(Product).where(Product.id == product_id)
    result = await session.execute(stmt)
    product = result.scalar_one_or_none()
    if product is None:
        logger.debug(f"Product not found by ID: {product_id}")
        raise ProductNotFoundError(product_id)
    return product


@translate_store_errors
async def create_product(session: AsyncSession, product_data: Dict[str, Any]) -> Product:
    """
    Create a new product.

    ``name``, ``category`` and ``price`` are required. Optional fields default
    to an empty mapping, an empty tag list, an empty description and no image.

    Args:
        session: Database session
        product_data: Field values for the new product

    Returns:
        Created Product instance with its id and created_at

    Raises:
        InvalidArgumentError: If a required field is missing or blank
    """
    missing = [field for field in REQUIRED_FIELDS if _is_missing(product_data.get(field))]
    if missing:
        raise InvalidArgumentError(f"Missing required fields: {', '.join(missing)}")

    attributes = product_data.get("attributes")
    tags = product_data.get("tags")
    description = product_data.get("description")

    product = Product(
        name=product_data["name"],
        category=product_data["category"],
        price=product_data["price"],
        image_url=product_data.get("image_url") or None,
        attributes=attributes if attributes is not None else {},
        tags=list(tags) if tags is not None else [],
        description=description if description is not None else "",
    )
    session.add(product)
    await session.flush()
    await session.refresh(product)
    logger.info(f"✅ Created product: {product.id} ({product.name})")
    return product


@translate_store_errors
async def update_product(
    session: AsyncSession,
    product_id: int,
    product_data: Dict[str, Any],
) -> Product:
    """
    Update an existing product field by field.

    Only fields with a non-None value are written; anything omitted or None
    keeps its stored value.

    Args:
        session: Database session
        product_id: Product ID
        product_data: Fields to change

    Returns:
        The product after the update

    Raises:
        ProductNotFoundError: If no product has this ID
    """
    values = {
        field: product_data[field]
        for field in MUTABLE_FIELDS
        if product_data.get(field) is not None
    }
    if "tags" in values:
        values["tags"] = list(values["tags"])

    if not values:
        logger.debug(f"Nothing to update for product {product_id}")
        return await get_product(session, product_id)

    stmt = (
        update(Product)
        .where(Product.id == product_id)
        .values(**values)
        .returning(Product)
    )
    result = await session.execute(stmt)
    product = result.scalar_one_or_none()

    if product is None:
        logger.warning(f"Product not found for update: {product_id}")
        raise ProductNotFoundError(product_id)

    await session.flush()
    await session.refresh(product)
    logger.info(f"✅ Updated product {product_id}: {', '.join(sorted(values))}")
    return product


@translate_store_errors
async def delete_product(session: AsyncSession, product_id: int) -> int:
    """
    Delete a product (hard delete).

    Returns:
        ID of the deleted product

    Raises:
        ProductNotFoundError: If no product has this ID
    """
    stmt = delete(Product).where(Product.id == product_id).returning(Product.id)
    result = await session.execute(stmt)
    deleted_id = result.scalar_one_or_none()

    if deleted_id is None:
        logger.warning(f"Product not found for deletion: {product_id}")
        raise ProductNotFoundError(product_id)

    logger.info(f"✅ Deleted product: {deleted_id}")
    return deleted_id


@translate_store_errors
async def list_categories(session: AsyncSession) -> List[str]:
    """Distinct non-null categories, sorted ascending."""
    stmt = (
        select(Product.category)
        .where(Product.category.is_not(None))
        .distinct()
        .order_by(Product.category)
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


@translate_store_errors
async def list_tags(session: AsyncSession) -> List[str]:
    """Distinct tags across every product's tag list, sorted ascending."""
    tag = func.unnest(Product.tags).label("tag")
    stmt = select(tag).distinct().order_by(tag)
    result = await session.execute(stmt)
    return list(result.scalars().all())


@translate_store_errors
async def count_products(session: AsyncSession) -> int:
    """
    Get total count of products in database.
    """
    result = await session.execute(select(func.count(Product.id)))
    return result.scalar() or 0
