"""
Query construction for product listing and full-text search.

Filters are independent and combined with AND. Every user supplied value is a
bound parameter; attribute keys are additionally checked against an
allow-list before they are used in a predicate.
"""
import re
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import Select, Text, and_, any_, func, literal, select

from catalog.db.postgres import Product, description_document, text_search_query
from catalog.errors import InvalidArgumentError


ATTRIBUTE_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,64}$")


@dataclass(frozen=True)
class ProductFilters:
    """Optional filters for listing products. ``None`` means "not filtered"."""

    category: Optional[str] = None
    tag: Optional[str] = None
    search: Optional[str] = None
    attribute: Optional[str] = None
    attr_value: Optional[str] = None

    @property
    def has_attribute_filter(self) -> bool:
        # Both halves are needed; one without the other is ignored.
        return bool(self.attribute) and bool(self.attr_value)


def validate_attribute_key(key: str) -> str:
    """
    Check an attribute key against the allowed character set.

    Args:
        key: Attribute name taken from the request

    Returns:
        The key, unchanged

    Raises:
        InvalidArgumentError: If the key contains anything but letters,
            digits, underscores or hyphens, or is longer than 64 characters
    """
    if not isinstance(key, str) or not ATTRIBUTE_KEY_PATTERN.match(key):
        raise InvalidArgumentError(
            f"Invalid attribute name: {key!r}. "
            "Use letters, digits, '_' or '-' (max 64 characters)"
        )
    return key


def _ordering(*leading):
    return (*leading, Product.created_at.desc(), Product.id.desc())


def build_list_query(filters: Optional[ProductFilters] = None) -> Select:
    """
    Build the listing query for the given filters.

    Args:
        filters: Filters to apply, or None for every product

    Returns:
        SELECT over products ordered newest first
    """
    filters = filters or ProductFilters()
    conditions = []

    if filters.category:
        conditions.append(Product.category == filters.category)

    if filters.tag:
        conditions.append(literal(filters.tag, Text) == any_(Product.tags))

    if filters.search:
        conditions.append(description_document().op("@@")(text_search_query(filters.search)))

    if filters.has_attribute_filter:
        key = validate_attribute_key(filters.attribute)
        conditions.append(Product.attributes[key].astext == filters.attr_value)

    stmt = select(Product)
    if conditions:
        stmt = stmt.where(and_(*conditions))
    return stmt.order_by(*_ordering())


def build_search_query(query: Optional[str]) -> Select:
    """
    Build a ranked full-text search over product descriptions.

    Rows are ``(Product, rank)`` ordered by rank, then newest first.

    Args:
        query: Free text typed by the user

    Raises:
        InvalidArgumentError: If the query is missing or blank
    """
    if query is None or not query.strip():
        raise InvalidArgumentError("Search query required")

    document = description_document()
    ts_query = text_search_query(query)
    rank = func.ts_rank(document, ts_query).label("rank")

    return (
        select(Product, rank)
        .where(document.op("@@")(ts_query))
        .order_by(*_ordering(rank.desc()))
    )
