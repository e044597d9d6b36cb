"""
Database access for the product catalog (PostgreSQL).
"""
from .postgres import (
    Product,
    init_db,
    drop_db,
    check_connection,
    get_session,
    close_db,
)
from .query_builder import ProductFilters, build_list_query, build_search_query
from .repository import (
    list_products,
    search_products,
    get_product,
    create_product,
    update_product,
    delete_product,
    list_categories,
    list_tags,
    count_products,
)

__all__ = [
    # PostgreSQL model and lifecycle
    "Product",
    "init_db",
    "drop_db",
    "check_connection",
    "get_session",
    "close_db",
    # Query builder
    "ProductFilters",
    "build_list_query",
    "build_search_query",
    # Repository
    "list_products",
    "search_products",
    "get_product",
    "create_product",
    "update_product",
    "delete_product",
    "list_categories",
    "list_tags",
    "count_products",
]
