"""
Category and tag listings used to build filter menus.
"""
from typing import List

from fastapi import APIRouter, HTTPException
from loguru import logger

from catalog.db import repository
from catalog.db.postgres import get_session
from catalog.errors import CatalogError

router = APIRouter()


@router.get("/categories", response_model=List[str])
async def list_categories() -> List[str]:
    """Distinct categories, sorted."""
    try:
        async with get_session() as session:
            return await repository.list_categories(session)
    except CatalogError:
        raise
    except Exception as e:
        logger.error(f"Failed to list categories: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to list categories: {str(e)}")


@router.get("/tags", response_model=List[str])
async def list_tags() -> List[str]:
    """Distinct tags across all products, sorted."""
    try:
        async with get_session() as session:
            return await repository.list_tags(session)
    except CatalogError:
        raise
    except Exception as e:
        logger.error(f"Failed to list tags: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to list tags: {str(e)}")
