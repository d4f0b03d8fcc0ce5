"""
Meta endpoints: health, catalog, products, categories, refresh.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends

from sales_station.config import PRODUCT_CATALOG
from sales_station.data.store import DataStore
from sales_station.api.dependencies import get_store
from sales_station.api.response_models import (
    HealthResponse, CatalogResponse, ProductsResponse, CategoriesResponse,
)

router = APIRouter(prefix="/api", tags=["meta"])


def _health(store: DataStore) -> HealthResponse:
    return HealthResponse(
        status="ok" if store.last_error is None else "degraded",
        mode=store.backend.mode,
        records=store.row_count(),
        last_error=store.last_error,
    )


@router.get("/health", response_model=HealthResponse)
def health(store: DataStore = Depends(get_store)):
    return _health(store)


@router.get("/catalog", response_model=CatalogResponse)
def catalog():
    """Category → product choices for the entry form."""
    return CatalogResponse(catalog=PRODUCT_CATALOG, categories=list(PRODUCT_CATALOG))


@router.get("/products", response_model=ProductsResponse)
def list_products(store: DataStore = Depends(get_store)):
    return ProductsResponse(products=store.products())


@router.get("/categories", response_model=CategoriesResponse)
def list_categories(store: DataStore = Depends(get_store)):
    return CategoriesResponse(categories=store.categories())


@router.post("/refresh", response_model=HealthResponse)
def refresh(store: DataStore = Depends(get_store)):
    """Re-read every record from the backend.

    Failures are reported in the response; the last-known records stay.
    """
    store.refresh()
    return _health(store)
