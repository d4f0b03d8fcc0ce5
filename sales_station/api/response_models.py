"""
Pydantic request/response schemas for the API.
"""
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: str
    mode: str
    records: int
    last_error: Optional[str] = None


class ProductsResponse(BaseModel):
    products: list[str]


class CategoriesResponse(BaseModel):
    categories: list[str]


class CatalogResponse(BaseModel):
    catalog: dict[str, list[str]]
    categories: list[str]


class SalesEntryRequest(BaseModel):
    """Form submission. Range checks happen in the normalizer."""
    date: str
    category: str
    product: str
    quantity: float = 1
    amount: float = 0


class SalesRecordModel(BaseModel):
    id: str
    date: str
    category: str
    product_name: str
    quantity: int
    amount: float
    timestamp: int


class RecordsResponse(BaseModel):
    records: list[SalesRecordModel]
    count: int


class SaveResponse(BaseModel):
    status: str
    record: SalesRecordModel
