"""
Sales Station — FastAPI app factory with startup data loading.
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from sales_station.config import LOG_FORMAT, LOG_LEVEL
from sales_station.data.backends import SalesBackend, make_backend
from sales_station.data.store import DataStore
from sales_station.api.dependencies import set_store
from sales_station.api.router_meta import router as meta_router
from sales_station.api.router_records import router as records_router
from sales_station.api.router_upload import router as upload_router
from sales_station.api.router_dashboard import router as dashboard_router

logger = logging.getLogger(__name__)


def create_app(backend: SalesBackend | None = None) -> FastAPI:
    """Build the app. The backend is fixed for the app's lifetime."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Pick the backend and load all records at startup."""
        logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT)

        store = DataStore(backend or make_backend())
        store.load()
        set_store(store)

        if store.last_error:
            logger.warning("Sales Station started without data: %s", store.last_error)
        elif store.row_count() > 0:
            logger.info(
                "Sales Station ready: %d records, %d products, %d categories (%s mode)",
                store.row_count(), len(store.products()), len(store.categories()), store.backend.mode,
            )
        else:
            logger.info("Sales Station ready: no records yet (%s mode)", store.backend.mode)
        yield
        set_store(None)

    app = FastAPI(
        title="Sales Station API",
        description="Sales entry, spreadsheet import, and dashboard analytics",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(meta_router)
    app.include_router(records_router)
    app.include_router(upload_router)
    app.include_router(dashboard_router)

    return app


app = create_app()
