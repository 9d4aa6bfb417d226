"""Main FastAPI application."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from catalog_admin.api import auth, categories, health, items, menus, publishing, translations
from catalog_admin.core.config import settings
from catalog_admin.core.errors import CatalogError, ValidationError
from catalog_admin.core.logging import setup_logging
from catalog_admin.db.database import AsyncSessionLocal, init_db
from catalog_admin.services.store.seed import load_seed, seed_store
from catalog_admin.services.store.sql import SqlDocumentStore

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    setup_logging()
    await init_db()
    if settings.seed_file:
        async with AsyncSessionLocal() as session:
            await seed_store(SqlDocumentStore(session), load_seed(settings.seed_file))
    yield


app = FastAPI(
    title="Catalog Admin",
    description="Restaurant menu catalog administration and publishing",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(health.router, tags=["health"])
app.include_router(auth.router, tags=["auth"])
app.include_router(items.router, tags=["items"])
app.include_router(categories.router, tags=["categories"])
app.include_router(menus.router, tags=["menus"])
app.include_router(translations.router, tags=["translations"])
app.include_router(publishing.router, tags=["publishing"])


@app.exception_handler(CatalogError)
async def catalog_error_handler(request: Request, exc: CatalogError):
    logger.warning(
        f"[API] {type(exc).__name__} on {request.method} {request.url.path} - {exc.detail}"
    )
    body = {"detail": exc.detail}
    if isinstance(exc, ValidationError):
        body["field"] = exc.field
    return JSONResponse(body, status_code=exc.status_code)


@app.get("/")
async def root():
    return {"message": "Catalog Admin API", "version": "0.1.0"}
