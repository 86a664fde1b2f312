from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from shared.config.database import build_engine, build_session_factory, init_models
from shared.config.settings import Settings, get_settings
from shared.observability import setup_observability
from shared.security.rate_limiter import limiter
from shared.templating import templates

from services.auth_service.router import router as auth_router
from services.auth_service.service import AuthService
from services.product_service.cache import ProductListCache
from services.product_service.router import router as product_router
from services.product_service.service import ProductService

log = structlog.get_logger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the application with every component constructed explicitly."""
    settings = settings or get_settings()

    engine = build_engine(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await init_models(engine)
        log.info("startup_complete", project=settings.PROJECT_NAME)
        yield
        await engine.dispose()

    app = FastAPI(title=settings.PROJECT_NAME, version=settings.VERSION, lifespan=lifespan)

    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)
    app.state.product_service = ProductService(
        ProductListCache(ttl_seconds=settings.PRODUCT_LIST_CACHE_SECONDS)
    )
    app.state.auth_service = AuthService(settings)

    limiter.enabled = settings.RATE_LIMIT_ENABLED
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # --- OBSERVABILITY BOOTSTRAP ---
    setup_observability(app, "warehouse_inventory", settings)

    @app.get("/health", include_in_schema=False)
    async def health_check():
        return {"service": "warehouse", "status": "running"}

    @app.get("/", response_class=HTMLResponse, include_in_schema=False)
    async def home(request: Request):
        return templates.TemplateResponse(request, "home/index.html", {})

    app.include_router(auth_router)
    app.include_router(product_router)
    return app


app = create_app()
