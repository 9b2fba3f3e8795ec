from fastapi import FastAPI
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from shared.config.database import engine, Base
from shared.errors import register_exception_handlers
from shared.observability import setup_observability
from shared.security import limiter

# IMPORTANT: import models so they register with Base
from services.catalog_service import models as catalog_models  # noqa: F401
from services.order_service import models as order_models  # noqa: F401

from services.catalog_service.router import router as catalog_router
from services.order_service.router import router as order_router
from services.payment_service.router import router as payment_router

app = FastAPI(title="Template Storefront", version="1.0.0")

# --- OBSERVABILITY BOOTSTRAP ---
setup_observability(app, "storefront")

# --- ERRORS & SECURITY ---
register_exception_handlers(app)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.include_router(catalog_router)
app.include_router(order_router)
app.include_router(payment_router)


@app.get("/health", include_in_schema=False)
async def health_check():
    return {"service": "storefront", "status": "running"}


@app.on_event("startup")
async def startup_event():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
