import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from kiranawala.core.config import settings
from kiranawala.core.exceptions import (
    ConflictError,
    KiranaError,
    NotFoundError,
    PartialWriteError,
    RemoteUnavailable,
    ValidationError,
)
from kiranawala.db.session import engine, Base
from kiranawala.db.deps import close_remote
from kiranawala.api.routes_store import router as store_router
from kiranawala.api.routes_cart import router as cart_router
from kiranawala.api.routes_order import router as order_router
from kiranawala.api.routes_review import router as review_router
from kiranawala.api.routes_address import router as address_router
from kiranawala.api.routes_health import router as health_router

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await close_remote()

app = FastAPI(
    title="kiranawala-sync",
    description="Local-first store discovery, cart, orders and reviews for neighbourhood grocery stores",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # 👈 Replace * with your frontend origin in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Models are registered on Base by the cache module imported through the routers
Base.metadata.create_all(bind=engine)

ERROR_STATUS = {
    ConflictError: 409,
    NotFoundError: 404,
    ValidationError: 422,
    PartialWriteError: 502,
    RemoteUnavailable: 503,
}

@app.exception_handler(KiranaError)
async def kirana_error_handler(request: Request, exc: KiranaError):
    status_code = next(
        (code for error_type, code in ERROR_STATUS.items() if isinstance(exc, error_type)),
        500,
    )
    content = {"detail": str(exc)}
    if isinstance(exc, PartialWriteError):
        content["order_id"] = exc.order_id
    return JSONResponse(status_code=status_code, content=content)

# Register endpoints with descriptions
app.include_router(store_router, prefix="/api/stores", tags=["Store"])
app.include_router(cart_router, prefix="/api/cart", tags=["Cart"])
app.include_router(order_router, prefix="/api/orders", tags=["Order"])
app.include_router(review_router, prefix="/api", tags=["Review"])
app.include_router(address_router, prefix="/api/addresses", tags=["Address"])
app.include_router(health_router, prefix="/api", tags=["Health"])
