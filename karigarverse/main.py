from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager
import logging

from karigarverse.config import settings
from karigarverse.database import create_db_and_tables
from karigarverse.errors import ERROR_STATUS_CODES, KarigarVerseError
from karigarverse.routes import (
    artisan_orders,
    artisan_profiles,
    auth,
    cart,
    categories,
    health,
    orders,
    products,
    profiles,
    reviews,
)

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Run DB creation ONLY in local
    if settings.env == "local":
        create_db_and_tables()
    yield

app = FastAPI(title="KarigarVerse Marketplace API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(KarigarVerseError)
async def karigarverse_error_handler(request: Request, exc: KarigarVerseError) -> JSONResponse:
    """Map KarigarVerseError subclasses to their HTTP status codes."""
    status_code = 500
    for error_type in type(exc).__mro__:
        if error_type in ERROR_STATUS_CODES:
            status_code = ERROR_STATUS_CODES[error_type]
            break
    return JSONResponse(status_code=status_code, content={"error": str(exc)})


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    first = exc.errors()[0] if exc.errors() else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid request")
    if location:
        message = f"{location}: {message}"
    return JSONResponse(status_code=400, content={"error": message})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


api = settings.api_prefix

app.include_router(auth.router, prefix=f"{api}/auth", tags=["Authentication"])
app.include_router(profiles.router, prefix=f"{api}/profiles", tags=["Profiles"])
app.include_router(categories.router, prefix=f"{api}/categories", tags=["Categories"])
app.include_router(products.router, prefix=f"{api}/products", tags=["Products"])
app.include_router(reviews.router, prefix=f"{api}/reviews", tags=["Reviews"])
app.include_router(cart.router, prefix=f"{api}/cart", tags=["Cart"])
app.include_router(orders.router, prefix=f"{api}/orders", tags=["Orders"])
app.include_router(artisan_profiles.router, prefix=f"{api}/artisan-profiles", tags=["Artisan Profiles"])
app.include_router(artisan_orders.router, prefix=f"{api}/artisan-orders", tags=["Artisan Orders"])
app.include_router(health.router, prefix=f"{api}/health", tags=["Health"])


@app.get("/")
def root():
    return {
        "auth_endpoints": [
            f"{api}/auth/signup", f"{api}/auth/login", f"{api}/auth/user"
        ],
        "profile_endpoints": [f"{api}/profiles", f"{api}/profiles/{{user_id}}"],
        "category_endpoints": [f"{api}/categories", f"{api}/categories/slug/{{slug}}"],
        "review_endpoints": [f"{api}/reviews", f"{api}/reviews/{{product_id}}"],
        "product_endpoints": [
            f"{api}/products", f"{api}/products/{{product_id}}",
            f"{api}/products/{{product_id}}/views"
        ],
        "cart": [f"{api}/cart"],
        "orders": [
            f"{api}/orders", f"{api}/orders/detail/{{order_id}}",
            f"{api}/orders/{{order_id}}/cancel"
        ],
        "artisan_endpoints": [
            f"{api}/artisan-profiles", f"{api}/artisan-profiles/{{artisan_id}}",
            f"{api}/artisan-orders"
        ],
    }
