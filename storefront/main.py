import logging
import time
from typing import List, Optional

from fastapi import APIRouter, Depends, FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import __version__
from .admin import get_order_detail, require_admin
from .catalog import get_product, list_categories, list_products
from .checkout import submit_order
from .config import Settings
from .db import get_session, init_db, make_engine, make_session_factory
from .errors import InvalidArgument, InvalidItem, StorefrontError, Unauthorized
from .schemas import AdminOrderOut, OrderCreate, OrderCreated, ProductOut
from .seed import seed_if_empty

logger = logging.getLogger(__name__)

# ---- Prometheus metrics ----
REQS = Counter("http_requests_total", "Total HTTP requests", ["service", "path", "method", "status"])
LAT = Histogram("http_request_duration_seconds", "Request latency", ["service", "path", "method"])
ORDERS_CREATED = Counter("orders_created_total", "Orders created successfully")
ORDERS_FAILED = Counter("order_create_failures_total", "Order create failures", ["reason"])

router = APIRouter(prefix="/api")


# ---------- Catalog ----------
@router.get("/products", response_model=List[ProductOut])
def api_list_products(
    q: Optional[str] = None,
    category: Optional[str] = None,
    sort: Optional[str] = None,
    session: Session = Depends(get_session),
):
    return list_products(session, text=q, category=category, sort=sort)


@router.get("/products/{pid}", response_model=ProductOut)
def api_get_product(pid: str, session: Session = Depends(get_session)):
    return get_product(session, pid)


@router.get("/categories", response_model=List[str])
def api_list_categories(session: Session = Depends(get_session)):
    return list_categories(session)


# ---------- Checkout ----------
@router.post("/orders", response_model=OrderCreated, status_code=201)
def api_create_order(payload: OrderCreate, session: Session = Depends(get_session)):
    try:
        receipt = submit_order(session, payload)
    except StorefrontError as e:
        ORDERS_FAILED.labels(reason=e.code.lower()).inc()
        logger.info("Order rejected: %s", e.code)
        raise
    ORDERS_CREATED.inc()
    return OrderCreated(order_id=receipt.order_id, order_code=receipt.order_code, total=receipt.total)


# ---------- Admin ----------
@router.get("/admin/orders/{oid}", response_model=AdminOrderOut)
def api_admin_order(oid: str, _admin: str = Depends(require_admin), session: Session = Depends(get_session)):
    return get_order_detail(session, oid)


# ---------- Error translation ----------
def _error_response(status_code: int, message: str, headers: Optional[dict] = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)


async def storefront_error_handler(request: Request, exc: StorefrontError):
    headers = {"WWW-Authenticate": 'Basic realm="Admin"'} if isinstance(exc, Unauthorized) else None
    return _error_response(exc.status_code, exc.message, headers)


async def request_validation_handler(request: Request, exc: RequestValidationError):
    # A body that does not parse into the typed schema is a client error;
    # errors inside the cart keep their specific kind.
    in_items = any("items" in err.get("loc", ()) for err in exc.errors())
    err = InvalidItem() if in_items else InvalidArgument("Invalid request body.")
    return _error_response(err.status_code, err.message)


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return _error_response(exc.status_code, str(exc.detail), getattr(exc, "headers", None))


# ---------- App factory ----------
def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the application. The engine is created here and owned by the app:
    opened at startup, disposed at shutdown.
    """
    settings = settings or Settings.from_env()
    profile = settings.profile

    app = FastAPI(title=profile.title, version=__version__)
    engine = make_engine(settings.database_url)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = make_session_factory(engine)

    @app.on_event("startup")
    def on_startup():
        init_db(engine)
        if settings.seed_on_startup:
            with app.state.session_factory() as s:
                seed_if_empty(s, profile)
        if settings.uses_default_admin_credentials:
            logger.warning("ADMIN_USER/ADMIN_PASS are the built-in defaults; set them before exposing the admin API")

    @app.on_event("shutdown")
    def on_shutdown():
        engine.dispose()

    @app.middleware("http")
    async def metrics_middleware(request: Request, call_next):
        start = time.time()
        response = await call_next(request)
        REQS.labels(profile.name, request.url.path, request.method, response.status_code).inc()
        LAT.labels(profile.name, request.url.path, request.method).observe(time.time() - start)
        return response

    @app.get("/health", response_class=PlainTextResponse)
    def health():
        return "ok"

    @app.get("/metrics")
    def metrics():
        return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)

    app.add_exception_handler(StorefrontError, storefront_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.include_router(router)
    return app


def run() -> None:
    import uvicorn

    settings = Settings.from_env()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = create_app(settings)
    logger.info("Storefront %r listening on %s:%d", settings.profile_name, settings.host, settings.listen_port)
    uvicorn.run(app, host=settings.host, port=settings.listen_port)


if __name__ == "__main__":
    run()
