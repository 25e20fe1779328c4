import logging
import sys
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, FastAPI, Header, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from pymongo.errors import PyMongoError
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import Settings, load_settings
from database import Store, connect
from errors import Internal, ServiceError
from identity import FirebaseTokenVerifier, IdentityVerifier
from orders import OrderService
from payments import PaymentGateway, StripePaymentGateway
from products import DEFAULT_PAGE_SIZE, ProductService
from reviews import ReviewService
from schemas import PaymentIntentRequest, PaymentIntentResponse, ProductPage, ReviewCreate

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT)


# Dependencies

def get_store(request: Request) -> Store:
    store = request.app.state.store
    if store is None:
        raise Internal("Database not configured")
    return store


def get_products(store: Store = Depends(get_store)) -> ProductService:
    return ProductService(store.products)


def get_orders(request: Request, store: Store = Depends(get_store)) -> OrderService:
    return OrderService(store.orders, request.app.state.verifier)


def get_reviews(store: Store = Depends(get_store)) -> ReviewService:
    return ReviewService(store.reviews)


router = APIRouter()

# Product Routes
@router.get("/products")
def list_products(products: ProductService = Depends(get_products)):
    return products.list_all()

@router.get("/products/search")
def search_products(q: Optional[str] = Query(None), products: ProductService = Depends(get_products)):
    return products.search(q)

@router.get("/products/page", response_model=ProductPage)
def page_products(
    page: int = Query(1),
    pageSize: int = Query(DEFAULT_PAGE_SIZE),
    products: ProductService = Depends(get_products),
):
    return products.list_page(page, pageSize)

@router.get("/products/seller/{uid}")
def seller_products(uid: str, products: ProductService = Depends(get_products)):
    return products.list_by_seller(uid)

@router.post("/products/add", status_code=201)
def add_product(product: Dict[str, Any] = Body(...), products: ProductService = Depends(get_products)):
    inserted_id = products.create(product)
    return {"message": "Product inserted successfully", "insertedId": inserted_id}

@router.put("/products/update/{product_id}")
def update_product(
    product_id: str,
    fields: Dict[str, Any] = Body(...),
    products: ProductService = Depends(get_products),
):
    modified = products.update(product_id, fields)
    return {"message": "Product updated successfully", "modifiedCount": modified}

@router.delete("/products/delete/{product_id}")
def delete_product(product_id: str, products: ProductService = Depends(get_products)):
    deleted = products.delete(product_id)
    return {"message": "Product deleted successfully", "deletedCount": deleted}

# Order Routes
@router.get("/orders")
def seller_orders(authorization: Optional[str] = Header(None), orders: OrderService = Depends(get_orders)):
    return {"message": "Orders retrieved successfully", "orders": orders.list_for_seller(authorization)}

@router.post("/orders/add", status_code=201)
def add_orders(payload: Any = Body(...), orders: OrderService = Depends(get_orders)):
    result = orders.create_many(payload)
    return {"message": "Orders created successfully", **result}

@router.delete("/orders/{order_id}")
def delete_order(order_id: str, orders: OrderService = Depends(get_orders)):
    orders.delete_one(order_id)
    return {"message": "Order deleted successfully"}

# Review Routes
@router.get("/product-reviews")
def sample_reviews(reviews: ReviewService = Depends(get_reviews)) -> List[Dict[str, Any]]:
    return reviews.sample_reviews()

@router.post("/product-reviews/add", status_code=201)
def add_review(payload: ReviewCreate, reviews: ReviewService = Depends(get_reviews)):
    inserted_id = reviews.add_review(payload.review)
    return {"message": "Review added successfully", "insertedId": inserted_id}

# Payments
@router.post("/create-payment-intent", response_model=PaymentIntentResponse)
def create_payment_intent(payload: PaymentIntentRequest, request: Request):
    app_state = request.app.state
    client_secret = app_state.payments.create_intent(payload.amount, app_state.settings.payment_currency)
    return PaymentIntentResponse(clientSecret=client_secret)

# Utility endpoints
@router.get("/", response_class=PlainTextResponse)
def root():
    return "Marketplace API running"


# Error handlers

async def service_error_handler(request: Request, exc: ServiceError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers)


async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    detail = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    return JSONResponse(status_code=400, content={"error": f"Invalid request: {detail}"})


async def database_error_handler(request: Request, exc: PyMongoError):
    logger.error("Database error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[Store] = None,
    verifier: Optional[IdentityVerifier] = None,
    payments: Optional[PaymentGateway] = None,
) -> FastAPI:
    """
    Build the API.

    Collaborators that are not passed in are built from ``settings``; the
    database is connected on startup when no ``store`` is given, and a failed
    connection aborts startup.
    """
    settings = settings or load_settings()
    configure_logging(settings.log_level)
    if verifier is None and settings.firebase_service_account:
        verifier = FirebaseTokenVerifier.from_service_account(settings.firebase_service_account)
    if payments is None:
        payments = StripePaymentGateway(settings.stripe_secret_key)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owns_store = app.state.store is None
        if owns_store:
            app.state.store = connect(settings)
        yield
        if owns_store:
            app.state.store.close()
            app.state.store = None

    app = FastAPI(title="Marketplace API", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.settings = settings
    app.state.store = store
    app.state.verifier = verifier
    app.state.payments = payments

    app.add_exception_handler(ServiceError, service_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(PyMongoError, database_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
    app.include_router(router)
    return app


def main() -> None:
    import uvicorn

    settings = load_settings()
    configure_logging(settings.log_level)
    try:
        store = connect(settings)
    except (PyMongoError, RuntimeError) as e:
        logger.error("Error connecting to MongoDB: %s", e)
        sys.exit(1)
    app = create_app(settings, store=store)
    logger.info("Server is running on port %d", settings.port)
    uvicorn.run(app, host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    main()
