import json
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional
from urllib.parse import quote_plus

from dotenv import load_dotenv


@dataclass
class Settings:
    database_url: Optional[str] = None
    database_name: str = "marketplace"
    products_collection: str = "products"
    orders_collection: str = "orders"
    reviews_collection: str = "reviews"
    firebase_service_account: Optional[Dict[str, Any]] = None
    stripe_secret_key: Optional[str] = None
    payment_currency: str = "usd"
    port: int = 3000
    log_level: str = "INFO"


def build_database_url() -> Optional[str]:
    url = os.getenv("DATABASE_URL")
    if url:
        return url
    username = os.getenv("DB_USERNAME")
    password = os.getenv("DB_PASSWORD")
    cluster = os.getenv("DB_CLUSTER")
    if not (username and password and cluster):
        return None
    return (
        f"mongodb+srv://{quote_plus(username)}:{quote_plus(password)}@{cluster}/"
        "?retryWrites=true&w=majority"
    )


def parse_service_account(blob: Optional[str]) -> Optional[Dict[str, Any]]:
    """Decode the service-account JSON blob, if one is configured."""
    if not blob:
        return None
    try:
        account: Dict[str, Any] = json.loads(blob)
    except ValueError:
        raise ValueError("FIREBASE_SERVICE_ACCOUNT is not valid JSON")
    return account


def load_settings() -> Settings:
    load_dotenv()
    return Settings(
        database_url=build_database_url(),
        database_name=os.getenv("DB_NAME", "marketplace"),
        products_collection=os.getenv("PRODUCTS_COLLECTION", "products"),
        orders_collection=os.getenv("ORDERS_COLLECTION", "orders"),
        reviews_collection=os.getenv("REVIEWS_COLLECTION", "reviews"),
        firebase_service_account=parse_service_account(os.getenv("FIREBASE_SERVICE_ACCOUNT")),
        stripe_secret_key=os.getenv("STRIPE_SECRET_KEY"),
        payment_currency=os.getenv("PAYMENT_CURRENCY", "usd"),
        port=int(os.getenv("PORT", 3000)),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
