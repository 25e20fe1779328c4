import mongomock
import pytest
from fastapi.testclient import TestClient

from config import Settings
from database import Store
from errors import Unauthenticated
from main import create_app


class FakeVerifier:
    """Accepts tokens of the form ``valid:<principal>``."""

    def verify(self, token: str) -> str:
        if not token.startswith("valid:"):
            raise Unauthenticated("Unauthorized: invalid token")
        return token.split(":", 1)[1]


class FakePayments:
    def __init__(self):
        self.calls = []

    def create_intent(self, amount: int, currency: str) -> str:
        self.calls.append((amount, currency))
        return f"pi_{amount}_secret"


@pytest.fixture
def settings():
    return Settings(database_name="marketplace_test", payment_currency="usd")


@pytest.fixture
def store(settings):
    return Store(mongomock.MongoClient(), settings)


@pytest.fixture
def verifier():
    return FakeVerifier()


@pytest.fixture
def payments():
    return FakePayments()


@pytest.fixture
def client(settings, store, verifier, payments):
    app = create_app(settings, store=store, verifier=verifier, payments=payments)
    with TestClient(app) as c:
        yield c
