from types import SimpleNamespace

import pytest
import stripe

from errors import Internal
from payments import StripePaymentGateway


def test_create_intent_returns_client_secret(monkeypatch):
    calls = []

    def fake_create(**kwargs):
        calls.append(kwargs)
        return SimpleNamespace(client_secret="pi_123_secret_456")

    monkeypatch.setattr(stripe.PaymentIntent, "create", fake_create)
    gateway = StripePaymentGateway("sk_test_key")
    assert gateway.create_intent(1999, "usd") == "pi_123_secret_456"
    assert calls[0]["amount"] == 1999
    assert calls[0]["currency"] == "usd"
    assert calls[0]["api_key"] == "sk_test_key"


def test_create_intent_wraps_stripe_errors(monkeypatch):
    def failing_create(**kwargs):
        raise stripe.StripeError("card network down")

    monkeypatch.setattr(stripe.PaymentIntent, "create", failing_create)
    with pytest.raises(Internal):
        StripePaymentGateway("sk_test_key").create_intent(100, "usd")


def test_create_intent_without_key():
    with pytest.raises(Internal):
        StripePaymentGateway(None).create_intent(100, "usd")


def test_payment_intent_route(client, payments):
    res = client.post("/create-payment-intent", json={"amount": 4200})
    assert res.status_code == 200
    assert res.json() == {"clientSecret": "pi_4200_secret"}
    assert payments.calls == [(4200, "usd")]


def test_payment_intent_route_requires_amount(client):
    res = client.post("/create-payment-intent", json={})
    assert res.status_code == 400
