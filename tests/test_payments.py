from types import SimpleNamespace

import pytest
import stripe
from fastapi import HTTPException

from storefront.services import payments


@pytest.fixture
def stripe_key(monkeypatch):
    monkeypatch.setattr(payments.settings, "stripe_secret_key", "sk_test_123")


def test_minor_units():
    assert payments.to_minor_units(499.99) == 49999
    assert payments.to_minor_units(10) == 1000


async def test_missing_key_is_a_configuration_error(monkeypatch):
    monkeypatch.setattr(payments.settings, "stripe_secret_key", None)
    with pytest.raises(HTTPException) as exc:
        await payments.create_payment_intent(100.0, "inr")
    assert exc.value.status_code == 503


async def test_intent_is_created_in_minor_units(monkeypatch, stripe_key):
    calls = []

    def fake_create(**kwargs):
        calls.append(kwargs)
        return SimpleNamespace(id="pi_1", client_secret="pi_1_secret")

    monkeypatch.setattr(stripe.PaymentIntent, "create", fake_create)

    result = await payments.create_payment_intent(250.5, "INR")
    assert result == {"client_secret": "pi_1_secret", "payment_id": "pi_1"}
    assert calls[0]["amount"] == 25050
    assert calls[0]["currency"] == "inr"
    assert calls[0]["api_key"] == "sk_test_123"
    assert calls[0]["automatic_payment_methods"] == {"enabled": True}


async def test_stripe_failure_is_a_bad_gateway(monkeypatch, stripe_key):
    def failing_create(**kwargs):
        raise stripe.StripeError("card network unavailable")

    monkeypatch.setattr(stripe.PaymentIntent, "create", failing_create)

    with pytest.raises(HTTPException) as exc:
        await payments.create_payment_intent(100.0, "inr")
    assert exc.value.status_code == 502


def test_payment_intent_endpoint(client, monkeypatch, stripe_key):
    monkeypatch.setattr(
        stripe.PaymentIntent, "create",
        lambda **kwargs: SimpleNamespace(id="pi_2", client_secret="pi_2_secret"),
    )

    res = client.post("/payments/intent", json={"amount": 120})
    assert res.status_code == 201, res.text
    assert res.json()["payment_id"] == "pi_2"

    assert client.post("/payments/intent", json={"amount": 0}).status_code == 422
