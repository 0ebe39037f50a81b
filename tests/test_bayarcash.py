import asyncio
import importlib
import json

import httpx
import pytest

from boatbook import config
from boatbook.domain.payments.bayarcash import (
    BayarcashClient,
    PRODUCTION_API_URL,
    PaymentGatewayError,
    first_record,
    map_bayarcash_status,
    parse_transaction,
    whole_ringgit,
)
from boatbook.webhook_security import payment_intent_checksum


def intent_kwargs(**overrides):
    kwargs = {
        "order_number": "NTT-ABC123",
        "amount": 140.0,
        "payer_name": "Aisyah Rahman",
        "payer_email": "aisyah@example.com",
        "payer_phone": "0198765432",
        "payment_channel": "FPX",
        "return_url": "https://api.example.test/api/bayarcash/return?payment_id=p1",
    }
    kwargs.update(overrides)
    return kwargs


@pytest.mark.parametrize(
    "raw,expected",
    [(0, "pending"), ("1", "processing"), (2, "failed"), ("3", "succeeded"), (4, "failed"), (None, "pending"), ("x", "pending")],
)
def test_status_map(raw, expected):
    assert map_bayarcash_status(raw) == expected


def test_parse_transaction_intent_statuses():
    assert parse_transaction({"status": "SUCCESSFUL", "transaction_id": "t1"}).status == "succeeded"
    assert parse_transaction({"payment_status": 2}).status == "failed"
    assert parse_transaction({"status": 0}).status == "pending"


def test_create_payment_intent_sends_signed_request(gateway, gateway_stub):
    gateway_stub.add(
        "POST",
        "/payment-intents",
        json={"id": "pi_abc123", "url": "https://console.bayarcash-sandbox.com/payment-intent/pi_abc123"},
    )

    url, intent_id = asyncio.run(gateway.create_payment_intent(**intent_kwargs(amount=79.6)))

    assert url.endswith("/payment-intent/pi_abc123")
    assert intent_id == "pi_abc123"

    request = gateway_stub.requests[0]
    assert request.headers["authorization"] == "Bearer test-api-token"
    sent = json.loads(request.content)
    assert sent["amount"] == "80"
    assert sent["payment_channel"] == 1
    assert sent["portal_key"] == "test-portal-key"
    assert sent["checksum"] == payment_intent_checksum("test-secret-key", sent)


def test_intent_id_recovered_from_url(gateway, gateway_stub):
    gateway_stub.add(
        "POST", "/payment-intents", json={"url": "https://console.bayarcash-sandbox.com/payment-intent/pi_xyz789"}
    )
    _, intent_id = asyncio.run(gateway.create_payment_intent(**intent_kwargs()))
    assert intent_id == "pi_xyz789"


def test_gateway_rejection_raises(gateway, gateway_stub):
    gateway_stub.add("POST", "/payment-intents", status_code=422, json={"message": "Invalid portal key"})
    with pytest.raises(PaymentGatewayError, match="Invalid portal key"):
        asyncio.run(gateway.create_payment_intent(**intent_kwargs()))


def test_unknown_channel_raises(gateway):
    with pytest.raises(PaymentGatewayError):
        asyncio.run(gateway.create_payment_intent(**intent_kwargs(payment_channel="CASH")))


def test_missing_credentials_raise():
    client = BayarcashClient(portal_key="", api_token="", secret_key="", sandbox=True)
    with pytest.raises(PaymentGatewayError):
        asyncio.run(client.create_payment_intent(**intent_kwargs()))


def test_connection_error_raises():
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = BayarcashClient("k", "t", "s", sandbox=True, transport=httpx.MockTransport(refuse))
    with pytest.raises(PaymentGatewayError, match="Failed to connect"):
        asyncio.run(client.create_payment_intent(**intent_kwargs()))


def test_intent_status_from_intent_endpoint(gateway, gateway_stub):
    gateway_stub.add("GET", "/payment-intent/pi_abc123", json={"data": {"status": 1, "transaction_id": "trx_9"}})

    result = asyncio.run(gateway.get_payment_intent_status("pi_abc123"))

    assert result.status == "succeeded"
    assert result.transaction_id == "trx_9"


def test_intent_status_falls_back_to_transactions(gateway, gateway_stub):
    gateway_stub.add(
        "GET",
        "/transactions",
        json={"data": [{"status": 3, "transaction_id": "trx_7", "exchange_reference_number": "ex_1"}]},
    )

    result = asyncio.run(gateway.get_payment_intent_status("pi_abc123"))

    assert result.status == "succeeded"
    assert result.exchange_ref_number == "ex_1"
    paths = [r.url.path for r in gateway_stub.requests]
    assert paths == ["/api/v2/payment-intent/pi_abc123", "/api/v2/transactions"]


def test_intent_status_unavailable(gateway):
    with pytest.raises(PaymentGatewayError):
        asyncio.run(gateway.get_payment_intent_status("pi_missing"))


def test_transaction_by_order_number(gateway, gateway_stub):
    gateway_stub.add("GET", "/transactions", json={"data": [{"status": 2, "transaction_id": "trx_2"}]})

    result = asyncio.run(gateway.get_transaction_by_order_number("NTT-ABC123"))

    assert result.status == "failed"
    assert gateway_stub.requests[0].url.params["order_number"] == "NTT-ABC123"


@pytest.mark.parametrize("amount,expected", [(12.5, "13"), (13.5, "14"), (12.49, "12"), (140.0, "140"), (0.5, "1")])
def test_whole_ringgit_rounds_half_up(amount, expected):
    assert whole_ringgit(amount) == expected


def test_half_ringgit_total_is_charged_rounded_up(gateway, gateway_stub):
    gateway_stub.add("POST", "/payment-intents", json={"id": "pi_half", "url": "https://pay.example/payment-intent/pi_half"})

    asyncio.run(gateway.create_payment_intent(**intent_kwargs(amount=12.5)))

    sent = json.loads(gateway_stub.requests[0].content)
    assert sent["amount"] == "13"
    assert sent["checksum"] == payment_intent_checksum("test-secret-key", sent)


@pytest.mark.parametrize(
    "body,expected",
    [
        ({"data": {"status": 3}}, {"status": 3}),
        ({"data": [{"status": 2}]}, {"status": 2}),
        ([{"status": 1}], {"status": 1}),
        ({"status": 0}, {"status": 0}),
        ([], None),
        ({"data": []}, None),
        (["pending"], None),
        ("ok", None),
        (42, None),
        (None, None),
    ],
)
def test_first_record(body, expected):
    assert first_record(body) == expected


def test_intent_status_from_listed_response(gateway, gateway_stub):
    gateway_stub.add("GET", "/payment-intent/pi_abc123", json=[{"status": 3, "transaction_id": "trx_5"}])
    result = asyncio.run(gateway.get_payment_intent_status("pi_abc123"))
    assert result.status == "succeeded"


def test_non_object_responses_raise_gateway_error(gateway, gateway_stub):
    gateway_stub.add("GET", "/payment-intent/pi_abc123", json="ok")
    gateway_stub.add("GET", "/transactions", json=[42])
    gateway_stub.add("GET", "/transactions/pi_abc123", json=["pending"])

    with pytest.raises(PaymentGatewayError):
        asyncio.run(gateway.get_payment_intent_status("pi_abc123"))
    with pytest.raises(PaymentGatewayError, match="Transaction not found"):
        asyncio.run(gateway.get_transaction_by_order_number("NTT-ABC123"))


def test_gateway_defaults_to_production(monkeypatch):
    monkeypatch.delenv("BAYARCASH_SANDBOX", raising=False)
    assert importlib.reload(config).BAYARCASH_SANDBOX is False

    monkeypatch.setenv("BAYARCASH_SANDBOX", "TRUE")
    assert importlib.reload(config).BAYARCASH_SANDBOX is True

    assert BayarcashClient("k", "t", "s", sandbox=False).api_url == PRODUCTION_API_URL
