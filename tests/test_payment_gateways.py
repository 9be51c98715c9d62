import asyncio
import json

import httpx
import pytest

from juris import config
from juris.services.payment_gateways import (
    PaymentGateway,
    PaymentGatewayError,
    build_moov_payload,
    build_mtn_payload,
    get_available_payment_methods,
    get_payment_config,
)

REQUEST = {
    "amount": 35000,
    "currency": "XOF",
    "phone_number": "+221771234567",
    "description": "Abonnement JURIS Premium - 1 mois",
    "reference": "TXN-20250301120000-ABCDEF12",
    "callback_url": "http://localhost:8000/payments/callback/wave",
    "return_url": "http://localhost:5173/subscription",
}


def _gateway(method: str, handler) -> PaymentGateway:
    return PaymentGateway(method, http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))


@pytest.fixture
def real_payments(monkeypatch):
    monkeypatch.setattr(config, "ENABLE_REAL_PAYMENTS", True)


# ============================================================================
# DEMO MODE
# ============================================================================


class TestDemoMode:
    @pytest.mark.parametrize("method", ["orange_money", "moov_money", "mtn_money", "wave"])
    def test_demo_payment_is_pending(self, method):
        result = asyncio.run(PaymentGateway(method).initiate(REQUEST))

        assert result["success"] is True
        assert result["status"] == "pending"
        assert result["transaction_id"] == REQUEST["reference"]
        assert "démo" in result["message"] or "Wave" in result["message"]

    def test_wave_demo_has_checkout_url(self):
        result = asyncio.run(PaymentGateway("wave").initiate(REQUEST))
        assert result["payment_url"] == f"https://checkout.wave.com/{REQUEST['reference']}"

    def test_moov_without_key_stays_in_demo(self, real_payments, monkeypatch):
        monkeypatch.setattr(config, "MOOV_PUBLIC_KEY", None)
        result = asyncio.run(PaymentGateway("moov_money").initiate(REQUEST))
        assert result["external_reference"].startswith("MOOV_")

    def test_unsupported_method(self):
        with pytest.raises(PaymentGatewayError):
            PaymentGateway("bitcoin")

    def test_bank_transfer_cannot_be_initiated(self):
        with pytest.raises(PaymentGatewayError):
            asyncio.run(PaymentGateway("bank_transfer").initiate(REQUEST))


# ============================================================================
# REAL MODE
# ============================================================================


class TestRealMode:
    def test_wave_checkout_session(self, real_payments, monkeypatch):
        monkeypatch.setattr(config, "WAVE_API_KEY", "wave-key")
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["auth"] = request.headers["Authorization"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(
                200, json={"id": "cos-123", "checkout_url": "https://pay.wave.com/c/cos-123"}
            )

        result = asyncio.run(_gateway("wave", handler).initiate(REQUEST))

        assert seen["url"] == "https://api.wave.com/checkout/sessions"
        assert seen["auth"] == "Bearer wave-key"
        assert seen["body"]["checkout_intent"] == REQUEST["reference"]
        assert result["external_reference"] == "cos-123"
        assert result["payment_url"] == "https://pay.wave.com/c/cos-123"

    def test_wave_without_credentials(self, real_payments, monkeypatch):
        monkeypatch.setattr(config, "WAVE_API_KEY", None)
        with pytest.raises(PaymentGatewayError, match="WAVE_API_KEY"):
            asyncio.run(PaymentGateway("wave").initiate(REQUEST))

    def test_provider_error_message(self, real_payments, monkeypatch):
        monkeypatch.setattr(config, "ORANGE_MONEY_API_KEY", "om-key")
        monkeypatch.setattr(config, "ORANGE_MONEY_MERCHANT_ID", "merchant-1")

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(400, json={"message": "Solde insuffisant"})

        with pytest.raises(PaymentGatewayError, match="Solde insuffisant"):
            asyncio.run(_gateway("orange_money", handler).initiate(REQUEST))

    def test_mtn_accepted(self, real_payments, monkeypatch):
        monkeypatch.setattr(config, "MTN_MONEY_PRIMARY_KEY", "mtn-key")
        monkeypatch.setattr(config, "MTN_MONEY_SECONDARY_KEY", "mtn-secret")
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request.url.path)
            if request.url.path.endswith("/token/"):
                return httpx.Response(200, json={"access_token": "token-abc"})
            assert request.headers["Authorization"] == "Bearer token-abc"
            assert request.headers["X-Reference-Id"] == REQUEST["reference"]
            return httpx.Response(202)

        result = asyncio.run(_gateway("mtn_money", handler).initiate(REQUEST))

        assert calls == ["/collection/token/", "/collection/v2_0/payment"]
        assert result["success"] is True
        assert result["status"] == "pending"

    def test_mtn_rejected(self, real_payments, monkeypatch):
        monkeypatch.setattr(config, "MTN_MONEY_PRIMARY_KEY", "mtn-key")

        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path.endswith("/token/"):
                return httpx.Response(200, json={"access_token": "token-abc"})
            return httpx.Response(500, text="internal error")

        with pytest.raises(PaymentGatewayError, match="MTN API Error: 500"):
            asyncio.run(_gateway("mtn_money", handler).initiate(REQUEST))

    def test_network_error(self, real_payments, monkeypatch):
        monkeypatch.setattr(config, "WAVE_API_KEY", "wave-key")

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(PaymentGatewayError, match="Network error"):
            asyncio.run(_gateway("wave", handler).initiate(REQUEST))


# ============================================================================
# PAYLOADS
# ============================================================================


class TestPayloads:
    def test_moov_amount_in_cents(self):
        payload = build_moov_payload(REQUEST)
        assert payload["amount"] == {"currency": "USD", "value": 3500000}
        assert payload["destination"]["paymentMethodID"] == REQUEST["phone_number"]

    def test_mtn_customer_reference_without_plus(self):
        payload = build_mtn_payload(REQUEST)
        assert payload["customerReference"] == "221771234567"
        assert payload["money"] == {"amount": "35000", "currency": "EUR"}

    def test_currencies(self):
        assert get_payment_config("orange_money")["currency"] == "XOF"
        assert get_payment_config("moov_money")["currency"] == "USD"
        assert get_payment_config("mtn_money")["currency"] == "EUR"

    def test_available_methods(self):
        methods = [m["method"] for m in get_available_payment_methods()]
        assert methods == ["orange_money", "moov_money", "mtn_money", "wave"]
