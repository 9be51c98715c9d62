"""
Mobile money payment gateways
Request builders for Orange Money, Moov Money, MTN Mobile Money and Wave
"""

import logging
import time
from typing import Optional

import httpx

from .. import config

logger = logging.getLogger(__name__)

PAYMENT_METHODS = ("orange_money", "moov_money", "mtn_money", "wave", "bank_transfer")

MOOV_API_VERSION = "v2024.01.00"
MTN_SERVICE_PROVIDER_NAME = "JURIS Law Firm"


class PaymentGatewayError(Exception):
    """Raised when a provider rejects or cannot process a payment request"""


def get_payment_config(method: str) -> dict:
    """Base URL, currency and credentials for a provider, read from the environment"""
    configs = {
        "orange_money": {
            "base_url": "https://api.orange-sonatel.com",
            "currency": "XOF",
            "api_key": config.ORANGE_MONEY_API_KEY,
            "api_secret": config.ORANGE_MONEY_API_SECRET,
            "merchant_id": config.ORANGE_MONEY_MERCHANT_ID,
        },
        "moov_money": {
            "base_url": "https://api.moovio.com",
            "currency": "USD",
            "api_key": config.MOOV_PUBLIC_KEY,
            "api_secret": config.MOOV_SECRET_KEY,
            "merchant_id": config.MOOV_ACCOUNT_ID,
        },
        "mtn_money": {
            "base_url": "https://sandbox.momodeveloper.mtn.com",
            "currency": "EUR",
            "api_key": config.MTN_MONEY_PRIMARY_KEY,
            "api_secret": config.MTN_MONEY_SECONDARY_KEY,
            "merchant_id": None,
        },
        "wave": {
            "base_url": "https://api.wave.com",
            "currency": "XOF",
            "api_key": config.WAVE_API_KEY,
            "api_secret": config.WAVE_API_SECRET,
            "merchant_id": config.WAVE_MERCHANT_ID,
        },
        "bank_transfer": {
            "base_url": "",
            "currency": "XOF",
            "api_key": None,
            "api_secret": None,
            "merchant_id": None,
        },
    }
    if method not in configs:
        raise PaymentGatewayError(f"Unsupported payment method: {method}")
    return configs[method]


def _demo_reference(prefix: str) -> str:
    return f"{prefix}_{int(time.time() * 1000)}"


def build_orange_payload(request: dict, merchant_id: Optional[str]) -> dict:
    return {
        "merchant_key": merchant_id,
        "currency": request["currency"],
        "order_id": request["reference"],
        "amount": request["amount"],
        "return_url": request.get("return_url"),
        "cancel_url": request.get("callback_url"),
        "notif_url": request.get("callback_url"),
        "lang": "fr",
        "reference": request["reference"],
    }


def build_moov_payload(request: dict) -> dict:
    return {
        "source": {"paymentMethodID": "moov-wallet"},
        "destination": {"paymentMethodID": request["phone_number"]},
        "amount": {"currency": "USD", "value": round(request["amount"] * 100)},
        "description": request["description"],
        "metadata": {
            "reference": request["reference"],
            "phoneNumber": request["phone_number"],
        },
    }


def build_mtn_payload(request: dict) -> dict:
    return {
        "externalTransactionId": request["reference"],
        "money": {"amount": str(request["amount"]), "currency": "EUR"},
        "customerReference": request["phone_number"].replace("+", ""),
        "serviceProviderUserName": MTN_SERVICE_PROVIDER_NAME,
        "receiverMessage": request["description"],
        "senderNote": f"Payment for {request['description']}",
    }


def build_wave_payload(request: dict) -> dict:
    return {
        "amount": request["amount"],
        "currency": request["currency"],
        "checkout_intent": request["reference"],
        "error_url": request.get("callback_url"),
        "success_url": request.get("return_url"),
        "mobile": request["phone_number"],
    }


def _error_detail(response: httpx.Response, provider: str) -> str:
    try:
        data = response.json()
    except ValueError:
        return f"{provider} API Error: {response.status_code} - {response.text[:200]}"
    if isinstance(data, dict) and data.get("message"):
        return data["message"]
    return f"{provider} API Error: {response.status_code} - {data}"


class PaymentGateway:
    """
    One gateway client per payment method.

    Each initiate call returns a dict with success, transaction_id, external_reference,
    status, message and payment_url. Provider failures raise PaymentGatewayError.
    """

    def __init__(self, method: str, http_client: Optional[httpx.AsyncClient] = None):
        self.method = method
        self.config = get_payment_config(method)
        self.http_client = http_client

    @property
    def real_payments_enabled(self) -> bool:
        return config.ENABLE_REAL_PAYMENTS

    async def _post(self, url: str, **kwargs) -> httpx.Response:
        client = self.http_client or httpx.AsyncClient()
        try:
            return await client.post(url, timeout=30.0, **kwargs)
        except httpx.HTTPError as e:
            raise PaymentGatewayError(f"Network error: {e}") from e
        finally:
            if self.http_client is None:
                await client.aclose()

    async def initiate(self, request: dict) -> dict:
        """
        Start a payment.

        Args:
            request: amount, currency, phone_number, description, reference and
                optional callback_url / return_url
        """
        handlers = {
            "orange_money": self._initiate_orange_money,
            "moov_money": self._initiate_moov_money,
            "mtn_money": self._initiate_mtn_money,
            "wave": self._initiate_wave,
        }
        handler = handlers.get(self.method)
        if handler is None:
            raise PaymentGatewayError(f"Unsupported payment method: {self.method}")

        logger.info(f"💳 Initiating {self.method} payment {request['reference']}")
        return await handler(request)

    def _response(
        self,
        request: dict,
        message: str,
        external_reference: Optional[str] = None,
        payment_url: Optional[str] = None,
    ) -> dict:
        return {
            "success": True,
            "transaction_id": request["reference"],
            "external_reference": external_reference,
            "status": "pending",
            "message": message,
            "payment_url": payment_url,
        }

    async def _initiate_orange_money(self, request: dict) -> dict:
        if not self.real_payments_enabled:
            return self._response(
                request, "Paiement Orange Money initié (mode démo).", _demo_reference("ORANGE")
            )

        if not self.config["api_key"] or not self.config["merchant_id"]:
            raise PaymentGatewayError(
                "Orange Money credentials not configured. Set ORANGE_MONEY_API_KEY and "
                "ORANGE_MONEY_MERCHANT_ID."
            )

        response = await self._post(
            f"{self.config['base_url']}/webpayment/v1/webpayment",
            json=build_orange_payload(request, self.config["merchant_id"]),
            headers={"Authorization": f"Bearer {self.config['api_key']}"},
        )
        if not response.is_success:
            raise PaymentGatewayError(_error_detail(response, "Orange Money"))

        data = response.json()
        return self._response(
            request,
            data.get("message") or "Payment initiated",
            data.get("payment_token"),
            data.get("payment_url"),
        )

    async def _initiate_moov_money(self, request: dict) -> dict:
        if not self.real_payments_enabled or not self.config["api_key"]:
            return self._response(
                request, "Paiement Moov Money initié (mode démo).", _demo_reference("MOOV")
            )

        if not self.config["merchant_id"]:
            raise PaymentGatewayError("Moov account not configured. Set MOOV_ACCOUNT_ID.")

        response = await self._post(
            f"{self.config['base_url']}/accounts/{self.config['merchant_id']}/transfers",
            json=build_moov_payload(request),
            headers={
                "Authorization": f"Bearer {self.config['api_key']}",
                "x-moov-version": MOOV_API_VERSION,
                "x-idempotency-key": request["reference"],
            },
        )
        if not response.is_success:
            raise PaymentGatewayError(_error_detail(response, "Moov"))

        data = response.json()
        return self._response(
            request, "Paiement Moov Money initié avec succès.", data.get("transferID")
        )

    async def _get_mtn_access_token(self) -> str:
        response = await self._post(
            f"{self.config['base_url']}/collection/token/",
            auth=(self.config["api_key"], self.config["api_secret"] or ""),
            headers={"Ocp-Apim-Subscription-Key": self.config["api_key"]},
        )
        if not response.is_success:
            raise PaymentGatewayError(
                f"MTN Token Error: {response.status_code} - {response.text[:200]}"
            )
        return response.json().get("access_token", "")

    async def _initiate_mtn_money(self, request: dict) -> dict:
        if not self.real_payments_enabled or not self.config["api_key"]:
            return self._response(
                request, "Paiement MTN Money initié (mode démo).", _demo_reference("MTN")
            )

        access_token = await self._get_mtn_access_token()
        response = await self._post(
            f"{self.config['base_url']}/collection/v2_0/payment",
            json=build_mtn_payload(request),
            headers={
                "Authorization": f"Bearer {access_token}",
                "X-Reference-Id": request["reference"],
                "X-Target-Environment": config.MTN_TARGET_ENVIRONMENT,
                "Ocp-Apim-Subscription-Key": self.config["api_key"],
                "X-Callback-Url": request.get("callback_url") or "",
            },
        )
        # 202 Accepted means the payment request was queued
        if response.status_code != 202:
            raise PaymentGatewayError(_error_detail(response, "MTN"))

        return self._response(request, "Paiement MTN Money initié avec succès.")

    async def _initiate_wave(self, request: dict) -> dict:
        if not self.real_payments_enabled:
            return self._response(
                request,
                "Paiement Wave initié. Ouvrez votre app Wave.",
                _demo_reference("WAVE"),
                f"https://checkout.wave.com/{request['reference']}",
            )

        if not self.config["api_key"]:
            raise PaymentGatewayError("Wave credentials not configured. Set WAVE_API_KEY.")

        response = await self._post(
            f"{self.config['base_url']}/checkout/sessions",
            json=build_wave_payload(request),
            headers={"Authorization": f"Bearer {self.config['api_key']}"},
        )
        if not response.is_success:
            raise PaymentGatewayError(_error_detail(response, "Wave"))

        data = response.json()
        return self._response(
            request, "Payment session created", data.get("id"), data.get("checkout_url")
        )


def get_available_payment_methods() -> list[dict]:
    return [
        {
            "method": "orange_money",
            "name": "Orange Money",
            "description": "Paiement mobile Orange Money",
            "countries": ["Sénégal", "Mali", "Burkina Faso", "Niger", "Guinée"],
            "currency": "XOF",
        },
        {
            "method": "moov_money",
            "name": "Moov Money",
            "description": "Paiement mobile Moov Money",
            "countries": ["Côte d'Ivoire", "Bénin", "Togo"],
            "currency": "USD",
        },
        {
            "method": "mtn_money",
            "name": "MTN Mobile Money",
            "description": "Paiement mobile MTN Money",
            "countries": ["Ghana", "Uganda", "Rwanda", "Zambia"],
            "currency": "EUR",
        },
        {
            "method": "wave",
            "name": "Wave",
            "description": "Paiement mobile Wave",
            "countries": ["Sénégal", "Côte d'Ivoire", "Mali", "Burkina Faso"],
            "currency": "XOF",
        },
    ]
