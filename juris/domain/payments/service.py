"""Payment service - Mobile money payment lifecycle"""

import logging
import uuid
from datetime import date, datetime
from typing import Optional

import httpx
from fastapi import HTTPException
from sqlalchemy.orm import Session

from ... import config
from ...models import Profile
from ...plan_limits import PLANS, get_plan_amount
from ...services.notification_service import send_notification
from ...services.payment_gateways import (
    PaymentGateway,
    PaymentGatewayError,
    get_available_payment_methods,
    get_payment_config,
)
from ...shared.formatting import format_amount
from ..subscriptions.payment_validation import PaymentValidationService
from .repository import PaymentRepository
from .schemas import PaymentCallback, PaymentInitiateRequest

logger = logging.getLogger(__name__)

SUPPORTED_METHODS = ("orange_money", "moov_money", "mtn_money", "wave")


def generate_transaction_id() -> str:
    return f"TXN-{datetime.utcnow().strftime('%Y%m%d%H%M%S')}-{uuid.uuid4().hex[:8].upper()}"


def amounts_match(amount: Optional[float], expected: Optional[float]) -> bool:
    """Amounts are compared to the centime"""
    if amount is None or expected is None:
        return False
    return round(float(amount), 2) == round(float(expected), 2)


class PaymentService:
    """Service layer for payment initiation, status and provider callbacks"""

    def __init__(self, db: Session, http_client: Optional[httpx.AsyncClient] = None):
        self.db = db
        self.repo = PaymentRepository()
        self.http_client = http_client

    def get_available_payment_methods(self) -> list[dict]:
        return get_available_payment_methods()

    async def initiate_payment(self, firm: Profile, request: PaymentInitiateRequest) -> dict:
        """
        Record a pending transaction and hand it to the provider.

        Provider failures mark the transaction failed and return success=False.
        """
        method = request.payment_method
        if method not in SUPPORTED_METHODS:
            raise HTTPException(status_code=400, detail=f"Unsupported payment method: {method}")

        if request.invoice_id and request.subscription_id:
            raise HTTPException(
                status_code=400, detail="A payment covers either an invoice or a subscription"
            )

        if request.subscription_id:
            if request.subscription_id not in PLANS:
                raise HTTPException(
                    status_code=400, detail=f"Unknown plan: {request.subscription_id}"
                )
            expected = get_plan_amount(request.subscription_id)
            if not amounts_match(request.amount, expected):
                raise HTTPException(
                    status_code=400,
                    detail=f"Amount must be {expected} for the {request.subscription_id} plan",
                )

        if request.invoice_id:
            invoice = self.repo.get_invoice(self.db, request.invoice_id, firm.id)
            if not invoice:
                raise HTTPException(status_code=404, detail="Invoice not found")
            if invoice.status in ("paid", "cancelled"):
                raise HTTPException(status_code=400, detail=f"Invoice is already {invoice.status}")
            if not amounts_match(request.amount, invoice.total_amount):
                raise HTTPException(
                    status_code=400,
                    detail=f"Amount must be {invoice.total_amount} for invoice {invoice.invoice_number}",
                )

        transaction_id = generate_transaction_id()
        currency = get_payment_config(method)["currency"]
        callback_url = f"{config.API_BASE_URL}/payments/callback/{method}"
        return_url = request.return_url or f"{config.FRONTEND_URL}/subscription"

        transaction = self.repo.create_transaction(
            self.db,
            firm.id,
            transaction_id=transaction_id,
            payment_method=method,
            amount=request.amount,
            currency=currency,
            status="pending",
            phone_number=request.phone_number,
            payer_name=request.payer_name,
            description=request.description,
            invoice_id=request.invoice_id,
            subscription_id=request.subscription_id,
            callback_url=callback_url,
            return_url=return_url,
        )

        gateway = PaymentGateway(method, http_client=self.http_client)
        try:
            result = await gateway.initiate(
                {
                    "amount": request.amount,
                    "currency": currency,
                    "phone_number": request.phone_number,
                    "description": request.description,
                    "reference": transaction_id,
                    "callback_url": callback_url,
                    "return_url": return_url,
                }
            )
        except PaymentGatewayError as e:
            logger.error(f"❌ {method} payment {transaction_id} failed: {e}")
            self.repo.update_transaction(
                self.db, transaction, status="failed", failure_reason=str(e)
            )
            return {
                "success": False,
                "transaction_id": transaction_id,
                "status": "failed",
                "message": str(e) or "Payment initiation failed",
            }

        self.repo.update_transaction(
            self.db,
            transaction,
            external_reference=result.get("external_reference"),
            payment_url=result.get("payment_url"),
            status=result.get("status", "pending"),
        )
        logger.info(f"💳 Payment {transaction_id} initiated via {method} for firm {firm.id}")
        return result

    def check_payment_status(self, transaction_id: str, firm: Profile) -> dict:
        """Stored status of a transaction"""
        transaction = self.repo.get_for_firm(self.db, transaction_id, firm.id)
        if not transaction:
            raise HTTPException(status_code=404, detail="Transaction not found")

        return {
            "transaction_id": transaction.transaction_id,
            "status": transaction.status,
            "amount": transaction.amount,
            "currency": transaction.currency,
            "phone_number": transaction.phone_number,
            "reference": transaction.external_reference or transaction.transaction_id,
            "processed_at": transaction.processed_at,
            "failure_reason": transaction.failure_reason,
        }

    def list_transactions(self, firm: Profile, status: Optional[str] = None, limit: int = 50):
        return self.repo.list_transactions(self.db, firm.id, status, limit)

    async def handle_callback(self, method: str, callback: PaymentCallback) -> dict:
        """
        Apply a provider status update.

        A completed subscription payment renews the plan; a completed invoice
        payment marks the invoice paid.
        """
        transaction = self.repo.get_by_transaction_id(self.db, callback.transaction_id)
        if not transaction:
            logger.warning(f"⚠️ Callback for unknown transaction {callback.transaction_id}")
            raise HTTPException(status_code=404, detail="Transaction not found")

        if transaction.payment_method != method:
            raise HTTPException(status_code=400, detail="Payment method mismatch")

        already_completed = transaction.status == "completed"
        completed = callback.status == "completed"

        self.repo.update_transaction(
            self.db,
            transaction,
            status=callback.status,
            external_reference=callback.external_reference or transaction.external_reference,
            processed_at=datetime.utcnow() if completed else None,
            failure_reason=callback.failure_reason,
            extra_data=callback.model_dump(mode="json", by_alias=True),
        )
        logger.info(f"📥 {method} callback: {transaction.transaction_id} -> {callback.status}")

        if completed and not already_completed:
            mismatch = self._amount_mismatch(transaction)
            if mismatch:
                logger.error(f"❌ Payment {transaction.transaction_id} not applied: {mismatch}")
                self.repo.update_transaction(self.db, transaction, failure_reason=mismatch)
                return {
                    "success": False,
                    "transaction_id": transaction.transaction_id,
                    "status": callback.status,
                }

            if transaction.subscription_id:
                await PaymentValidationService(self.db).process_successful_payment(
                    transaction.firm_id,
                    transaction.subscription_id,
                    transaction.transaction_id,
                    transaction.amount,
                )
            if transaction.invoice_id:
                await self._mark_invoice_paid(transaction)

        return {"success": True, "transaction_id": transaction.transaction_id, "status": callback.status}

    def _amount_mismatch(self, transaction) -> Optional[str]:
        """Reason a completed payment cannot be applied, None when it matches what it pays for"""
        if transaction.subscription_id:
            if transaction.subscription_id not in PLANS:
                return f"Unknown plan: {transaction.subscription_id}"
            expected = get_plan_amount(transaction.subscription_id)
            if not amounts_match(transaction.amount, expected):
                return f"Amount {transaction.amount} does not match the {transaction.subscription_id} price {expected}"

        if transaction.invoice_id:
            invoice = self.repo.get_invoice(self.db, transaction.invoice_id, transaction.firm_id)
            if invoice and not amounts_match(transaction.amount, invoice.total_amount):
                return f"Amount {transaction.amount} does not match invoice total {invoice.total_amount}"

        return None

    async def _mark_invoice_paid(self, transaction) -> None:
        invoice = self.repo.get_invoice(self.db, transaction.invoice_id, transaction.firm_id)
        if not invoice:
            logger.warning(f"⚠️ Invoice {transaction.invoice_id} not found for payment {transaction.transaction_id}")
            return

        invoice.status = "paid"
        invoice.paid_date = date.today()
        invoice.payment_method = transaction.payment_method
        invoice.payment_reference = transaction.external_reference or transaction.transaction_id
        self.db.commit()
        logger.info(f"✅ Invoice {invoice.invoice_number} marked paid")

        client = invoice.client
        if client and client.email:
            firm = self.db.query(Profile).filter(Profile.id == transaction.firm_id).first()
            try:
                await send_notification(
                    self.db,
                    transaction.firm_id,
                    "payment_received",
                    channels=["email"],
                    recipients=[{"email": client.email, "name": client.full_name}],
                    data={
                        "clientName": client.full_name,
                        "amount": f"{format_amount(transaction.amount)} {invoice.currency}",
                        "invoiceNumber": invoice.invoice_number,
                        "firmName": firm.firm_name if firm else "",
                    },
                )
            except Exception as e:
                logger.error(f"❌ Error sending payment receipt for {invoice.invoice_number}: {e}")
