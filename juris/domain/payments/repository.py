"""Payment repository - Database operations for payment transactions"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models_invoice import Invoice
from ...models_payment import PaymentTransaction


class PaymentRepository:
    """Repository for payment transaction database operations"""

    @staticmethod
    def create_transaction(db: Session, firm_id: str, **data) -> PaymentTransaction:
        transaction = PaymentTransaction(firm_id=firm_id, **data)
        db.add(transaction)
        db.commit()
        db.refresh(transaction)
        return transaction

    @staticmethod
    def get_by_transaction_id(db: Session, transaction_id: str) -> Optional[PaymentTransaction]:
        return (
            db.query(PaymentTransaction)
            .filter(PaymentTransaction.transaction_id == transaction_id)
            .first()
        )

    @staticmethod
    def get_for_firm(db: Session, transaction_id: str, firm_id: str) -> Optional[PaymentTransaction]:
        return (
            db.query(PaymentTransaction)
            .filter(
                PaymentTransaction.transaction_id == transaction_id,
                PaymentTransaction.firm_id == firm_id,
            )
            .first()
        )

    @staticmethod
    def list_transactions(
        db: Session, firm_id: str, status: Optional[str] = None, limit: int = 50
    ) -> list[PaymentTransaction]:
        query = db.query(PaymentTransaction).filter(PaymentTransaction.firm_id == firm_id)
        if status:
            query = query.filter(PaymentTransaction.status == status)
        return query.order_by(PaymentTransaction.created_at.desc()).limit(limit).all()

    @staticmethod
    def update_transaction(db: Session, transaction: PaymentTransaction, **updates) -> PaymentTransaction:
        for key, value in updates.items():
            setattr(transaction, key, value)
        db.commit()
        db.refresh(transaction)
        return transaction

    @staticmethod
    def get_invoice(db: Session, invoice_id: str, firm_id: str) -> Optional[Invoice]:
        return db.query(Invoice).filter(Invoice.id == invoice_id, Invoice.firm_id == firm_id).first()
