"""Contact repository - Database operations for professional contacts"""

from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from ...models import ProfessionalContact


class ContactRepository:
    """Repository for professional contact database operations"""

    @staticmethod
    def get_contacts(
        db: Session,
        firm_id: str,
        contact_type: Optional[str] = None,
        search: Optional[str] = None,
    ) -> list[ProfessionalContact]:
        query = db.query(ProfessionalContact).filter(ProfessionalContact.firm_id == firm_id)
        if contact_type:
            query = query.filter(ProfessionalContact.contact_type == contact_type)
        if search:
            pattern = f"%{search}%"
            query = query.filter(
                or_(
                    ProfessionalContact.first_name.ilike(pattern),
                    ProfessionalContact.last_name.ilike(pattern),
                    ProfessionalContact.company_name.ilike(pattern),
                    ProfessionalContact.speciality.ilike(pattern),
                )
            )
        return query.order_by(ProfessionalContact.last_name.asc()).all()

    @staticmethod
    def get_contact_by_id(db: Session, contact_id: str, firm_id: str) -> Optional[ProfessionalContact]:
        return (
            db.query(ProfessionalContact)
            .filter(ProfessionalContact.id == contact_id, ProfessionalContact.firm_id == firm_id)
            .first()
        )

    @staticmethod
    def create_contact(db: Session, firm_id: str, **contact_data) -> ProfessionalContact:
        contact = ProfessionalContact(firm_id=firm_id, **contact_data)
        db.add(contact)
        db.commit()
        db.refresh(contact)
        return contact

    @staticmethod
    def update_contact(db: Session, contact: ProfessionalContact, **updates) -> ProfessionalContact:
        for key, value in updates.items():
            if hasattr(contact, key):
                setattr(contact, key, value)
        db.commit()
        db.refresh(contact)
        return contact

    @staticmethod
    def delete_contact(db: Session, contact: ProfessionalContact) -> None:
        db.delete(contact)
        db.commit()
