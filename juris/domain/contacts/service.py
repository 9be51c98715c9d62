"""Contact service - Professional network of the firm"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import ProfessionalContact, Profile
from .repository import ContactRepository
from .schemas import ContactCreate, ContactUpdate

logger = logging.getLogger(__name__)


class ContactService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = ContactRepository()

    def get_contacts(
        self, firm: Profile, contact_type: Optional[str] = None, search: Optional[str] = None
    ) -> list[ProfessionalContact]:
        return self.repo.get_contacts(self.db, firm.id, contact_type, search)

    def get_contact(self, contact_id: str, firm: Profile) -> ProfessionalContact:
        contact = self.repo.get_contact_by_id(self.db, contact_id, firm.id)
        if not contact:
            raise HTTPException(status_code=404, detail="Contact not found")
        return contact

    def create_contact(self, data: ContactCreate, firm: Profile) -> ProfessionalContact:
        contact = self.repo.create_contact(self.db, firm.id, **data.model_dump())
        logger.info(f"✅ Contact {contact.id} ({contact.contact_type}) created for firm {firm.id}")
        return contact

    def update_contact(self, contact_id: str, data: ContactUpdate, firm: Profile) -> ProfessionalContact:
        contact = self.get_contact(contact_id, firm)
        return self.repo.update_contact(self.db, contact, **data.model_dump(exclude_unset=True))

    def delete_contact(self, contact_id: str, firm: Profile) -> dict:
        contact = self.get_contact(contact_id, firm)
        self.repo.delete_contact(self.db, contact)
        return {"message": "Contact deleted"}
