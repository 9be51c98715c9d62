"""Case service - Business logic for legal cases"""

import logging
from datetime import date, datetime
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...access_guard import ensure_channels_allowed
from ...models import Case, Profile
from ...services.notification_service import send_case_update
from .repository import CaseRepository
from .schemas import CLOSED_STATUSES, CaseCreate, CaseNotifyRequest, CaseUpdate

logger = logging.getLogger(__name__)


class CaseService:
    """Service layer for case business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = CaseRepository()

    def get_cases(
        self,
        firm: Profile,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        client_id: Optional[str] = None,
        search: Optional[str] = None,
    ) -> list[Case]:
        return self.repo.get_cases(self.db, firm.id, status, priority, client_id, search)

    def get_case(self, case_id: str, firm: Profile) -> Case:
        case = self.repo.get_case_by_id(self.db, case_id, firm.id)
        if not case:
            raise HTTPException(status_code=404, detail="Case not found")
        return case

    def generate_case_number(self, year: Optional[int] = None) -> str:
        """Next CASE-{year}-{NNNN} number"""
        year = year or datetime.utcnow().year
        prefix = f"CASE-{year}-"
        last = self.repo.get_last_case_number(self.db, prefix)
        sequence = int(last[len(prefix):]) + 1 if last else 1
        return f"{prefix}{sequence:04d}"

    def _check_client(self, client_id: Optional[str], firm: Profile) -> None:
        if client_id and not self.repo.get_client(self.db, client_id, firm.id):
            raise HTTPException(status_code=400, detail="Client not found for this firm")

    def create_case(self, data: CaseCreate, firm: Profile) -> Case:
        """Open a case. Quota is enforced by the create_case guard."""
        self._check_client(data.client_id, firm)

        case_data = data.model_dump()
        case_data["case_number"] = self.generate_case_number()
        case_data["start_date"] = data.start_date or date.today()

        case = self.repo.create_case(self.db, firm.id, **case_data)
        logger.info(f"✅ Case {case.case_number} created for firm {firm.id}")
        return case

    def update_case(self, case_id: str, data: CaseUpdate, firm: Profile) -> Case:
        case = self.get_case(case_id, firm)
        updates = data.model_dump(exclude_unset=True)
        if "client_id" in updates:
            self._check_client(updates["client_id"], firm)

        # Closing a case stamps its end date
        if updates.get("status") in CLOSED_STATUSES and not case.actual_end_date:
            updates.setdefault("actual_end_date", date.today())

        return self.repo.update_case(self.db, case, **updates)

    def delete_case(self, case_id: str, firm: Profile) -> dict:
        case = self.get_case(case_id, firm)
        self.repo.delete_case(self.db, case)
        return {"message": "Case deleted"}

    async def notify_client(self, case_id: str, data: CaseNotifyRequest, firm: Profile) -> dict:
        """Send a case update to the client of the case"""
        case = self.get_case(case_id, firm)
        client = case.client
        if not client:
            raise HTTPException(status_code=400, detail="Case has no client")
        if not client.email and not client.phone:
            raise HTTPException(status_code=400, detail="Client has no email or phone")

        ensure_channels_allowed(self.db, firm.id, data.channels)

        return await send_case_update(
            self.db,
            firm.id,
            client.email,
            client.phone,
            client.full_name,
            case.title,
            data.update,
            firm.firm_name,
            case_id=case.id,
            channels=data.channels,
        )
