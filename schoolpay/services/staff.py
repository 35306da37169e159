"""
Staff Service
Thin staff directory that feeds payroll generation
"""
import logging
from typing import List, Optional

from schoolpay.core.exceptions import NotFoundError
from schoolpay.models.staff import PaymentType, StaffCreate, StaffMember, StaffStatus, StaffUpdate
from schoolpay.services.repositories import StaffRepository

logger = logging.getLogger(__name__)


class StaffService:
    def __init__(self, repository: StaffRepository):
        self.repository = repository

    async def list_staff(
        self,
        status: Optional[StaffStatus] = None,
        payment_type: Optional[PaymentType] = None,
    ) -> List[StaffMember]:
        return await self.repository.list(status=status, payment_type=payment_type)

    async def get_staff(self, staff_id: str) -> StaffMember:
        staff = await self.repository.get(staff_id)
        if staff is None:
            raise NotFoundError(f"Staff member {staff_id} not found")
        return staff

    async def create_staff(self, data: StaffCreate) -> StaffMember:
        staff = await self.repository.create(data.model_dump())
        logger.info(f"Created staff: {staff.name} ({staff.id})")
        return staff

    async def update_staff(self, staff_id: str, data: StaffUpdate) -> StaffMember:
        changes = data.model_dump(exclude_unset=True)
        staff = await self.repository.update(staff_id, changes)
        if staff is None:
            raise NotFoundError(f"Staff member {staff_id} not found")
        logger.info(f"Updated staff {staff_id}: {sorted(changes)}")
        return staff

    async def deactivate_staff(self, staff_id: str) -> StaffMember:
        """Staff are never hard-deleted; they are marked inactive."""
        return await self.update_staff(staff_id, StaffUpdate(status=StaffStatus.INACTIVE))
