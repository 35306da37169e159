"""
Staff Routes
Staff directory endpoints used by payroll
"""
from fastapi import APIRouter, HTTPException, Depends, status
from typing import List, Optional

from schoolpay.api.deps import get_staff_service
from schoolpay.core.exceptions import NotFoundError
from schoolpay.models.staff import PaymentType, StaffCreate, StaffMember, StaffStatus, StaffUpdate
from schoolpay.services.staff import StaffService


router = APIRouter()


@router.get("/", response_model=List[StaffMember])
async def list_staff(
    status: Optional[StaffStatus] = None,
    payment_type: Optional[PaymentType] = None,
    service: StaffService = Depends(get_staff_service),
):
    """List staff, optionally filtered by status and payment type"""
    return await service.list_staff(status=status, payment_type=payment_type)


@router.post("/", response_model=StaffMember, status_code=status.HTTP_201_CREATED)
async def create_staff(data: StaffCreate, service: StaffService = Depends(get_staff_service)):
    """Add a staff member"""
    return await service.create_staff(data)


@router.get("/{staff_id}", response_model=StaffMember)
async def get_staff(staff_id: str, service: StaffService = Depends(get_staff_service)):
    """Get a staff member"""
    try:
        return await service.get_staff(staff_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.put("/{staff_id}", response_model=StaffMember)
async def update_staff(staff_id: str, data: StaffUpdate, service: StaffService = Depends(get_staff_service)):
    """Edit a staff profile"""
    try:
        return await service.update_staff(staff_id, data)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.delete("/{staff_id}", response_model=StaffMember)
async def deactivate_staff(staff_id: str, service: StaffService = Depends(get_staff_service)):
    """Deactivate a staff member (records are never removed)"""
    try:
        return await service.deactivate_staff(staff_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
