"""
Payroll Routes
Payroll run generation, editing and confirmation
"""
from fastapi import APIRouter, HTTPException, Depends, status
from typing import List, Optional

from schoolpay.api.deps import get_current_user_id, get_payroll_service
from schoolpay.core.exceptions import InvalidAmountError, NotFoundError, PersistenceError, ValidationError
from schoolpay.models.payroll import (
    AddItemRequest,
    EditItemRequest,
    GeneratePayrollRequest,
    GenerationFailure,
    ItemType,
    Payroll,
    PayrollSummary,
    PayrollUpdate,
    Payslip,
)
from schoolpay.services.payroll import PayrollService

router = APIRouter()

GENERATION_FAILURE_STATUS = {
    GenerationFailure.INVALID_PERIOD: 422,
    GenerationFailure.RATE_LIMITED: status.HTTP_429_TOO_MANY_REQUESTS,
    GenerationFailure.ALREADY_GENERATED: status.HTTP_409_CONFLICT,
    GenerationFailure.NO_ELIGIBLE_STAFF: 422,
    GenerationFailure.INVALID_DATA: 422,
    GenerationFailure.UNEXPECTED: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def _raise_for(error: Exception):
    """Translate domain errors into HTTP errors"""
    if isinstance(error, NotFoundError):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(error))
    if isinstance(error, InvalidAmountError):
        raise HTTPException(status_code=422, detail=str(error))
    if isinstance(error, ValidationError):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(error))
    if isinstance(error, PersistenceError):
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(error))
    raise error


@router.post("/generate", response_model=Payroll, status_code=status.HTTP_201_CREATED)
async def generate_payroll(
    request: GeneratePayrollRequest,
    service: PayrollService = Depends(get_payroll_service),
    user_id: Optional[str] = Depends(get_current_user_id),
):
    """Generate the payroll run for a period over all active salaried staff"""
    result = await service.generate_payroll(request.period, user_id=user_id)
    if not result.success:
        raise HTTPException(status_code=GENERATION_FAILURE_STATUS[result.code], detail=result.reason)
    return result.payroll


@router.get("/", response_model=List[Payroll])
async def list_payrolls(service: PayrollService = Depends(get_payroll_service)):
    """Get all payroll runs, newest first"""
    try:
        return await service.list_payrolls()
    except PersistenceError as e:
        _raise_for(e)


@router.get("/{payroll_id}", response_model=Payroll)
async def get_payroll(payroll_id: str, service: PayrollService = Depends(get_payroll_service)):
    """Get a payroll run"""
    try:
        payroll = await service.get_payroll(payroll_id)
    except PersistenceError as e:
        _raise_for(e)
    if not payroll:
        raise HTTPException(status_code=404, detail="Payroll not found")
    return payroll


@router.get("/{payroll_id}/summary", response_model=PayrollSummary)
async def get_payroll_summary(payroll_id: str, service: PayrollService = Depends(get_payroll_service)):
    """Run totals for the summary screen"""
    try:
        return await service.get_summary(payroll_id)
    except (NotFoundError, PersistenceError) as e:
        _raise_for(e)


@router.get("/{payroll_id}/payslips/{staff_id}", response_model=Payslip)
async def get_payslip(payroll_id: str, staff_id: str, service: PayrollService = Depends(get_payroll_service)):
    """Get one staff member's payslip"""
    try:
        return await service.get_payslip(payroll_id, staff_id)
    except (NotFoundError, PersistenceError) as e:
        _raise_for(e)


@router.put("/{payroll_id}", response_model=Payroll)
async def update_payroll(
    payroll_id: str,
    update: PayrollUpdate,
    service: PayrollService = Depends(get_payroll_service),
    user_id: Optional[str] = Depends(get_current_user_id),
):
    """Save edits; payslips are recalculated before they are stored"""
    try:
        await service.update_payroll(payroll_id, update, user_id=user_id)
        return await service.get_payroll(payroll_id)
    except (NotFoundError, ValidationError, PersistenceError) as e:
        _raise_for(e)


@router.post("/{payroll_id}/recalculate", response_model=Payroll)
async def recalculate_payroll(payroll_id: str, service: PayrollService = Depends(get_payroll_service)):
    """Recalculate every payslip in the run without saving"""
    try:
        return await service.recalculate_payroll(payroll_id)
    except (NotFoundError, PersistenceError) as e:
        _raise_for(e)


@router.post("/{payroll_id}/confirm", response_model=Payroll)
async def confirm_payroll(
    payroll_id: str,
    service: PayrollService = Depends(get_payroll_service),
    user_id: Optional[str] = Depends(get_current_user_id),
):
    """Mark a payroll run as paid"""
    try:
        return await service.confirm_payment(payroll_id, user_id=user_id)
    except (NotFoundError, PersistenceError) as e:
        _raise_for(e)


@router.delete("/{payroll_id}")
async def delete_payroll(
    payroll_id: str,
    service: PayrollService = Depends(get_payroll_service),
    user_id: Optional[str] = Depends(get_current_user_id),
):
    """Delete a payroll run"""
    try:
        await service.delete_payroll(payroll_id, user_id=user_id)
    except (NotFoundError, PersistenceError) as e:
        _raise_for(e)
    return {"message": "Payroll deleted"}


@router.post("/{payroll_id}/payslips/{staff_id}/items", response_model=Payroll)
async def add_payslip_item(
    payroll_id: str,
    staff_id: str,
    request: AddItemRequest,
    service: PayrollService = Depends(get_payroll_service),
    user_id: Optional[str] = Depends(get_current_user_id),
):
    """Append a zero-amount custom earning or deduction"""
    try:
        return await service.add_payslip_item(payroll_id, staff_id, request.type, request.label, user_id=user_id)
    except (NotFoundError, PersistenceError) as e:
        _raise_for(e)


@router.patch("/{payroll_id}/payslips/{staff_id}/items/{item_id}", response_model=Payroll)
async def edit_payslip_item(
    payroll_id: str,
    staff_id: str,
    item_id: str,
    request: EditItemRequest,
    service: PayrollService = Depends(get_payroll_service),
    user_id: Optional[str] = Depends(get_current_user_id),
):
    """Change the label or amount of an item"""
    try:
        return await service.edit_payslip_item(
            payroll_id, staff_id, request.type, item_id, request.field, request.value, user_id=user_id
        )
    except (NotFoundError, ValidationError, PersistenceError) as e:
        _raise_for(e)


@router.delete("/{payroll_id}/payslips/{staff_id}/items/{item_id}", response_model=Payroll)
async def remove_payslip_item(
    payroll_id: str,
    staff_id: str,
    item_id: str,
    type: ItemType,
    service: PayrollService = Depends(get_payroll_service),
    user_id: Optional[str] = Depends(get_current_user_id),
):
    """Remove an item from a payslip"""
    try:
        return await service.remove_payslip_item(payroll_id, staff_id, type, item_id, user_id=user_id)
    except (NotFoundError, PersistenceError) as e:
        _raise_for(e)
