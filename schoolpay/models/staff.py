"""
Staff Model
Database schema for the staff directory consumed by payroll
"""
from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, EmailStr, Field
from beanie import Document


class StaffRole(str, Enum):
    """Employment role"""
    TEACHER = "teacher"
    ADMIN = "admin"
    SUPPORT = "support"


class StaffStatus(str, Enum):
    """Directory status; staff are deactivated, never deleted"""
    ACTIVE = "active"
    INACTIVE = "inactive"


class PaymentType(str, Enum):
    """How payment_rate is interpreted"""
    SALARY = "salary"          # monthly amount
    COMMISSION = "commission"  # percentage of revenue
    HEADCOUNT = "headcount"    # amount per student


class StaffMember(BaseModel):
    """Staff record as seen by the payroll pipeline"""
    id: Optional[str] = None
    name: str
    email: Optional[EmailStr] = None
    role: StaffRole = StaffRole.TEACHER
    status: StaffStatus = StaffStatus.ACTIVE
    payment_type: PaymentType = PaymentType.SALARY
    payment_rate: Optional[float] = None
    hire_date: Optional[datetime] = None
    position: Optional[str] = None
    cnss_number: Optional[str] = None
    cin: Optional[str] = None


class Staff(Document):
    """Staff document model"""
    name: str
    email: Optional[EmailStr] = None
    role: StaffRole = StaffRole.TEACHER
    status: StaffStatus = StaffStatus.ACTIVE
    payment_type: PaymentType = PaymentType.SALARY
    payment_rate: Optional[float] = None
    hire_date: Optional[datetime] = None
    position: Optional[str] = None
    cnss_number: Optional[str] = None
    cin: Optional[str] = None

    # Metadata
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "staff"
        indexes = [
            "status",
            "payment_type",
            "role",
        ]

    def to_member(self) -> StaffMember:
        data = self.model_dump(exclude={"id", "revision_id", "created_at", "updated_at"})
        return StaffMember(id=str(self.id), **data)


class StaffCreate(BaseModel):
    """Schema for adding a staff member"""
    name: str
    email: Optional[EmailStr] = None
    role: StaffRole = StaffRole.TEACHER
    status: StaffStatus = StaffStatus.ACTIVE
    payment_type: PaymentType = PaymentType.SALARY
    payment_rate: Optional[float] = Field(default=None, ge=0)
    hire_date: Optional[datetime] = None
    position: Optional[str] = None
    cnss_number: Optional[str] = None
    cin: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "name": "Amina Benali",
                "email": "amina.benali@school.ma",
                "role": "teacher",
                "status": "active",
                "payment_type": "salary",
                "payment_rate": 10000,
                "hire_date": "2024-09-01",
                "position": "Mathematics Teacher"
            }
        }


class StaffUpdate(BaseModel):
    """Schema for editing a staff profile"""
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    role: Optional[StaffRole] = None
    status: Optional[StaffStatus] = None
    payment_type: Optional[PaymentType] = None
    payment_rate: Optional[float] = Field(default=None, ge=0)
    hire_date: Optional[datetime] = None
    position: Optional[str] = None
    cnss_number: Optional[str] = None
    cin: Optional[str] = None
