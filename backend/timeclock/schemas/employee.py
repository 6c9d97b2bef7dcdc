from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class EmployeeBase(BaseModel):
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    birthday: Optional[str] = None
    photo_url: Optional[str] = None


class EmployeeCreate(EmployeeBase):
    pin: str = Field(..., min_length=4, max_length=6)
    is_admin: bool = False
    is_active: bool = True


class EmployeeUpdate(BaseModel):
    name: Optional[str] = None
    pin: Optional[str] = Field(None, min_length=4, max_length=6)
    email: Optional[str] = None
    phone: Optional[str] = None
    birthday: Optional[str] = None
    photo_url: Optional[str] = None
    is_active: Optional[bool] = None
    is_admin: Optional[bool] = None


class ProfileUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    birthday: Optional[str] = None
    photo_url: Optional[str] = None
    current_pin: Optional[str] = None
    new_pin: Optional[str] = None


class Employee(EmployeeBase):
    id: int
    is_active: bool
    is_admin: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class EmployeeWithPin(Employee):
    """Admin view; the kiosk never returns PINs to employees."""
    pin: str


class LoginRequest(BaseModel):
    pin: str


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    employee: Employee
