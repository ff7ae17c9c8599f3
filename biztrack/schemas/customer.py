from pydantic import BaseModel, EmailStr, Field
from datetime import datetime


class CustomerCreate(BaseModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    phone: str = Field(..., min_length=1)
    address: str | None = None
    city: str | None = None
    notes: str | None = None


class CustomerUpdate(BaseModel):
    name: str | None = None
    email: EmailStr | None = None
    phone: str | None = None
    address: str | None = None
    city: str | None = None
    notes: str | None = None


class CustomerResponse(BaseModel):
    id: int
    name: str
    email: str
    phone: str
    address: str | None
    city: str | None
    notes: str | None
    created_at: datetime

    class Config:
        from_attributes = True
