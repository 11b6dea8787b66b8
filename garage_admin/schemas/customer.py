from typing import Optional

from pydantic import BaseModel


class Customer(BaseModel):
    id: int
    name: str
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    created_at: Optional[str] = None


class CustomerForm(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None


class Vehicle(BaseModel):
    id: int
    customer_id: int
    make: Optional[str] = None
    model: Optional[str] = None
    year: Optional[str] = None
    license_plate: Optional[str] = None
    archived: bool = False


class VehicleForm(BaseModel):
    customer_id: Optional[int] = None
    make: Optional[str] = None
    model: Optional[str] = None
    year: Optional[str] = None
    license_plate: Optional[str] = None
