from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from garage_admin.schemas.customer import VehicleForm
from garage_admin.schemas.invoice import InvoiceView

JobStatus = Literal["Pending", "In Progress", "Completed", "Cancelled"]


class JobTechnician(BaseModel):
    id: int
    name: str
    status: Optional[str] = None


class JobItem(BaseModel):
    id: Optional[int] = None
    inventory_item_id: Optional[int] = None
    item_name: str
    item_type: Optional[str] = None
    quantity: float = 1.0
    unit_price: float = 0.0
    line_total: float = 0.0


class Job(BaseModel):
    id: int
    customer_id: int
    vehicle_id: Optional[int] = None
    description: Optional[str] = None
    notes: Optional[str] = None
    category: Optional[str] = None
    initial_amount: Optional[float] = None
    advance_amount: Optional[float] = None
    mileage: Optional[float] = None
    job_status: JobStatus = "Pending"
    invoice_created: bool = False
    technicians: List[JobTechnician] = Field(default_factory=list)
    items: List[JobItem] = Field(default_factory=list)
    customer_name: Optional[str] = None
    vehicle_make: Optional[str] = None
    vehicle_model: Optional[str] = None
    vehicle_year: Optional[str] = None
    vehicle_license_plate: Optional[str] = None
    created_at: Optional[str] = None
    status_changed_at: Optional[str] = None


class JobUpdateResult(BaseModel):
    job: Job
    invoice: Optional[InvoiceView] = None


class JobItemForm(BaseModel):
    inventory_item_id: Optional[int] = None
    item_name: Optional[str] = None
    item_type: Optional[str] = None
    quantity: Optional[float] = 1.0
    unit_price: Optional[float] = None


class JobForm(BaseModel):
    customer_id: Optional[int] = None
    vehicle_id: Optional[int] = None
    vehicle: Optional[VehicleForm] = None
    description: Optional[str] = None
    notes: Optional[str] = None
    category: Optional[str] = None
    initial_amount: Optional[float] = None
    advance_amount: Optional[float] = None
    mileage: Optional[float] = None
    job_status: Optional[str] = None
    technician_ids: List[int] = Field(default_factory=list)
    items: List[JobItemForm] = Field(default_factory=list)


class JobUpdateForm(BaseModel):
    """Partial update; fields not sent are left untouched by the backend."""

    job_status: Optional[str] = None
    description: Optional[str] = None
    notes: Optional[str] = None
    category: Optional[str] = None
    initial_amount: Optional[float] = None
    advance_amount: Optional[float] = None
    mileage: Optional[float] = None
    technician_ids: Optional[List[int]] = None
    items: Optional[List[JobItemForm]] = None
    create_invoice: bool = False
