from typing import Literal, Optional

from pydantic import BaseModel

TechnicianStatus = Literal["Active", "On Leave", "Inactive"]


class Technician(BaseModel):
    id: int
    name: str
    phone: Optional[str] = None
    status: TechnicianStatus = "Active"
    created_at: Optional[str] = None


class TechnicianForm(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    status: Optional[str] = None


class TechnicianJob(BaseModel):
    id: int
    description: Optional[str] = None
    job_status: Optional[str] = None
    customer_name: Optional[str] = None
    created_at: Optional[str] = None
