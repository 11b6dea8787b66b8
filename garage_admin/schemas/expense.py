from typing import Literal, Optional

from pydantic import BaseModel

ExpensePaymentStatus = Literal["pending", "paid", "unpaid"]


class Expense(BaseModel):
    id: int
    description: str
    category: Optional[str] = None
    amount: float
    expense_date: Optional[str] = None
    payment_status: ExpensePaymentStatus = "pending"
    payment_method: Optional[str] = None
    remarks: Optional[str] = None


class ExpenseForm(BaseModel):
    description: Optional[str] = None
    category: Optional[str] = None
    amount: Optional[float] = None
    expense_date: Optional[str] = None
    payment_status: Optional[str] = None
    payment_method: Optional[str] = None
    remarks: Optional[str] = None
