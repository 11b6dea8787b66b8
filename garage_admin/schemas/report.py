from datetime import date as Date
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

Timeframe = Literal["daily", "monthly", "yearly", "custom"]
ReportType = Literal["expenses", "jobs", "inventory", "revenue"]
ExportFormat = Literal["pdf", "excel"]


class ReportQuery(BaseModel):
    timeframe: Timeframe = "monthly"
    date: Optional[Date] = Field(
        None,
        description="Anchor date for daily, monthly and yearly reports. Defaults to today.",
    )
    start_date: Optional[Date] = None
    end_date: Optional[Date] = None


class JobStatusCount(BaseModel):
    status: str
    count: int


class WeeklyFigure(BaseModel):
    week: int
    weekStart: str
    weekEnd: str
    revenue: float
    expenses: float


class DashboardSummary(BaseModel):
    month: int
    year: int
    totalRevenue: float
    totalExpenses: float
    netProfit: float
    activeJobs: int
    jobStatuses: List[JobStatusCount] = Field(default_factory=list)
    weeklyData: List[WeeklyFigure] = Field(default_factory=list)
