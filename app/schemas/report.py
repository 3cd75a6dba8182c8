#app/schemas/report.py
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, Literal, Union

Status = Literal["pending", "submitted", "failed", "resolved"]
STATUSES = ("pending", "submitted", "failed", "resolved")


class Location(BaseModel):
    city: str
    lat: float
    lon: float


class Report(BaseModel):
    report_id: str
    timestamp: str
    ip_address: str
    location: Optional[Location] = None
    device_id: Optional[str] = None
    pollution_type: str
    sector: int
    user_id: Optional[str] = None
    status: Status = "pending"
    description: Optional[str] = None
    sispaa_reference_id: Optional[str] = None
    created_at: str
    updated_at: str


class ReportCreateIn(BaseModel):
    """Public submission body. Unknown fields are rejected."""
    model_config = ConfigDict(extra="forbid")

    pollution_type: str = Field(min_length=1, max_length=120)
    sector: Union[int, str]
    description: Optional[str] = Field(default=None, max_length=4000)
    client_device_id: Optional[str] = Field(default=None, max_length=256)


class ReportStatusPatch(BaseModel):
    model_config = ConfigDict(extra="forbid")

    report_id: str = Field(min_length=1)
    status: Status


class ReportSubmitted(BaseModel):
    success: bool = True
    report_id: str
    message: str = "Report submitted successfully"


class ReportList(BaseModel):
    success: bool = True
    reports: list[Report]
    count: int
