# paintbiz/models.py
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

# Status set is owned by the server; these are the ones the UI knows how to show.
JOB_STATUSES = ("quoted", "in_progress", "completed", "cancelled")


class WireModel(BaseModel):
    """camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, coerce_numbers_to_str=True)


class Customer(WireModel):
    model_config = ConfigDict(extra="allow")

    id: int
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None


class JobIn(WireModel):
    job_name: str
    category: str
    description: Optional[str] = None
    location: Optional[str] = None
    status: str = "quoted"
    # amounts travel as decimal text to avoid float drift
    quoted_amount: str = "0"
    agreed_amount: str = "0"
    paid_amount: str = "0"
    customer_id: int
    start_date: Optional[str] = None
    end_date: Optional[str] = None

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True)


class Job(JobIn):
    id: int
    # older rows may predate categories
    category: str = ""
    quoted_amount: Optional[str] = "0"
    agreed_amount: Optional[str] = "0"
    paid_amount: Optional[str] = "0"


class JobImage(WireModel):
    id: int
    job_id: int
    url: str
    description: Optional[str] = None
