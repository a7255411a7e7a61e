# paintbiz/forms.py
"""
Create/edit job dialog state.

The dialog works in one of two explicit modes. ``CreateMode`` starts from the
static defaults table and submits ``POST /api/jobs``. ``EditMode(job_id)``
starts from the selected job and submits ``PATCH /api/jobs/{id}``.
"""
import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Mapping, Optional, Union

from pydantic import BaseModel, Field, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic_core import PydanticCustomError

from .api import BusinessApi
from .categories import DEFAULT_CATEGORIES, CategoryStore
from .errors import PaintBizError, ValidationError
from .models import Job, JobIn

logger = logging.getLogger("paintbiz.forms")


# ──────────────────────────────────────────────────────────────────────────────
# Form schema
# ──────────────────────────────────────────────────────────────────────────────
class JobForm(BaseModel):
    job_name: str
    category: str
    customer_id: int
    quoted_amount: Decimal = Field(Decimal(0), ge=0)
    agreed_amount: Decimal = Field(Decimal(0), ge=0)
    paid_amount: Decimal = Field(Decimal(0), ge=0)
    status: str = "quoted"
    description: str = ""
    location: str = ""
    start_date: str = ""
    end_date: str = ""

    @field_validator("job_name")
    @classmethod
    def _job_name_required(cls, v: str) -> str:
        if not v:
            raise PydanticCustomError("required", "Job Name is required")
        return v

    @field_validator("category")
    @classmethod
    def _category_required(cls, v: str) -> str:
        if not v:
            raise PydanticCustomError("required", "Category is required")
        return v

    @field_validator("customer_id", mode="before")
    @classmethod
    def _customer_required(cls, v: Any) -> Any:
        if v is None or (isinstance(v, str) and not v.strip()):
            raise PydanticCustomError("required", "Customer is required")
        return v.strip() if isinstance(v, str) else v

    @field_validator("quoted_amount", "agreed_amount", "paid_amount", mode="before")
    @classmethod
    def _blank_amount_is_zero(cls, v: Any) -> Any:
        if v is None or (isinstance(v, str) and not v.strip()):
            return 0
        return v.strip() if isinstance(v, str) else v

    @field_validator("description", "location", "start_date", "end_date", "status", mode="before")
    @classmethod
    def _none_is_blank(cls, v: Any) -> Any:
        return "" if v is None else v

    def to_payload(self) -> JobIn:
        return JobIn(
            job_name=self.job_name,
            category=self.category,
            description=self.description,
            location=self.location,
            status=self.status or "quoted",
            quoted_amount=wire_amount(self.quoted_amount),
            agreed_amount=wire_amount(self.agreed_amount),
            paid_amount=wire_amount(self.paid_amount),
            customer_id=self.customer_id,
            start_date=self.start_date or None,
            end_date=self.end_date or None,
        )


def wire_amount(value: Decimal) -> str:
    """Exact decimal text: 250 -> "250", 12.50 -> "12.5"."""
    if value == 0:
        return "0"
    return format(value.normalize(), "f")


AMOUNT_FIELDS = ("quoted_amount", "agreed_amount", "paid_amount")


def parse_amount(value: Optional[str]) -> Decimal:
    try:
        return Decimal(value) if value else Decimal(0)
    except InvalidOperation:
        logger.warning(f"Treating malformed amount {value!r} as 0")
        return Decimal(0)


def edit_amount(value: Optional[str]) -> Union[Decimal, str]:
    """Stored amount as a form number; malformed text is handed back unchanged."""
    if not value:
        return Decimal(0)
    try:
        amount = Decimal(value)
    except InvalidOperation:
        return value
    return amount if amount.is_finite() else value


# ──────────────────────────────────────────────────────────────────────────────
# Dialog mode
# ──────────────────────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class CreateMode:
    pass


@dataclass(frozen=True)
class EditMode:
    job_id: int


FormMode = Union[CreateMode, EditMode]

DEFAULT_VALUES: Dict[str, Any] = {
    "job_name": "",
    "category": DEFAULT_CATEGORIES[0],
    "description": "",
    "location": "",
    "status": "quoted",
    "quoted_amount": Decimal(0),
    "agreed_amount": Decimal(0),
    "paid_amount": Decimal(0),
    "customer_id": None,
    "start_date": "",
    "end_date": "",
}


def values_from_job(job: Job) -> Dict[str, Any]:
    return {
        "job_name": job.job_name,
        "category": job.category,
        "description": job.description or "",
        "location": job.location or "",
        "status": job.status or "quoted",
        "quoted_amount": edit_amount(job.quoted_amount),
        "agreed_amount": edit_amount(job.agreed_amount),
        "paid_amount": edit_amount(job.paid_amount),
        "customer_id": job.customer_id,
        "start_date": job.start_date or "",
        "end_date": job.end_date or "",
    }


# ──────────────────────────────────────────────────────────────────────────────
# Controller
# ──────────────────────────────────────────────────────────────────────────────
class JobFormController:
    def __init__(self, api: BusinessApi, categories: CategoryStore):
        self.api = api
        self.categories = categories
        self.mode: FormMode = CreateMode()
        self.is_open = False
        self.submitting = False
        self.values: Dict[str, Any] = dict(DEFAULT_VALUES)
        self.errors: Dict[str, str] = {}
        self.error: Optional[str] = None

    def open_create(self) -> None:
        self._reset(CreateMode(), DEFAULT_VALUES)
        self.is_open = True

    def open_edit(self, job: Job) -> None:
        self._reset(EditMode(job.id), values_from_job(job))
        for field in AMOUNT_FIELDS:
            value = self.values[field]
            if isinstance(value, str):
                # kept as-is so submit can't silently overwrite it with 0
                logger.warning(f"Job {job.id} has malformed {field} {value!r}")
                self.errors[field] = f"Stored amount {value!r} is not a number"
        self.is_open = True

    def close(self) -> None:
        self._reset(CreateMode(), DEFAULT_VALUES)
        self.is_open = False

    def set_value(self, field: str, value: Any) -> None:
        if field not in DEFAULT_VALUES:
            raise KeyError(field)
        self.values[field] = value
        self.errors.pop(field, None)

    def add_custom_category(self, name: str) -> None:
        before = self.categories.categories
        after = self.categories.add_custom(name)
        if len(after) > len(before):
            self.set_value("category", name)

    def validate(self) -> Optional[JobForm]:
        self.errors = {}
        try:
            form = JobForm(**self.values)
        except PydanticValidationError as e:
            for err in e.errors():
                field = str(err["loc"][0]) if err["loc"] else "__root__"
                self.errors.setdefault(field, err["msg"])
            return None
        if form.category not in self.categories.categories:
            self.errors["category"] = f"Unknown category {form.category!r}"
            return None
        return form

    async def submit(self, values: Optional[Mapping[str, Any]] = None) -> bool:
        """Validate and send the form. Returns False (dialog stays open) on any failure."""
        if self.submitting:
            return False
        if values:
            for field, value in values.items():
                self.set_value(field, value)
        self.error = None

        form = self.validate()
        if form is None:
            self.error = str(ValidationError(self.errors))
            return False

        payload = form.to_payload()
        mode = self.mode
        self.submitting = True
        try:
            if isinstance(mode, EditMode):
                await self.api.update_job(mode.job_id, payload)
            else:
                await self.api.create_job(payload)
        except PaintBizError as e:
            logger.warning(f"Job submit failed: {e}")
            self.error = str(e)
            return False
        finally:
            self.submitting = False

        self.close()
        return True

    def _reset(self, mode: FormMode, values: Mapping[str, Any]) -> None:
        self.mode = mode
        self.values = dict(values)
        self.errors = {}
        self.error = None
