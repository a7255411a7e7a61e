# paintbiz/jobs.py
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from .forms import parse_amount
from .models import Customer, Job

STATUS_LABELS = {
    "quoted": "Quoted",
    "in_progress": "In Progress",
    "completed": "Completed",
    "cancelled": "Cancelled",
}

UNKNOWN_CUSTOMER = "Unknown customer"

SORTABLE_FIELDS = ("job_name", "category", "status", "start_date", "end_date", "id")


def status_label(status: str) -> str:
    return STATUS_LABELS.get(status) or status.replace("_", " ").title()


def customer_index(customers: Iterable[Customer]) -> Dict[int, Customer]:
    return {c.id: c for c in customers}


def customer_name(job: Job, index: Dict[int, Customer]) -> str:
    customer = index.get(job.customer_id)
    return customer.name if customer else UNKNOWN_CUSTOMER


def search_jobs(jobs: Iterable[Job], term: str, customers: Iterable[Customer] = ()) -> List[Job]:
    """Case-insensitive match on name, category, location and customer name."""
    jobs = list(jobs)
    needle = (term or "").strip().lower()
    if not needle:
        return jobs
    index = customer_index(customers)
    out = []
    for job in jobs:
        haystack = (
            job.job_name,
            job.category,
            job.location or "",
            customer_name(job, index) if job.customer_id in index else "",
        )
        if any(needle in h.lower() for h in haystack):
            out.append(job)
    return out


def sort_jobs(jobs: Iterable[Job], field: str = "start_date", descending: bool = False) -> List[Job]:
    if field not in SORTABLE_FIELDS:
        raise ValueError(f"Cannot sort jobs by {field!r}")
    jobs = list(jobs)
    present = [j for j in jobs if _sort_value(j, field) is not None]
    missing = [j for j in jobs if _sort_value(j, field) is None]
    present.sort(key=lambda j: _sort_value(j, field), reverse=descending)
    # empty values always go last
    return present + missing


def balance_due(job: Job) -> Decimal:
    return parse_amount(job.agreed_amount) - parse_amount(job.paid_amount)


def _sort_value(job: Job, field: str) -> Optional[object]:
    value = getattr(job, field)
    if value in (None, ""):
        return None
    return value.lower() if isinstance(value, str) else value
