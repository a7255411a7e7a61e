# paintbiz/main.py
import asyncio
import logging
from typing import Optional

import httpx

from .api import BusinessApi
from .categories import CategoryStore, JsonFileStore
from .config import Settings, get_settings
from .forms import JobFormController
from .gallery import JobImageUploader
from .jobs import status_label

log = logging.getLogger("paintbiz")


class JobsWorkspace:
    """Everything the jobs page needs, wired from one Settings object."""

    def __init__(
        self,
        settings: Settings,
        client: Optional[httpx.AsyncClient] = None,
        categories: Optional[CategoryStore] = None,
    ):
        self.settings = settings
        self.api = BusinessApi(settings.api_url, timeout=settings.timeout, client=client)
        self.categories = categories or CategoryStore(JsonFileStore(settings.categories_path))
        self.form = JobFormController(self.api, self.categories)
        self.uploader = JobImageUploader(self.api, max_upload_bytes=settings.max_upload_bytes)

    async def __aenter__(self) -> "JobsWorkspace":
        self.categories.load()
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.api.aclose()


def create_workspace(
    settings: Optional[Settings] = None,
    client: Optional[httpx.AsyncClient] = None,
    categories: Optional[CategoryStore] = None,
) -> JobsWorkspace:
    return JobsWorkspace(settings or get_settings(), client=client, categories=categories)


async def _print_jobs() -> None:
    async with create_workspace() as ws:
        jobs = await ws.api.list_jobs()
        log.info(f"{len(jobs)} job(s) at {ws.settings.api_url}")
        for job in jobs:
            log.info(f"#{job.id} {job.job_name} [{job.category}] {status_label(job.status)}")


# ──────────────────────────────────────────────────────────────────────────────
# Local dev entrypoint
# ──────────────────────────────────────────────────────────────────────────────
if __name__ == "__main__":
    logging.basicConfig(level=get_settings().log_level.upper())
    asyncio.run(_print_jobs())
