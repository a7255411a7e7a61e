# paintbiz/api.py
from __future__ import annotations

import logging
from collections import Counter
from typing import Any, Callable, Dict, Hashable, List, Optional, Tuple, TypeVar, Union

import httpx
from pydantic import ValidationError as PydanticValidationError

from .errors import NetworkError, NotFound, UploadError
from .models import Customer, Job, JobImage, JobIn

log = logging.getLogger("paintbiz.api")

T = TypeVar("T")
QueryKey = Tuple[Hashable, ...]

JOBS_KEY: QueryKey = ("/api/jobs",)
CUSTOMERS_KEY: QueryKey = ("/api/customers",)


def images_key(job_id: int) -> QueryKey:
    return ("/api/jobs", job_id, "images")


def query_url(key: QueryKey) -> str:
    # ("/api/jobs", 7, "images") -> "/api/jobs/7/images"
    return "/".join(str(part) for part in key)


class BusinessApi:
    """
    Thin async bridge over the business REST API.

    Reads are cached per query key. Every mutation issues exactly one request
    and, once the server confirms it, refetches the jobs query instead of
    merging the response locally.
    """

    def __init__(
        self,
        base_url: str = "",
        *,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)
        self._cache: Dict[QueryKey, List[Any]] = {}
        # in-flight GETs per key; overlapping fetches of one key are allowed
        self._loading: Counter = Counter()

    async def __aenter__(self) -> "BusinessApi":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    # ──────────────────────────────────────────────────────────────────────────
    # Cache
    # ──────────────────────────────────────────────────────────────────────────
    def is_loading(self, key: QueryKey) -> bool:
        return self._loading[key] > 0

    def cached(self, key: QueryKey) -> Optional[List[Any]]:
        data = self._cache.get(key)
        return list(data) if data is not None else None

    async def invalidate(self, key: QueryKey) -> List[Any]:
        self._cache.pop(key, None)
        return await self._query(key, self._parsers[key[-1]])

    # ──────────────────────────────────────────────────────────────────────────
    # Queries
    # ──────────────────────────────────────────────────────────────────────────
    async def list_jobs(self, refresh: bool = False) -> List[Job]:
        return await self._cached_query(JOBS_KEY, Job.model_validate, refresh)

    async def list_customers(self, refresh: bool = False) -> List[Customer]:
        return await self._cached_query(CUSTOMERS_KEY, Customer.model_validate, refresh)

    async def list_images(self, job_id: int, refresh: bool = False) -> List[JobImage]:
        # server order (oldest first); never re-sorted here
        return await self._cached_query(images_key(job_id), JobImage.model_validate, refresh)

    # ──────────────────────────────────────────────────────────────────────────
    # Mutations
    # ──────────────────────────────────────────────────────────────────────────
    async def create_job(self, payload: Union[JobIn, Dict[str, Any]]) -> Job:
        resp = await self._request("POST", query_url(JOBS_KEY), json=_wire(payload))
        job = self._parse(Job.model_validate, _json(resp), "POST /api/jobs")
        log.info(f"Created job {job.id} ({job.job_name})")
        await self._refetch_after_mutation(JOBS_KEY)
        return job

    async def update_job(self, job_id: int, payload: Union[JobIn, Dict[str, Any]]) -> Job:
        url = f"{query_url(JOBS_KEY)}/{job_id}"
        resp = await self._request("PATCH", url, json=_wire(payload))
        job = self._parse(Job.model_validate, _json(resp), f"PATCH {url}")
        log.info(f"Updated job {job_id}")
        await self._refetch_after_mutation(JOBS_KEY)
        return job

    async def delete_job(self, job_id: int) -> None:
        await self._request("DELETE", f"{query_url(JOBS_KEY)}/{job_id}")
        log.info(f"Deleted job {job_id}")
        await self._refetch_after_mutation(JOBS_KEY)

    async def upload_job_image(self, job_id: int, filename: str, content: bytes, content_type: str) -> JobImage:
        url = query_url(images_key(job_id))
        try:
            resp = await self._request(
                "POST", url, files={"image": (filename, content, content_type)}
            )
        except NetworkError as e:
            raise UploadError(f"Upload failed: {e}") from e
        try:
            return self._parse(JobImage.model_validate, _json(resp), f"POST {url}")
        except NetworkError as e:
            raise UploadError(f"Upload failed: {e}") from e

    # ──────────────────────────────────────────────────────────────────────────
    # Helpers
    # ──────────────────────────────────────────────────────────────────────────
    _parsers: Dict[Hashable, Callable[[Any], Any]] = {
        "/api/jobs": Job.model_validate,
        "/api/customers": Customer.model_validate,
        "images": JobImage.model_validate,
    }

    async def _cached_query(self, key: QueryKey, parse: Callable[[Any], T], refresh: bool) -> List[T]:
        if not refresh and key in self._cache:
            return list(self._cache[key])
        return await self._query(key, parse)

    async def _query(self, key: QueryKey, parse: Callable[[Any], T]) -> List[T]:
        url = query_url(key)
        self._loading[key] += 1
        try:
            resp = await self._request("GET", url)
        finally:
            self._loading[key] -= 1
            if self._loading[key] <= 0:
                del self._loading[key]
        rows = _json(resp) or []
        if not isinstance(rows, list):
            raise NetworkError(f"GET {url}: expected a list, got {type(rows).__name__}")
        data = [self._parse(parse, row, f"GET {url}") for row in rows]
        # last response to land wins
        self._cache[key] = data
        return list(data)

    async def _refetch_after_mutation(self, key: QueryKey) -> None:
        try:
            await self.invalidate(key)
        except NetworkError as e:
            # the mutation itself went through; next read fetches again
            log.warning(f"Refetch of {query_url(key)} after mutation failed: {e}")

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        log.debug(f"{method} {url}")
        try:
            resp = await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise NetworkError(f"{method} {url} failed: {e}") from e
        if resp.status_code == 404:
            raise NotFound(f"{method} {url}: not found")
        if resp.is_error:
            raise NetworkError(
                f"{method} {url} failed with {resp.status_code}: {_detail(resp)}",
                status_code=resp.status_code,
            )
        return resp

    @staticmethod
    def _parse(parse: Callable[[Any], T], row: Any, where: str) -> T:
        try:
            return parse(row)
        except PydanticValidationError as e:
            raise NetworkError(f"{where}: unexpected response shape: {e}") from e


def _wire(payload: Union[JobIn, Dict[str, Any]]) -> Dict[str, Any]:
    if isinstance(payload, JobIn):
        return payload.to_wire()
    return dict(payload)


def _detail(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.text[:200]
    if isinstance(body, dict):
        return str(body.get("message") or body.get("detail") or body)
    return str(body)


def _json(resp: httpx.Response) -> Any:
    try:
        return resp.json()
    except ValueError as e:
        raise NetworkError(f"{resp.request.method} {resp.request.url}: response is not JSON") from e
