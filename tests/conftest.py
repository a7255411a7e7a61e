"""
Pytest fixtures: an in-process fake of the business API.

The fake is a small FastAPI app mounted through httpx.ASGITransport, so the
real BusinessApi code path (httpx, JSON, multipart) runs without a network.
"""

import asyncio
from collections import Counter
from typing import Any, Dict, List, Optional

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI, File, HTTPException, Response, UploadFile

from paintbiz.api import BusinessApi
from paintbiz.categories import CategoryStore, MemoryStore


class FakeBusinessServer:
    def __init__(self):
        self.jobs: Dict[int, Dict[str, Any]] = {}
        self.customers: List[Dict[str, Any]] = [
            {"id": 1, "name": "Alice Moreau", "email": "alice@example.com"},
            {"id": 2, "name": "Bob Singh", "phone": "555-0102"},
        ]
        self.images: Dict[int, List[Dict[str, Any]]] = {}
        self.calls: Counter = Counter()
        self.last_body: Optional[Dict[str, Any]] = None
        self.fail_next: Optional[int] = None
        # held requests: one gate per GET /api/jobs in arrival order, one per job for uploads
        self.list_gates: List[asyncio.Event] = []
        self.upload_gates: Dict[int, asyncio.Event] = {}
        self._next_id = 100
        self.app = self._build()

    def add_job(self, **fields) -> Dict[str, Any]:
        job = {
            "id": self._new_id(),
            "jobName": "Kitchen",
            "category": "Interior painting",
            "description": "",
            "location": "",
            "status": "quoted",
            "quotedAmount": "0",
            "agreedAmount": "0",
            "paidAmount": "0",
            "customerId": 1,
            "startDate": None,
            "endDate": None,
        }
        job.update(fields)
        self.jobs[job["id"]] = job
        return job

    def _new_id(self) -> int:
        self._next_id += 1
        return self._next_id

    def _maybe_fail(self):
        if self.fail_next:
            code, self.fail_next = self.fail_next, None
            raise HTTPException(status_code=code, detail="boom")

    def _build(self) -> FastAPI:
        app = FastAPI()

        @app.get("/api/jobs")
        async def list_jobs():
            self.calls["GET /api/jobs"] += 1
            gate = self.list_gates.pop(0) if self.list_gates else None
            if gate is not None:
                await gate.wait()
            return list(self.jobs.values())

        @app.get("/api/customers")
        def list_customers():
            self.calls["GET /api/customers"] += 1
            return self.customers

        @app.post("/api/jobs", status_code=201)
        def create_job(body: Dict[str, Any]):
            self.calls["POST /api/jobs"] += 1
            self.last_body = body
            self._maybe_fail()
            job = {"id": self._new_id(), **body}
            self.jobs[job["id"]] = job
            return job

        @app.patch("/api/jobs/{job_id}")
        def update_job(job_id: int, body: Dict[str, Any]):
            self.calls["PATCH /api/jobs/{id}"] += 1
            self.last_body = body
            self._maybe_fail()
            if job_id not in self.jobs:
                raise HTTPException(status_code=404, detail="Job not found")
            self.jobs[job_id].update(body)
            return self.jobs[job_id]

        @app.delete("/api/jobs/{job_id}", status_code=204)
        def delete_job(job_id: int):
            self.calls["DELETE /api/jobs/{id}"] += 1
            if job_id not in self.jobs:
                raise HTTPException(status_code=404, detail="Job not found")
            del self.jobs[job_id]
            return Response(status_code=204)

        @app.get("/api/jobs/{job_id}/images")
        def list_images(job_id: int):
            self.calls["GET /api/jobs/{id}/images"] += 1
            return self.images.get(job_id, [])

        @app.post("/api/jobs/{job_id}/images", status_code=201)
        async def upload_image(job_id: int, image: UploadFile = File(...)):
            self.calls["POST /api/jobs/{id}/images"] += 1
            gate = self.upload_gates.get(job_id)
            if gate is not None:
                await gate.wait()
            self._maybe_fail()
            await image.read()
            img = {
                "id": self._new_id(),
                "jobId": job_id,
                "url": f"/uploads/{job_id}/{image.filename}",
                "description": None,
            }
            self.images.setdefault(job_id, []).append(img)
            return img

        return app


@pytest.fixture
def server():
    return FakeBusinessServer()


@pytest_asyncio.fixture
async def api(server):
    client = httpx.AsyncClient(
        transport=httpx.ASGITransport(app=server.app), base_url="http://paintbiz.test"
    )
    bridge = BusinessApi(client=client)
    yield bridge
    await bridge.aclose()


@pytest.fixture
def categories():
    return CategoryStore(MemoryStore())


async def wait_until(condition, attempts=200):
    """Let the event loop run until `condition()` holds."""
    for _ in range(attempts):
        if condition():
            return
        await asyncio.sleep(0.01)
    raise AssertionError("condition never became true")
