import asyncio
import itertools
from datetime import datetime, timezone

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI, File, Form, Request, UploadFile
from fastapi.responses import JSONResponse, Response

from mfg_attachments.services.attachment_api import AttachmentApiClient
from mfg_attachments.services.intake_panel import IntakePanel
from mfg_attachments.stations import INTAKE
from mfg_attachments.utils.filesystem import sanitize_filename

from helpers import WORK_ORDER_ID, RecordingNotifier


class FakeAttachmentApi:
    """In-memory stand-in for the manufacturing attachment endpoints."""

    def __init__(self):
        self.work_orders: dict[str, list[dict]] = {}
        self.blobs: dict[str, bytes] = {}
        self.calls: list[tuple[str, str]] = []
        self.forms: list[dict] = []
        self.auth_headers: list[str | None] = []
        self.fail_uploads: dict[str, str] = {}
        self.fail_deletes: dict[str, str] = {}
        self.upload_delay = 0.01
        self.in_flight = 0
        self.max_in_flight = 0
        self._seq = itertools.count(1)
        self.app = self._build_app()

    def add_work_order(self, work_order_id: str) -> None:
        self.work_orders.setdefault(work_order_id, [])

    def seed(self, work_order_id: str, filename: str, **fields) -> dict:
        attachment = {
            "filename": filename,
            "originalName": fields.pop("originalName", filename),
            "category": fields.pop("category", "intake"),
            "kind": fields.pop("kind", "spec"),
            "size": fields.pop("size", 3),
            "uploadedAt": "2024-01-01T00:00:00Z",
            "uploadedBy": "operator-1",
            **fields,
        }
        self.work_orders.setdefault(work_order_id, []).append(attachment)
        self.blobs[filename] = b"old"
        return attachment

    def created_names(self) -> list[str]:
        return [name for op, name in self.calls if op == "create:end"]

    def _build_app(self) -> FastAPI:
        app = FastAPI()
        prefix = "/api/mfg/work-orders/{work_order_id}/attachments"

        def missing_work_order():
            return JSONResponse(status_code=404, content={"message": "Work order not found"})

        @app.get(prefix)
        async def list_attachments(work_order_id: str, request: Request):
            self.auth_headers.append(request.headers.get("authorization"))
            self.calls.append(("list", work_order_id))
            if work_order_id not in self.work_orders:
                return missing_work_order()
            return {"attachments": list(self.work_orders[work_order_id])}

        @app.post(prefix)
        async def create_attachment(
            work_order_id: str,
            request: Request,
            file: UploadFile = File(...),
            kind: str = Form(...),
            category: str = Form(...),
            camNumber: str | None = Form(None),
            description: str | None = Form(None),
        ):
            self.auth_headers.append(request.headers.get("authorization"))
            name = file.filename
            self.calls.append(("create:start", name))
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
            try:
                await asyncio.sleep(self.upload_delay)
            finally:
                self.in_flight -= 1
            self.calls.append(("create:end", name))
            self.forms.append({
                "name": name,
                "kind": kind,
                "category": category,
                "camNumber": camNumber,
                "description": description,
            })

            if work_order_id not in self.work_orders:
                return missing_work_order()
            if name in self.fail_uploads:
                return JSONResponse(status_code=500, content={"message": self.fail_uploads[name]})

            content = await file.read()
            stored = f"{next(self._seq)}_{sanitize_filename(name)}"
            attachment = {
                "filename": stored,
                "originalName": name,
                "category": category,
                "kind": kind,
                "size": len(content),
                "uploadedAt": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
                "uploadedBy": "operator-1",
                "description": description or "",
                "mimeType": file.content_type,
            }
            if camNumber:
                attachment["camNumber"] = camNumber.strip()
            self.work_orders[work_order_id].append(attachment)
            self.blobs[stored] = content
            return JSONResponse(status_code=201, content={"attachment": attachment})

        @app.delete(prefix + "/{filename}")
        async def delete_attachment(work_order_id: str, filename: str):
            self.calls.append(("delete", filename))
            if filename in self.fail_deletes:
                return JSONResponse(status_code=500, content={"message": self.fail_deletes[filename]})
            items = self.work_orders.get(work_order_id, [])
            if not any(att["filename"] == filename for att in items):
                return JSONResponse(
                    status_code=404, content={"message": "Work order or attachment not found"}
                )
            self.work_orders[work_order_id] = [att for att in items if att["filename"] != filename]
            self.blobs.pop(filename, None)
            return {"message": "Attachment deleted successfully"}

        @app.get(prefix + "/{filename}/download")
        async def download_attachment(work_order_id: str, filename: str):
            self.calls.append(("download", filename))
            if filename not in self.blobs:
                return JSONResponse(status_code=404, content={"message": "Attachment not found"})
            return Response(content=self.blobs[filename], media_type="application/octet-stream")

        return app


@pytest.fixture
def fake_api():
    api = FakeAttachmentApi()
    api.add_work_order(WORK_ORDER_ID)
    return api


@pytest_asyncio.fixture
async def api_client(fake_api):
    transport = httpx.ASGITransport(app=fake_api.app)
    async with AttachmentApiClient("http://testserver", token="test-token", transport=transport) as c:
        yield c


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def parent_updates():
    return []


@pytest_asyncio.fixture
async def make_panel(api_client, notifier, parent_updates):
    panels: list[IntakePanel] = []

    def _make(station=INTAKE, *, picker=None, confirmer=None, retention_seconds=0.05, **kwargs):
        panel = IntakePanel(
            api_client,
            WORK_ORDER_ID,
            station,
            picker=picker,
            confirmer=confirmer,
            notifier=notifier,
            on_upload_complete=parent_updates.append,
            retention_seconds=retention_seconds,
            **kwargs,
        )
        panels.append(panel)
        return panel

    yield _make
    for panel in panels:
        await panel.aclose()
