"""
Attachment API client
Async access to the work-order attachment endpoints of the manufacturing API
"""
import logging
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from mfg_attachments.config import settings
from mfg_attachments.errors import AttachmentApiError
from mfg_attachments.schemas.attachment import (
    Attachment,
    AttachmentCreatedResponse,
    AttachmentListResponse,
)
from mfg_attachments.schemas.upload import UploadPayload

logger = logging.getLogger(__name__)


class AttachmentApiClient:
    """Client for the /api/mfg/work-orders/{id}/attachments endpoints"""

    def __init__(
        self,
        base_url: str | None = None,
        token: str | None = None,
        *,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.token = token if token is not None else settings.api_token
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout or settings.request_timeout_seconds,
            transport=transport,
        )

    async def __aenter__(self) -> "AttachmentApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def _auth_header(self) -> dict[str, str]:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}

    @staticmethod
    def _attachments_path(work_order_id: str, filename: str | None = None) -> str:
        path = f"/api/mfg/work-orders/{quote(work_order_id, safe='')}/attachments"
        if filename is not None:
            path += f"/{quote(filename, safe='')}"
        return path

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        headers = self._auth_header()
        headers.update(kwargs.pop("headers", {}))
        try:
            response = await self._client.request(method, path, headers=headers, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise AttachmentApiError(str(exc) or "Request failed") from exc

        if response.is_error:
            try:
                data = response.json()
            except ValueError:
                data = {}
            if not isinstance(data, dict):
                data = {}
            message = data.get("error") or data.get("message") or "Request failed"
            logger.warning("%s %s returned %s: %s", method, path, response.status_code, message)
            raise AttachmentApiError(message, status_code=response.status_code)
        return response

    @staticmethod
    def _parse(response: httpx.Response, schema):
        try:
            return schema.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise AttachmentApiError("Unexpected response from server", response.status_code) from exc

    async def list_attachments(self, work_order_id: str) -> list[Attachment]:
        response = await self._request("GET", self._attachments_path(work_order_id))
        return self._parse(response, AttachmentListResponse).attachments

    async def create_attachment(self, work_order_id: str, payload: UploadPayload) -> Attachment:
        file = payload.file
        response = await self._request(
            "POST",
            self._attachments_path(work_order_id),
            files={"file": (file.name, file.read_bytes(), file.mime_type)},
            data=payload.form_fields(),
        )
        return self._parse(response, AttachmentCreatedResponse).attachment

    async def delete_attachment(self, work_order_id: str, filename: str) -> None:
        await self._request("DELETE", self._attachments_path(work_order_id, filename))

    async def download_attachment(self, work_order_id: str, filename: str) -> bytes:
        path = self._attachments_path(work_order_id, filename) + "/download"
        response = await self._request("GET", path)
        return response.content
