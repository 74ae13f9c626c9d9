from pydantic import BaseModel, ConfigDict, Field


class Attachment(BaseModel):
    """A work-order attachment as returned by the manufacturing API."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    filename: str
    original_name: str | None = Field(None, alias="originalName")
    category: str | None = None
    kind: str
    size: int | None = None
    uploaded_at: str | None = Field(None, alias="uploadedAt")
    uploaded_by: str | None = Field(None, alias="uploadedBy")
    cam_number: str | None = Field(None, alias="camNumber")
    description: str | None = None
    approved_at: str | None = Field(None, alias="approvedAt")
    rejection_reason: str | None = Field(None, alias="rejectionReason")
    approval_status: str | None = Field(None, alias="approvalStatus")
    mime_type: str | None = Field(None, alias="mimeType")
    url: str | None = None

    @property
    def display_name(self) -> str:
        return self.original_name or self.filename


class AttachmentListResponse(BaseModel):
    attachments: list[Attachment] = []


class AttachmentCreatedResponse(BaseModel):
    attachment: Attachment
