"""File upload models."""

from enum import Enum

from pydantic import BaseModel, Field


class FileStatus(str, Enum):
    """Per-file upload state. UPLOADED is the simulated terminal state, COMPLETED the API one."""

    UPLOADING = "uploading"
    UPLOADED = "uploaded"
    COMPLETED = "completed"
    ERROR = "error"


class SelectedFile(BaseModel):
    """A file chosen by the user: payload plus metadata."""

    name: str = Field(..., min_length=1)
    size: int = Field(..., ge=0)
    mime_type: str
    content: bytes = b""

    @classmethod
    def from_bytes(cls, name: str, content: bytes, mime_type: str) -> "SelectedFile":
        return cls(name=name, size=len(content), mime_type=mime_type, content=content)


class UploadedFile(BaseModel):
    """One file in the upload collection."""

    id: str
    file: SelectedFile
    preview: str | None = None
    status: FileStatus = FileStatus.UPLOADING
    progress: float = Field(0, ge=0, le=100)

    @property
    def is_done(self) -> bool:
        return self.status in (FileStatus.UPLOADED, FileStatus.COMPLETED)
