from sqlmodel import SQLModel, Field
from sqlalchemy import UniqueConstraint
from typing import Optional
from datetime import datetime, timezone
import enum
import uuid


def _now() -> datetime:
    return datetime.now(timezone.utc)

def _uuid() -> str:
    return str(uuid.uuid4())


class EmailStatus(str, enum.Enum):
    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"


# === Uploaded transcripts ===

class File(SQLModel, table=True):
    __tablename__ = "files"

    id: str = Field(default_factory=_uuid, primary_key=True, max_length=36)
    original_name: str = Field(max_length=256)
    file_name: str = Field(max_length=256)
    file_path: str = Field(max_length=1024)  # virtual path, content lives in the row
    file_size: int
    mime_type: str = Field(max_length=128)
    word_count: int = 0
    content: str

    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)


# === Summaries and their history ===

class Summary(SQLModel, table=True):
    __tablename__ = "summaries"

    id: str = Field(default_factory=_uuid, primary_key=True, max_length=36)
    file_id: str = Field(foreign_key="files.id", index=True)
    original_prompt: str
    content: str

    # Always equals the newest SummaryVersion.version
    version: int = Field(default=1)
    is_active: bool = Field(default=True)

    tokens_used: Optional[int] = None
    model: Optional[str] = Field(default=None, max_length=128)

    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)


class SummaryVersion(SQLModel, table=True):
    __tablename__ = "summary_versions"
    __table_args__ = (UniqueConstraint("summary_id", "version"),)

    id: str = Field(default_factory=_uuid, primary_key=True, max_length=36)
    summary_id: str = Field(foreign_key="summaries.id", index=True)
    content: str
    prompt: str
    version: int
    created_at: datetime = Field(default_factory=_now)


# === Outgoing email log ===

class EmailRequest(SQLModel, table=True):
    __tablename__ = "email_requests"

    id: str = Field(default_factory=_uuid, primary_key=True, max_length=36)
    summary_id: str = Field(foreign_key="summaries.id", index=True)
    recipient_email: str = Field(max_length=320)
    subject: str
    message: str = ""
    status: str = Field(default=EmailStatus.PENDING.value, max_length=16)  # pending|sent|failed
    sent_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=_now)
