# app/routers/email.py
import logging
from datetime import datetime, timezone
from typing import Optional
from fastapi import APIRouter, HTTPException, Depends
from pydantic import BaseModel
from sqlmodel import Session, select

from ..db import get_session
from ..models import Summary, EmailRequest, EmailStatus
from ..services import emailer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/email", tags=["email"])


class SendEmailRequest(BaseModel):
    summary_id: str = ""
    recipient_email: str = ""
    message: Optional[str] = None
    attach_docx: bool = False
    attach_txt: bool = False
    filename: Optional[str] = None  # attachment name without extension


def _share_out(row: EmailRequest, with_message: bool = False) -> dict:
    out = {
        "id": row.id,
        "summary_id": row.summary_id,
        "recipient_email": row.recipient_email,
        "subject": row.subject,
        "sent_at": row.sent_at,
        "status": row.status,
    }
    if with_message:
        out["message"] = row.message
    return out


@router.post("/send")
def send(body: SendEmailRequest, db: Session = Depends(get_session)):
    errors = emailer.validate_email_request(
        body.summary_id, body.recipient_email, body.message, body.attach_docx, body.attach_txt
    )
    if errors:
        raise HTTPException(status_code=400, detail=f"Validation failed: {', '.join(errors)}")

    summary = db.get(Summary, body.summary_id)
    if not summary:
        raise HTTPException(status_code=404, detail="Summary not found")

    name = emailer.attachment_basename(summary.content, body.filename)
    row = EmailRequest(
        summary_id=summary.id,
        recipient_email=body.recipient_email,
        subject=emailer.summary_subject(name),
        message=body.message or "",
    )
    try:
        emailer.send_summary_email(
            recipient_email=body.recipient_email,
            summary_content=summary.content,
            message=body.message,
            attach_docx=body.attach_docx,
            attach_txt=body.attach_txt,
            filename=name,
        )
    except emailer.EmailDeliveryError as e:
        row.status = EmailStatus.FAILED.value
        db.add(row)
        db.commit()
        raise HTTPException(status_code=502, detail=str(e))

    row.status = EmailStatus.SENT.value
    row.sent_at = datetime.now(timezone.utc)
    db.add(row)
    db.commit()
    db.refresh(row)

    return {
        "success": True,
        "message": "Email sent successfully",
        "email_request": _share_out(row),
    }


@router.get("/history")
def history(summary_id: Optional[str] = None, db: Session = Depends(get_session)):
    q = select(EmailRequest)
    if summary_id:
        q = q.where(EmailRequest.summary_id == summary_id)
    rows = db.exec(q.order_by(EmailRequest.created_at.desc())).all()
    return {"success": True, "shares": [_share_out(r) for r in rows]}


@router.get("/{share_id}")
def get_share(share_id: str, db: Session = Depends(get_session)):
    row = db.get(EmailRequest, share_id)
    if not row:
        raise HTTPException(status_code=404, detail="Email share not found")
    return {"success": True, "share": _share_out(row, with_message=True)}
