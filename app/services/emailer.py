# app/services/emailer.py
import base64, html, io, logging, mimetypes, re, smtplib, uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from email.message import EmailMessage
from email.utils import formataddr, make_msgid
from typing import Optional

import docx
import httpx

from ..config import get_settings
from ..db import DATA_DIR
from ..utils.text import safe_filename, strip_markdown

logger = logging.getLogger(__name__)
settings = get_settings()

RESEND_URL = "https://api.resend.com/emails"
EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MAX_MESSAGE_CHARS = 500
DEFAULT_FILENAME = "Meeting Summary"

# --- Dev outbox (always available) ---
OUTBOX_DIR = DATA_DIR / "outbox" / "email"


class EmailDeliveryError(Exception):
    pass


@dataclass
class Attachment:
    filename: str
    content: bytes


# --- Validation ---

def validate_email(email: str) -> bool:
    return bool(EMAIL_RE.match(email or ""))

def validate_email_request(
    summary_id: str,
    recipient_email: str,
    message: Optional[str],
    attach_docx: bool,
    attach_txt: bool,
) -> list[str]:
    errors = []
    if not summary_id:
        errors.append("Summary ID is required")
    if not recipient_email:
        errors.append("Recipient email is required")
    elif not validate_email(recipient_email):
        errors.append(f"Invalid recipient email: {recipient_email}")
    if message and len(message) > MAX_MESSAGE_CHARS:
        errors.append(f"Message is too long (max {MAX_MESSAGE_CHARS} characters)")
    if not attach_docx and not attach_txt:
        errors.append("At least one attachment type must be selected")
    return errors


# --- Attachments ---

def default_filename(content: str) -> str:
    """Derive an attachment name from the summary's first line."""
    lines = [ln.strip() for ln in (content or "").split("\n") if ln.strip()]
    if lines:
        first = lines[0]
        if first.startswith("# "):
            return safe_filename(first[2:]) or DEFAULT_FILENAME
        if len(first) < 50 and first[0].isupper():
            return safe_filename(first) or DEFAULT_FILENAME
    return DEFAULT_FILENAME

def _docx_bytes(content: str) -> bytes:
    document = docx.Document()
    for line in content.split("\n"):
        line = line.strip()
        if line:
            document.add_paragraph(line)
    buf = io.BytesIO()
    document.save(buf)
    return buf.getvalue()

def build_attachments(content: str, filename: str, attach_docx: bool, attach_txt: bool) -> list[Attachment]:
    out = []
    if attach_docx:
        out.append(Attachment(f"{filename}.docx", _docx_bytes(content)))
    if attach_txt:
        out.append(Attachment(f"{filename}.txt", strip_markdown(content).encode("utf-8")))
    return out

def render_email_html(message: Optional[str], attachments: list[Attachment]) -> str:
    personal = f"<p><strong>Personal Message:</strong> {html.escape(message)}</p>" if message else ""
    files = ""
    if attachments:
        items = "".join(f"<li>{html.escape(a.filename)}</li>" for a in attachments)
        files = (
            "<div style='background:#e9ecef;padding:15px;border-radius:5px;margin:20px 0;'>"
            f"<h3>Attachments:</h3><ul>{items}</ul></div>"
        )
    sent_on = datetime.now(timezone.utc).strftime("%b %d, %Y")
    return f"""<!DOCTYPE html>
<html>
  <head><meta charset="utf-8"><title>Meeting Summary</title></head>
  <body style="font-family:Arial,sans-serif;line-height:1.6;color:#333;">
    <div style="max-width:600px;margin:0 auto;padding:20px;">
      <h1>Meeting Summary</h1>
      {personal}
      <p><strong>Summary Attached</strong></p>
      <p>The complete meeting summary is attached to this email for your convenience.</p>
      {files}
      <p style="text-align:center;color:#6c757d;font-size:14px;">
        This summary was generated using AI technology.<br>Sent on {sent_on}
      </p>
    </div>
  </body>
</html>"""


# --- Transports ---

def _dev_write(to_email: str, subject: str, body_html: str, attachments: list[Attachment]) -> str:
    OUTBOX_DIR.mkdir(parents=True, exist_ok=True)
    message_id = f"dev-{uuid.uuid4().hex[:12]}"
    safe_to = to_email.replace("@", "_at_")
    fname = OUTBOX_DIR / f"{message_id}_to={safe_to}.eml"
    lines = [f"TO: {to_email}", f"SUBJECT: {subject}", "", body_html]
    if attachments:
        lines.append("\n[ATTACHMENTS]\n" + "\n".join(a.filename for a in attachments))
    fname.write_text("\n".join(lines), encoding="utf-8")
    logger.info("Email written to dev outbox: %s", fname)
    return message_id

def _smtp_configured() -> bool:
    return bool(settings.smtp_host and settings.smtp_user and settings.smtp_pass and settings.from_email)

def _smtp_send(to_email: str, subject: str, body_html: str, attachments: list[Attachment]) -> str:
    msg = EmailMessage()
    msg["Subject"] = subject
    msg["From"] = formataddr((settings.from_name, settings.from_email))
    msg["To"] = to_email
    msg["Message-ID"] = make_msgid()
    msg.set_content("The meeting summary is attached.", subtype="plain", charset="utf-8")
    msg.add_alternative(body_html, subtype="html", charset="utf-8")

    for att in attachments:
        ctype, _enc = mimetypes.guess_type(att.filename)
        maintype, subtype = (ctype or "application/octet-stream").split("/", 1)
        msg.add_attachment(att.content, maintype=maintype, subtype=subtype, filename=att.filename)

    try:
        with smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=30) as server:
            server.ehlo(); server.starttls(); server.ehlo()
            server.login(settings.smtp_user, settings.smtp_pass)
            server.send_message(msg)
    except (smtplib.SMTPException, OSError) as e:
        logger.exception("SMTP send failed")
        raise EmailDeliveryError("Failed to send email. Please try again.") from e
    return msg["Message-ID"]

def _resend_configured() -> bool:
    return bool(settings.resend_api_key and settings.from_email)

def _resend_send(to_email: str, subject: str, body_html: str, attachments: list[Attachment]) -> str:
    data = {
        "from": f"{settings.from_name} <{settings.from_email}>",
        "to": [to_email],
        "subject": subject,
        "html": body_html,
    }
    if attachments:
        data["attachments"] = [
            {"filename": a.filename, "content": base64.b64encode(a.content).decode("utf-8")}
            for a in attachments
        ]

    headers = {"Authorization": f"Bearer {settings.resend_api_key}", "Content-Type": "application/json"}
    try:
        with httpx.Client(timeout=30) as client:
            r = client.post(RESEND_URL, headers=headers, json=data)
    except httpx.HTTPError as e:
        logger.exception("Resend request failed")
        raise EmailDeliveryError("Failed to send email. Please try again.") from e

    if r.status_code == 429:
        raise EmailDeliveryError("Email service quota exceeded")
    if r.status_code in (401, 403):
        raise EmailDeliveryError("Email service not properly configured")
    if r.status_code == 422:
        raise EmailDeliveryError("Invalid email address provided")
    if r.status_code >= 300:
        logger.error("Resend error %s: %s", r.status_code, r.text)
        raise EmailDeliveryError("Failed to send email. Please try again.")
    return r.json().get("id") or "unknown"


# --- Public API ---

def send_email(to_email: str, subject: str, body_html: str, attachments: list[Attachment]) -> str:
    """
    Primary: Resend (if RESEND_API_KEY and FROM_EMAIL present)
    Fallback: SMTP (if configured)
    Fallback: dev outbox file
    Returns the provider's message id.
    """
    if _resend_configured():
        return _resend_send(to_email, subject, body_html, attachments)
    if _smtp_configured():
        return _smtp_send(to_email, subject, body_html, attachments)
    return _dev_write(to_email, subject, body_html, attachments)

def attachment_basename(summary_content: str, filename: Optional[str] = None) -> str:
    base = (filename or "").strip() or default_filename(summary_content)
    return safe_filename(base) or DEFAULT_FILENAME

def summary_subject(name: str) -> str:
    return f"Meeting Summary: {name}"

def send_summary_email(
    recipient_email: str,
    summary_content: str,
    message: Optional[str] = None,
    attach_docx: bool = True,
    attach_txt: bool = False,
    filename: Optional[str] = None,
) -> str:
    """Send a summary with its attachments. Returns the provider message id."""
    name = attachment_basename(summary_content, filename)
    attachments = build_attachments(summary_content, name, attach_docx, attach_txt)
    body_html = render_email_html(message, attachments)
    message_id = send_email(recipient_email, summary_subject(name), body_html, attachments)
    logger.info("Summary email sent to=%s id=%s attachments=%d", recipient_email, message_id, len(attachments))
    return message_id
