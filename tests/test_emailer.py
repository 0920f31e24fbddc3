import io
import zipfile

import pytest

from app.services import emailer
from app.utils.text import strip_markdown


@pytest.mark.parametrize(
    "content,expected",
    [
        ("# Q3 Planning: Kickoff!\n- item", "Q3 Planning Kickoff"),
        ("Weekly sync\nbody", "Weekly sync"),
        ("lowercase first line\nbody", "Meeting Summary"),
        ("This first line is definitely much longer than fifty characters", "Meeting Summary"),
        ("", "Meeting Summary"),
        ("\n\n# Retro\n", "Retro"),
    ],
)
def test_default_filename(content: str, expected: str) -> None:
    assert emailer.default_filename(content) == expected


def test_attachment_basename_prefers_explicit_name() -> None:
    assert emailer.attachment_basename("# Ignored", "  board/minutes  ") == "boardminutes"
    assert emailer.attachment_basename("# Ignored", "???") == "Meeting Summary"


def test_validate_email_request_collects_all_errors() -> None:
    errors = emailer.validate_email_request("", "not-an-email", "x" * 501, False, False)
    assert errors == [
        "Summary ID is required",
        "Invalid recipient email: not-an-email",
        "Message is too long (max 500 characters)",
        "At least one attachment type must be selected",
    ]


def test_validate_email_request_ok() -> None:
    assert emailer.validate_email_request("s1", "a@b.co", "hi", False, True) == []


def test_build_attachments() -> None:
    atts = emailer.build_attachments("# Title\n**Bold** text\n- item", "Notes", True, True)
    assert [a.filename for a in atts] == ["Notes.docx", "Notes.txt"]
    # DOCX is a zip container
    assert zipfile.is_zipfile(io.BytesIO(atts[0].content))
    assert atts[1].content.decode("utf-8") == "Title\nBold text\n• item"


def test_strip_markdown() -> None:
    text = "## Decisions\n1. Use `httpx`\n* see [docs](http://x)"
    assert strip_markdown(text) == "Decisions\nUse httpx\n• see docs"


def test_html_escapes_personal_message() -> None:
    body = emailer.render_email_html("<b>hi</b>", [emailer.Attachment("a.txt", b"")])
    assert "&lt;b&gt;hi&lt;/b&gt;" in body
    assert "<li>a.txt</li>" in body


def test_send_without_transport_writes_outbox(outbox) -> None:
    message_id = emailer.send_summary_email(
        "team@example.com", "# Standup\n- ok", message="FYI", attach_txt=True, attach_docx=False
    )
    assert message_id.startswith("dev-")
    written = list(outbox.iterdir())
    assert len(written) == 1
    text = written[0].read_text(encoding="utf-8")
    assert "SUBJECT: Meeting Summary: Standup" in text
    assert "Standup.txt" in text


def test_resend_error_maps_to_delivery_error(monkeypatch: pytest.MonkeyPatch) -> None:
    import httpx

    real_client = httpx.Client

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.headers["Authorization"] == "Bearer rk_test"
        return httpx.Response(429, json={"message": "rate limited"})

    monkeypatch.setattr(emailer.settings, "resend_api_key", "rk_test")
    monkeypatch.setattr(emailer.settings, "from_email", "notes@example.com")
    monkeypatch.setattr(
        emailer.httpx, "Client", lambda **kw: real_client(transport=httpx.MockTransport(handler), **kw)
    )

    with pytest.raises(emailer.EmailDeliveryError, match="quota"):
        emailer.send_email("a@b.co", "subj", "<p>x</p>", [])


def test_resend_success_returns_id(monkeypatch: pytest.MonkeyPatch) -> None:
    import httpx

    real_client = httpx.Client
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["body"] = request.content
        return httpx.Response(200, json={"id": "re_123"})

    monkeypatch.setattr(emailer.settings, "resend_api_key", "rk_test")
    monkeypatch.setattr(emailer.settings, "from_email", "notes@example.com")
    monkeypatch.setattr(
        emailer.httpx, "Client", lambda **kw: real_client(transport=httpx.MockTransport(handler), **kw)
    )

    atts = [emailer.Attachment("n.txt", b"hello")]
    assert emailer.send_email("a@b.co", "subj", "<p>x</p>", atts) == "re_123"
    assert b'"filename":"n.txt"' in seen["body"].replace(b" ", b"")
