# app/routers/summary.py
import logging
from datetime import datetime, timezone
from typing import Optional
from fastapi import APIRouter, HTTPException, Depends, Query
from pydantic import BaseModel
from sqlmodel import Session, select

from ..db import get_session
from ..models import File, Summary, SummaryVersion
from ..services import summarizer
from ..services.differ import compute_line_diff, diff_stats

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/summary", tags=["summary"])


class GenerateRequest(BaseModel):
    file_id: str
    prompt: str
    content: Optional[str] = None  # defaults to the stored file content

class UpdateRequest(BaseModel):
    content: str
    prompt: Optional[str] = None


# ---------- helpers ----------

def _get_summary(db: Session, summary_id: str) -> Summary:
    summary = db.get(Summary, summary_id)
    if not summary:
        raise HTTPException(status_code=404, detail="Summary not found")
    return summary

def _versions(db: Session, summary_id: str) -> list[SummaryVersion]:
    return db.exec(
        select(SummaryVersion)
        .where(SummaryVersion.summary_id == summary_id)
        .order_by(SummaryVersion.version)
    ).all()

def _get_version(db: Session, summary_id: str, version: int) -> SummaryVersion:
    row = db.exec(
        select(SummaryVersion).where(
            SummaryVersion.summary_id == summary_id,
            SummaryVersion.version == version,
        )
    ).first()
    if not row:
        raise HTTPException(status_code=404, detail=f"Version {version} not found")
    return row

def _append_version(db: Session, summary: Summary, content: str, prompt: str) -> Summary:
    """Save `content` as the next version and make it the active content."""
    summary.version += 1
    summary.content = content
    summary.updated_at = datetime.now(timezone.utc)
    db.add(SummaryVersion(summary_id=summary.id, content=content, prompt=prompt, version=summary.version))
    db.add(summary)
    db.commit()
    db.refresh(summary)
    return summary

def _version_out(v: SummaryVersion) -> dict:
    return {
        "id": v.id,
        "content": v.content,
        "prompt": v.prompt,
        "created_at": v.created_at,
        "version": v.version,
    }


# ---------- routes ----------

@router.post("/generate", status_code=201)
async def generate(body: GenerateRequest, db: Session = Depends(get_session)):
    file = db.get(File, body.file_id)
    if not file:
        raise HTTPException(status_code=404, detail="File not found")

    if not summarizer.validate_prompt(body.prompt):
        raise HTTPException(status_code=400, detail="Invalid prompt provided")

    content = body.content if body.content and body.content.strip() else file.content

    try:
        result = await summarizer.generate_summary(content, body.prompt, max_tokens=1000)
    except summarizer.SummarizerError as e:
        raise HTTPException(status_code=502, detail=str(e))

    summary = Summary(
        file_id=file.id,
        original_prompt=body.prompt,
        content=result.summary,
        version=1,
        tokens_used=result.tokens_used,
        model=result.model,
    )
    db.add(summary)
    db.flush()
    db.add(SummaryVersion(summary_id=summary.id, content=result.summary, prompt=body.prompt, version=1))
    db.commit()
    db.refresh(summary)
    logger.info("Created summary id=%s for file=%s", summary.id, file.id)

    return {
        "success": True,
        "summary": {
            "id": summary.id,
            "file_id": summary.file_id,
            "content": summary.content,
            "prompt": summary.original_prompt,
            "created_at": summary.created_at,
            "version": summary.version,
            "tokens_used": summary.tokens_used,
            "model": summary.model,
        },
    }


@router.get("/{summary_id}")
def get_summary(summary_id: str, db: Session = Depends(get_session)):
    summary = _get_summary(db, summary_id)
    return {
        "success": True,
        "summary": {
            "id": summary.id,
            "file_id": summary.file_id,
            "content": summary.content,
            "prompt": summary.original_prompt,
            "created_at": summary.created_at,
            "updated_at": summary.updated_at,
            "version": summary.version,
            "versions": [_version_out(v) for v in _versions(db, summary_id)],
        },
    }


@router.put("/{summary_id}")
def update_summary(summary_id: str, body: UpdateRequest, db: Session = Depends(get_session)):
    if not body.content.strip():
        raise HTTPException(status_code=400, detail="Summary ID and content are required")

    summary = _get_summary(db, summary_id)
    summary = _append_version(db, summary, body.content, body.prompt or summary.original_prompt)

    return {
        "success": True,
        "summary": {
            "id": summary.id,
            "content": summary.content,
            "version": summary.version,
            "updated_at": summary.updated_at,
        },
    }


@router.get("/{summary_id}/versions")
def list_versions(summary_id: str, db: Session = Depends(get_session)):
    _get_summary(db, summary_id)
    return {"success": True, "versions": [_version_out(v) for v in _versions(db, summary_id)]}


@router.post("/{summary_id}/versions/{version}/restore")
def restore_version(summary_id: str, version: int, db: Session = Depends(get_session)):
    """Re-save an older version as the newest one. History is never rewritten."""
    summary = _get_summary(db, summary_id)
    old = _get_version(db, summary_id, version)
    summary = _append_version(db, summary, old.content, old.prompt)
    logger.info("Restored summary id=%s from v%d as v%d", summary_id, version, summary.version)
    return {
        "success": True,
        "summary": {
            "id": summary.id,
            "content": summary.content,
            "version": summary.version,
            "restored_from": version,
            "updated_at": summary.updated_at,
        },
    }


@router.get("/{summary_id}/diff")
def diff_versions(
    summary_id: str,
    from_version: Optional[int] = Query(None, ge=1),
    to_version: Optional[int] = Query(None, ge=1),
    db: Session = Depends(get_session),
):
    """
    Compare two saved versions. Defaults to the version before the latest
    against the latest; a summary with a single version diffs against itself.
    """
    summary = _get_summary(db, summary_id)
    to_v = to_version or summary.version
    from_v = from_version or max(to_v - 1, 1)

    previous = _get_version(db, summary_id, from_v)
    current = _get_version(db, summary_id, to_v)
    segments = compute_line_diff(previous.content, current.content)

    return {
        "success": True,
        "from_version": from_v,
        "to_version": to_v,
        "diff": [s.model_dump() for s in segments],
        "stats": diff_stats(segments).model_dump(),
    }
