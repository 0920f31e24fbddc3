# app/routers/diff.py
from fastapi import APIRouter
from pydantic import BaseModel

from ..services.differ import compute_line_diff, diff_stats, DiffSegment, DiffStats

router = APIRouter(prefix="/api/diff", tags=["diff"])


class DiffRequest(BaseModel):
    previous: str = ""
    current: str = ""

class DiffResponse(BaseModel):
    success: bool = True
    diff: list[DiffSegment]
    stats: DiffStats


@router.post("", response_model=DiffResponse)
def diff_texts(body: DiffRequest):
    """Line diff of two arbitrary texts, e.g. unsaved edits against a stored version."""
    segments = compute_line_diff(body.previous, body.current)
    return DiffResponse(diff=segments, stats=diff_stats(segments))
