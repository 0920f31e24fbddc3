# app/routers/upload.py
import logging
from fastapi import APIRouter, UploadFile, File as FileForm, HTTPException, Depends
from sqlmodel import Session

from ..db import get_session
from ..models import File
from ..services.file_processor import process_upload, FileProcessingError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/upload", tags=["upload"])


@router.post("", status_code=201)
async def upload_file(file: UploadFile = FileForm(...), db: Session = Depends(get_session)):
    """Store a transcript (.txt, .md, .docx) and return its id."""
    data = await file.read()
    if not data:
        raise HTTPException(status_code=400, detail="No file uploaded")

    try:
        processed = process_upload(file.filename or "", file.content_type, data)
    except FileProcessingError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)

    row = File(
        original_name=file.filename or "upload",
        file_name=file.filename or "upload",
        file_path="",
        file_size=processed.size,
        mime_type=processed.mime_type,
        word_count=processed.word_count,
        content=processed.content,
    )
    row.file_path = f"uploads/{row.id}"
    db.add(row)
    db.commit()
    db.refresh(row)
    logger.info("Stored upload id=%s words=%d", row.id, row.word_count)

    return {
        "success": True,
        "file_id": row.id,
        "message": "File uploaded successfully",
        "file_info": {
            "id": row.id,
            "original_name": row.original_name,
            "size": row.file_size,
            "word_count": row.word_count,
            "file_type": row.mime_type,
        },
    }


@router.get("/{file_id}")
def get_file(file_id: str, db: Session = Depends(get_session)):
    row = db.get(File, file_id)
    if not row:
        raise HTTPException(status_code=404, detail="File not found")
    return {
        "success": True,
        "file": {
            "id": row.id,
            "original_name": row.original_name,
            "content": row.content,
            "word_count": row.word_count,
            "created_at": row.created_at,
        },
    }
