"""
Assessment file uploads (wizard step 4) and file serving.

POST /api/assessments/{id}/files uploads photos or documents for an assessment.
Stores to Cloudflare R2 if configured, otherwise the local uploads/ directory.
"""

import logging
import os
import uuid
from io import BytesIO
from pathlib import Path
from typing import List

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from fastapi.responses import FileResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .. import models
from ..auth import get_current_user
from ..config import settings
from ..database import get_db
from .assessments import get_owned_assessment

logger = logging.getLogger(__name__)

router = APIRouter(tags=["files"])

DOCUMENT_MIME_TYPES = {
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "image/vnd.dwg",
    "application/acad",
    "application/x-dwg",
}

SUBDIRS = {
    models.FileType.PHOTO.value: "photos",
    models.FileType.DOCUMENT.value: "documents",
}


def upload_root() -> Path:
    return Path(settings.UPLOAD_DIR)


def _mime_allowed(file_type: str, mime_type: str) -> bool:
    if file_type == models.FileType.PHOTO.value:
        return mime_type.startswith("image/")
    return mime_type in DOCUMENT_MIME_TYPES


def _r2_configured() -> bool:
    """Check if Cloudflare R2 credentials are set."""
    return bool(
        settings.CLOUDFLARE_R2_ACCOUNT_ID
        and settings.CLOUDFLARE_R2_ACCESS_KEY_ID
        and settings.CLOUDFLARE_R2_SECRET_ACCESS_KEY
    )


def _r2_client():
    import boto3

    return boto3.client(
        "s3",
        endpoint_url=f"https://{settings.CLOUDFLARE_R2_ACCOUNT_ID}.r2.cloudflarestorage.com",
        aws_access_key_id=settings.CLOUDFLARE_R2_ACCESS_KEY_ID,
        aws_secret_access_key=settings.CLOUDFLARE_R2_SECRET_ACCESS_KEY,
    )


def _upload_to_r2(file_bytes: bytes, key: str, content_type: str) -> str:
    """Upload file to Cloudflare R2 and return the public URL."""
    _r2_client().upload_fileobj(
        BytesIO(file_bytes),
        settings.CLOUDFLARE_R2_BUCKET,
        key,
        ExtraArgs={"ContentType": content_type},
    )
    return f"https://{settings.CLOUDFLARE_R2_BUCKET}.{settings.CLOUDFLARE_R2_ACCOUNT_ID}.r2.dev/{key}"


def _delete_from_r2(key: str):
    _r2_client().delete_object(Bucket=settings.CLOUDFLARE_R2_BUCKET, Key=key)


def _save_locally(file_bytes: bytes, subdir: str, filename: str) -> str:
    """Save file under uploads/<subdir>/ and return its path."""
    upload_dir = upload_root() / subdir
    upload_dir.mkdir(parents=True, exist_ok=True)
    file_path = upload_dir / filename
    with open(file_path, "wb") as f:
        f.write(file_bytes)
    return str(file_path)


def _is_remote(file_path: str) -> bool:
    return file_path.startswith("https://")


def _remove_stored(file_path: str, key: str):
    """Remove a stored file from R2 or local disk. key is its '<subdir>/<file name>'."""
    if _is_remote(file_path):
        _delete_from_r2(key)
    elif os.path.exists(file_path):
        os.remove(file_path)


def _discard_written(written: list):
    """Best-effort cleanup of files stored for an upload that was not saved."""
    for file_path, key in written:
        try:
            _remove_stored(file_path, key)
        except Exception as e:
            logger.error("Could not remove orphaned upload %s: %s", file_path, e)


def file_to_dict(f: models.UploadedFile) -> dict:
    if _is_remote(f.file_path):
        url = f.file_path
    elif f.file_type == models.FileType.PHOTO.value:
        url = f"/api/files/photo/{f.file_name}"
    else:
        url = None
    return {
        "id": f.id,
        "assessmentId": f.assessment_id,
        "fileName": f.file_name,
        "originalName": f.original_name,
        "fileType": f.file_type,
        "mimeType": f.mime_type,
        "fileSize": f.file_size,
        "url": url,
        "createdAt": f.created_at.isoformat() if f.created_at else None,
    }


@router.post("/assessments/{assessment_id}/files")
async def upload_files(
    assessment_id: int,
    files: List[UploadFile] = File(...),
    file_type: str = Form(models.FileType.DOCUMENT.value),
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Upload photos or documents to an assessment.

    - file_type is 'photo' (any image/*) or 'document' (PDF, DOC, DOCX, XLS, XLSX, DWG)
    - Up to MAX_FILES_PER_UPLOAD files, MAX_UPLOAD_MB each
    - Every file is checked before any is stored
    """
    assessment = get_owned_assessment(db, assessment_id, current_user)

    if file_type not in SUBDIRS:
        raise HTTPException(status_code=400, detail="file_type must be 'photo' or 'document'")
    if len(files) > settings.MAX_FILES_PER_UPLOAD:
        raise HTTPException(
            status_code=400,
            detail=f"Too many files ({len(files)}). Maximum is {settings.MAX_FILES_PER_UPLOAD}.",
        )

    max_bytes = settings.MAX_UPLOAD_MB * 1024 * 1024
    checked = []
    for upload in files:
        mime_type = upload.content_type or "application/octet-stream"
        if not _mime_allowed(file_type, mime_type):
            detail = (
                "Only image files are allowed for photos"
                if file_type == models.FileType.PHOTO.value
                else "Only PDF, DOC, DOCX, XLS, XLSX, and DWG files are allowed for documents"
            )
            raise HTTPException(status_code=400, detail=f"{upload.filename}: {detail}")

        file_bytes = await upload.read()
        if len(file_bytes) == 0:
            raise HTTPException(status_code=400, detail=f"{upload.filename}: empty file.")
        if len(file_bytes) > max_bytes:
            raise HTTPException(
                status_code=400,
                detail=f"{upload.filename}: file too large ({len(file_bytes) / 1024 / 1024:.1f}MB). "
                       f"Maximum is {settings.MAX_UPLOAD_MB}MB.",
            )
        checked.append((upload, mime_type, file_bytes))

    subdir = SUBDIRS[file_type]
    saved = []
    written = []
    try:
        for upload, mime_type, file_bytes in checked:
            ext = os.path.splitext(upload.filename or "")[1].lower()
            unique_name = f"{assessment.id}_{uuid.uuid4().hex[:12]}{ext}"
            key = f"{subdir}/{unique_name}"

            if _r2_configured():
                file_path = _upload_to_r2(file_bytes, key, mime_type)
            else:
                file_path = _save_locally(file_bytes, subdir, unique_name)
            written.append((file_path, key))

            record = models.UploadedFile(
                assessment_id=assessment.id,
                file_name=unique_name,
                original_name=upload.filename or unique_name,
                file_type=file_type,
                mime_type=mime_type,
                file_size=len(file_bytes),
                file_path=file_path,
            )
            db.add(record)
            saved.append(record)

        db.commit()
    except (OSError, SQLAlchemyError) as e:
        db.rollback()
        _discard_written(written)
        logger.error("Upload failed for assessment %s: %s", assessment_id, e)
        raise HTTPException(status_code=500, detail="Could not save the files. Please retry.")

    for record in saved:
        db.refresh(record)
    logger.info("Stored %d %s file(s) for assessment %s", len(saved), file_type, assessment.id)
    return [file_to_dict(r) for r in saved]


@router.get("/assessments/{assessment_id}/files")
def list_files(
    assessment_id: int,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    assessment = get_owned_assessment(db, assessment_id, current_user)
    return [file_to_dict(f) for f in assessment.files]


@router.delete("/files/{file_id}")
def delete_file(
    file_id: int,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    record = db.query(models.UploadedFile).filter(models.UploadedFile.id == file_id).first()
    if not record or record.assessment.user_id != current_user.id:
        raise HTTPException(status_code=404, detail="File not found")

    file_path = record.file_path
    key = f"{SUBDIRS.get(record.file_type, 'documents')}/{record.file_name}"
    db.delete(record)
    db.commit()
    _remove_stored(file_path, key)
    return {"message": "File deleted"}


def _serve(subdir: str, filename: str) -> FileResponse:
    # Bare file names only; no path segments
    if Path(filename).name != filename:
        raise HTTPException(status_code=404, detail="File not found")
    file_path = upload_root() / subdir / filename
    if not file_path.is_file():
        raise HTTPException(status_code=404, detail="File not found")
    return FileResponse(str(file_path))


@router.get("/files/pdf/{filename}")
def serve_pdf(filename: str):
    return _serve("pdfs", filename)


@router.get("/files/photo/{filename}")
def serve_photo(filename: str):
    return _serve("photos", filename)
