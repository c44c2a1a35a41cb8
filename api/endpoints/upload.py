import os
import uuid
from fastapi import APIRouter, UploadFile, File, HTTPException
from typing import Optional
from app.settings import settings
from domain.schemas import UploadResponse
from infra.repositories.files_repository import FilesRepository

router = APIRouter()
files_repo = FilesRepository()


def storage_path(ftype: str, filename: Optional[str]) -> str:
    """Unique on-disk path; the original name is kept only as a suffix."""
    safe = os.path.basename(filename or "uploaded.pdf").replace(" ", "_")
    return os.path.join(settings.STORAGE_DIR, f"{ftype}_{uuid.uuid4().hex}_{safe}")


async def save_upload(f: UploadFile, ftype: str) -> str:
    path = storage_path(ftype, f.filename)
    content = await f.read()
    with open(path, "wb") as out:
        out.write(content)
    return files_repo.save(ftype=ftype, path=path, name=f.filename or os.path.basename(path))


@router.post("/upload", response_model=UploadResponse)
async def upload(cv: Optional[UploadFile] = File(default=None),
                 report: Optional[UploadFile] = File(default=None)) -> UploadResponse:
    if not cv and not report:
        raise HTTPException(
            status_code=400, detail="Upload at least one file: 'cv' or 'report'")
    os.makedirs(settings.STORAGE_DIR, exist_ok=True)
    return UploadResponse(
        cv_id=await save_upload(cv, "cv") if cv else None,
        report_id=await save_upload(report, "report") if report else None,
    )
