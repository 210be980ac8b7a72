"""
Profile API Routes
Upload, tag and date documents per profile, compile them into one PDF
"""

import asyncio
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, Request, UploadFile
from fastapi.responses import Response

from macrodesk.domain.exceptions import (
    DocumentError,
    InvalidProfileIdError,
    ProfileError,
    ProfileExistsError,
    ProfileFileNotFoundError,
    ProfileNotFoundError,
)
from macrodesk.domain.models import Profile, ProfileFile
from macrodesk.domain.schemas.profiles import (
    ProfileCreateRequest,
    ProfileFileResponse,
    ProfileFileUpdate,
    ProfileResponse,
    ProfileSummaryResponse,
)
from macrodesk.infrastructure.documents.pdf_compiler import DocumentCompiler
from macrodesk.infrastructure.documents.text_extractor import build_profile_file
from macrodesk.infrastructure.storage.profile_repository import ProfileRepository
from macrodesk.utils.time import to_utc_iso, utc_now

logger = logging.getLogger(__name__)
router = APIRouter()


def get_repository(request: Request) -> ProfileRepository:
    repository = getattr(request.app.state, "profile_repository", None)
    if repository is None:
        raise HTTPException(status_code=500, detail="Profile storage not initialized")
    return repository


def get_compiler(request: Request) -> DocumentCompiler:
    return getattr(request.app.state, "document_compiler", None) or DocumentCompiler()


def _http_error(exc: ProfileError) -> HTTPException:
    if isinstance(exc, (ProfileNotFoundError, InvalidProfileIdError)):
        return HTTPException(status_code=404, detail="Profile not found")
    if isinstance(exc, ProfileFileNotFoundError):
        return HTTPException(status_code=404, detail="File not found")
    if isinstance(exc, ProfileExistsError):
        return HTTPException(status_code=400, detail="Profile already exists")
    return HTTPException(status_code=500, detail=str(exc))


def _file_response(entry: ProfileFile) -> ProfileFileResponse:
    return ProfileFileResponse(**entry.to_dict())


def _profile_response(profile: Profile) -> ProfileResponse:
    return ProfileResponse(
        id=profile.id,
        name=profile.name,
        files=[_file_response(f) for f in profile.files],
    )


def _normalize_tags(raw: Optional[List[str]]) -> List[str]:
    """Accept repeated form fields and/or comma-separated values."""
    tags: List[str] = []
    for value in raw or []:
        tags.extend(t.strip() for t in value.split(",") if t.strip())
    return tags


@router.post("", response_model=ProfileResponse)
async def create_profile(
    payload: ProfileCreateRequest,
    repository: ProfileRepository = Depends(get_repository),
):
    """
    Create an empty profile; id is derived from the name
    """
    name = (payload.name or "").strip()
    if not name:
        raise HTTPException(status_code=400, detail="Name is required")
    try:
        profile = repository.create(name)
    except ProfileError as e:
        raise _http_error(e)
    return _profile_response(profile)


@router.get("", response_model=List[ProfileSummaryResponse])
async def list_profiles(repository: ProfileRepository = Depends(get_repository)):
    return [ProfileSummaryResponse(**p) for p in repository.list_profiles()]


@router.get("/{profile_id}", response_model=ProfileResponse)
async def get_profile(profile_id: str, repository: ProfileRepository = Depends(get_repository)):
    try:
        return _profile_response(repository.get(profile_id))
    except ProfileError as e:
        raise _http_error(e)


@router.post("/{profile_id}/files", response_model=ProfileResponse)
async def upload_files(
    profile_id: str,
    files: Optional[List[UploadFile]] = File(None),
    tags: Optional[List[str]] = Form(None),
    repository: ProfileRepository = Depends(get_repository),
):
    """
    Attach uploaded documents to a profile

    Text is extracted from PDF, DOCX and TXT files; other types are kept
    with empty content. Files that fail extraction are skipped.
    """
    try:
        repository.get(profile_id)
    except ProfileError as e:
        raise _http_error(e)

    if not files:
        raise HTTPException(status_code=400, detail="No files uploaded")

    tag_list = _normalize_tags(tags)
    entries: List[ProfileFile] = []
    for upload in files:
        data = await upload.read()
        try:
            entry = await asyncio.to_thread(
                build_profile_file,
                upload.filename or "",
                data,
                to_utc_iso(utc_now()),
                tag_list,
            )
        except DocumentError as e:
            logger.error(f"Error processing file {upload.filename}: {e}")
            continue
        entries.append(entry)

    try:
        profile = repository.add_files(profile_id, entries)
    except ProfileError as e:
        raise _http_error(e)
    return _profile_response(profile)


@router.put("/{profile_id}/files/{index}", response_model=ProfileFileResponse)
async def update_file(
    profile_id: str,
    index: int,
    payload: ProfileFileUpdate,
    repository: ProfileRepository = Depends(get_repository),
):
    """
    Edit date, tags or title of one file
    """
    try:
        entry = repository.update_file(
            profile_id,
            index,
            date=payload.date,
            tags=payload.tags,
            title=payload.title,
        )
    except ProfileError as e:
        raise _http_error(e)
    return _file_response(entry)


@router.delete("/{profile_id}/files/{index}")
async def delete_file(
    profile_id: str,
    index: int,
    repository: ProfileRepository = Depends(get_repository),
):
    try:
        repository.delete_file(profile_id, index)
    except ProfileError as e:
        raise _http_error(e)
    return {"success": True}


@router.get("/{profile_id}/compile")
async def compile_profile(
    profile_id: str,
    include_ai: bool = Query(False, alias="includeAI"),
    answer_format: str = Query("1", alias="format"),
    repository: ProfileRepository = Depends(get_repository),
    compiler: DocumentCompiler = Depends(get_compiler),
):
    """
    Download every file of the profile, oldest first, as one PDF
    """
    try:
        profile = repository.get(profile_id)
    except ProfileError as e:
        raise _http_error(e)

    try:
        pdf = await asyncio.to_thread(compiler.render, profile, include_ai, answer_format)
    except DocumentError as e:
        logger.error(f"Error compiling profile {profile_id}: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to compile profile: {str(e)}")

    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{profile_id}_compiled.pdf"'},
    )
