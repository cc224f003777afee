#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Chapters API - ingest, inspect and delete chapter knowledge.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile

from ...domain.knowledge.errors import StorageError
from ...domain.knowledge.schemas import KnowledgeChapter
from ...domain.schemas.chat import (
    CatalogLoadIn, ChapterDetail, ChapterSummary, ChapterTextIn, IngestionOut, PassageOut,
)
from ...services.tutor_service import TutorService, get_tutor_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/chapters", tags=["chapters"])

MAX_UPLOAD_BYTES = 20 * 1024 * 1024
ALLOWED_SUFFIXES = {".txt", ".md", ".markdown", ".pdf"}


def _summary(chapter: KnowledgeChapter) -> ChapterSummary:
    return ChapterSummary(
        id=chapter.id,
        title=chapter.title,
        sections=chapter.section_titles,
        passages=len(chapter.passages),
        updated_at=chapter.updated_at.isoformat(),
    )


@router.get("", response_model=List[ChapterSummary])
def list_chapters(service: TutorService = Depends(get_tutor_service)) -> List[ChapterSummary]:
    return [_summary(c) for c in service.list_chapters()]


@router.post("/load-catalog", response_model=List[IngestionOut])
def load_catalog(body: Optional[CatalogLoadIn] = None,
                 service: TutorService = Depends(get_tutor_service)) -> List[IngestionOut]:
    reports = service.load_catalog(body.texts_dir if body else None)
    return [IngestionOut(**r.to_dict()) for r in reports]


@router.get("/{chapter_id}", response_model=ChapterDetail)
def get_chapter(chapter_id: str, service: TutorService = Depends(get_tutor_service)) -> ChapterDetail:
    try:
        chapter = service.get_chapter(chapter_id)
    except StorageError as e:
        logger.error(f"Unreadable chapter {chapter_id}: {e}")
        raise HTTPException(status_code=500, detail=f"Chapter {chapter_id} could not be read")
    if chapter is None:
        raise HTTPException(status_code=404, detail=f"Chapter not loaded: {chapter_id}")
    return ChapterDetail(
        **_summary(chapter).model_dump(),
        passage_list=[
            PassageOut(index=p.index, text=p.text, section_title=p.section_title)
            for p in chapter.passages
        ],
    )


@router.post("/{chapter_id}", response_model=IngestionOut)
def ingest_text(chapter_id: str, body: ChapterTextIn,
                service: TutorService = Depends(get_tutor_service)) -> IngestionOut:
    try:
        report = service.ingest_text(chapter_id, body.title, body.content)
    except StorageError as e:
        logger.warning(f"Storage rejected chapter {chapter_id}: {e}")
        raise HTTPException(status_code=400, detail=f"Chapter {chapter_id} could not be stored")
    return IngestionOut(**report.to_dict())


@router.post("/{chapter_id}/upload", response_model=IngestionOut)
def upload_document(chapter_id: str,
                    file: UploadFile = File(...),
                    title: Optional[str] = Form(None),
                    service: TutorService = Depends(get_tutor_service)) -> IngestionOut:
    filename = file.filename or ""
    suffix = ("." + filename.rsplit(".", 1)[-1].lower()) if "." in filename else ""
    if suffix not in ALLOWED_SUFFIXES:
        raise HTTPException(status_code=415, detail=f"Unsupported file type: {filename}")
    data = file.file.read(MAX_UPLOAD_BYTES + 1)
    if len(data) > MAX_UPLOAD_BYTES:
        raise HTTPException(status_code=413, detail="File too large")
    try:
        report = service.ingest_document(chapter_id, title, data, filename)
    except StorageError as e:
        logger.warning(f"Storage rejected chapter {chapter_id}: {e}")
        raise HTTPException(status_code=400, detail=f"Chapter {chapter_id} could not be stored")
    logger.info(f"Uploaded {filename} for {chapter_id}: {report.passages} passages")
    return IngestionOut(**report.to_dict())


@router.delete("/{chapter_id}")
def delete_chapter(chapter_id: str, service: TutorService = Depends(get_tutor_service)):
    try:
        deleted = service.delete_chapter(chapter_id)
    except StorageError as e:
        logger.warning(f"Storage rejected chapter {chapter_id}: {e}")
        raise HTTPException(status_code=400, detail=f"Chapter {chapter_id} could not be deleted")
    if not deleted:
        raise HTTPException(status_code=404, detail=f"Chapter not loaded: {chapter_id}")
    return {"deleted": chapter_id}
