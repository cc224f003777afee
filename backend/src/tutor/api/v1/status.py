#!/usr/bin/env python3
# -*- coding: utf-8 -*-

from fastapi import APIRouter, Depends

from ...core.settings import settings_diagnostics
from ...domain.schemas.chat import StatusOut
from ...services.tutor_service import TutorService, get_tutor_service

router = APIRouter(tags=["status"])


@router.get("/status", response_model=StatusOut)
def status(service: TutorService = Depends(get_tutor_service)) -> StatusOut:
    """Loaded chapters, embedding cache and per-key provider statistics (keys masked)."""
    return StatusOut(**service.status(), settings=settings_diagnostics())
