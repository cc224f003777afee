#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Chat API - answer a student question in the context of one chapter.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from ...domain.knowledge.errors import StorageError
from ...domain.knowledge.messages import chapter_not_loaded
from ...domain.knowledge.schemas import ChatTurn
from ...domain.schemas.chat import AnswerOut, AskRequest
from ...services.tutor_service import TutorService, get_tutor_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/chat", tags=["chat"])


@router.post("/ask", response_model=AnswerOut)
def ask(body: AskRequest, service: TutorService = Depends(get_tutor_service)) -> AnswerOut:
    """Every outcome, including rejection and provider exhaustion, is a 200 with a fixed message."""
    question = body.question.strip()
    if not question:
        raise HTTPException(status_code=422, detail="question must not be blank")
    history = [ChatTurn(role=t.role, content=t.content) for t in body.history]
    try:
        result = service.ask(question, body.chapter_id, body.chapter_title, history)
    except StorageError as e:
        logger.warning(f"Storage failure while answering for {body.chapter_id}: {e}")
        raise HTTPException(status_code=400, detail=chapter_not_loaded(body.chapter_title or body.chapter_id))
    return AnswerOut(**result.to_dict())
