"""
HTTP routes for mock interview sessions and their AI helpers.

Sessions are created with a question set, collect scored responses and are
completed once with an overall score, which is folded into the user's
running interview analytics.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from openai import OpenAI

from career_canvas.config import Settings, get_settings
from career_canvas.db import DbClient
from career_canvas.dependencies import get_db_client, get_optional_completion_client
from career_canvas.routes import get_or_404, insert_or_409, update_or_error
from career_canvas.schemas import (
    CompleteInterviewRequest,
    EvaluateResponseRequest,
    EvaluateResponseResponse,
    InterviewAnalyticsResponse,
    InterviewQuestionRequest,
    InterviewQuestionResponse,
    InterviewResponseRequest,
)
from models import career_ai
from shared.documents import (
    InterviewAnalytics,
    InterviewResponse,
    InterviewSession,
    InterviewSessionBase,
    utcnow,
)

logger = logging.getLogger(__name__)

router = APIRouter()

# Completed sessions looked at for per-category averages.
RECENT_SESSIONS = 10


def _category_performance(sessions: list[InterviewSession]) -> dict[str, float]:
    scores: dict[str, list[float]] = defaultdict(list)
    for session in sessions:
        for response in session.responses:
            question = session.question(response.question_id)
            category = question.category if question else "general"
            scores[category].append(response.score)
    return {
        category: round(sum(values) / len(values), 2)
        for category, values in scores.items()
    }


@router.post("/interviews", response_model=InterviewSession, status_code=201)
def create_interview(
    payload: InterviewSessionBase, db: DbClient = Depends(get_db_client)
):
    session = insert_or_409(db, InterviewSession.model_validate(payload.model_dump()))
    logger.info("Interview session %s created for %s", session.id, session.user_id)
    return session


@router.get("/interviews", response_model=list[InterviewSession])
def list_interviews(
    user_id: str = Query(..., min_length=1),
    limit: int = Query(10, ge=1, le=100),
    db: DbClient = Depends(get_db_client),
):
    return db.find(InterviewSession, limit=limit, user_id=user_id)


@router.get(
    "/interviews/analytics/{user_id}", response_model=InterviewAnalyticsResponse
)
def interview_analytics(user_id: str, db: DbClient = Depends(get_db_client)):
    found = db.find(InterviewAnalytics, limit=1, user_id=user_id)
    analytics = found[0] if found else InterviewAnalytics(user_id=user_id)

    recent = [
        session
        for session in db.find(InterviewSession, user_id=user_id)
        if session.completed
    ][:RECENT_SESSIONS]
    return InterviewAnalyticsResponse(
        **analytics.model_dump(),
        category_performance=_category_performance(recent),
        recent_sessions_count=len(recent),
    )


@router.get("/interviews/{session_id}", response_model=InterviewSession)
def get_interview(session_id: str, db: DbClient = Depends(get_db_client)):
    return get_or_404(db, InterviewSession, session_id)


@router.post(
    "/interviews/{session_id}/responses",
    response_model=InterviewSession,
    status_code=201,
)
def add_interview_response(
    session_id: str,
    payload: InterviewResponseRequest,
    db: DbClient = Depends(get_db_client),
):
    session = get_or_404(db, InterviewSession, session_id)
    if session.completed:
        raise HTTPException(status_code=409, detail="Interview session is completed")
    if not session.question(payload.question_id):
        raise HTTPException(status_code=404, detail="Question not found in session")

    response = InterviewResponse(**payload.model_dump(), timestamp=utcnow())
    return update_or_error(
        db,
        InterviewSession,
        session_id,
        {"responses": [*session.responses, response]},
    )


@router.put("/interviews/{session_id}/complete", response_model=InterviewSession)
def complete_interview(
    session_id: str,
    payload: CompleteInterviewRequest,
    db: DbClient = Depends(get_db_client),
):
    session = get_or_404(db, InterviewSession, session_id)
    if session.completed:
        raise HTTPException(
            status_code=409, detail="Interview session is already completed"
        )

    finished_at = utcnow()
    session = update_or_error(
        db,
        InterviewSession,
        session_id,
        {
            "end_time": finished_at,
            "overall_score": payload.overall_score,
            "feedback": payload.feedback,
        },
    )

    found = db.find(InterviewAnalytics, limit=1, user_id=session.user_id)
    if found:
        update_or_error(
            db,
            InterviewAnalytics,
            found[0].id,
            found[0].scored(payload.overall_score, finished_at),
        )
    else:
        fresh = InterviewAnalytics(user_id=session.user_id)
        insert_or_409(
            db, fresh.with_changes(fresh.scored(payload.overall_score, finished_at))
        )
    logger.info(
        "Interview session %s completed with score %s",
        session_id,
        payload.overall_score,
    )
    return session


# ---------------------------------------------------------------------------
# AI helpers. These fall back to canned questions and heuristic scoring when
# no OpenAI key is configured or the model call fails.
# ---------------------------------------------------------------------------


@router.post("/ai/interview-question", response_model=InterviewQuestionResponse)
def interview_question(
    payload: InterviewQuestionRequest,
    client: Optional[OpenAI] = Depends(get_optional_completion_client),
    settings: Settings = Depends(get_settings),
):
    question, source = career_ai.generate_interview_question(
        client,
        payload.topic,
        payload.previous_questions,
        model=settings.openai_chat_model,
    )
    return InterviewQuestionResponse(question=question, source=source)


@router.post("/ai/evaluate-response", response_model=EvaluateResponseResponse)
def evaluate_response(
    payload: EvaluateResponseRequest,
    client: Optional[OpenAI] = Depends(get_optional_completion_client),
    settings: Settings = Depends(get_settings),
):
    evaluation, source = career_ai.evaluate_interview_response(
        client,
        payload.question,
        payload.answer,
        payload.category,
        model=settings.openai_chat_model,
    )
    return EvaluateResponseResponse(evaluation=evaluation, source=source)
