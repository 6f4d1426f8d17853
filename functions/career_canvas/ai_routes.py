"""
HTTP routes that forward to the OpenAI-backed career assistant.
"""

from __future__ import annotations

import json
import logging

from fastapi import APIRouter, Depends, HTTPException
from openai import OpenAI, OpenAIError

from career_canvas.config import Settings, get_settings
from career_canvas.dependencies import get_completion_client
from career_canvas.schemas import (
    CareerAdviceRequest,
    CareerAdviceResponse,
    CareerPathsRequest,
    CareerPathsResponse,
    InterviewQuestionsRequest,
    InterviewQuestionsResponse,
    MentorRecommendationRequest,
    MentorRecommendationResponse,
    ResumeFeedbackRequest,
    ResumeFeedbackResponse,
)
from models import career_ai
from models.openai_api import CompletionInvalidResponseException

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ai")

# Upstream failures reported to the client as 502.
UPSTREAM_ERRORS = (
    json.JSONDecodeError,
    CompletionInvalidResponseException,
    career_ai.CareerAssistantError,
    OpenAIError,
)


def _bad_gateway(exc: Exception) -> HTTPException:
    logger.error("AI completion failed: %s", exc)
    return HTTPException(status_code=502, detail="AI service returned an invalid response")


@router.post("/mentor-recommendations", response_model=MentorRecommendationResponse)
def mentor_recommendations(
    payload: MentorRecommendationRequest,
    client: OpenAI = Depends(get_completion_client),
    settings: Settings = Depends(get_settings),
):
    try:
        recommendations = career_ai.generate_mentor_recommendations(
            client,
            payload.user_profile,
            payload.career_goals,
            model=settings.openai_completion_model,
        )
    except UPSTREAM_ERRORS as exc:
        raise _bad_gateway(exc) from exc
    return MentorRecommendationResponse(recommendations=recommendations)


@router.post("/career-paths", response_model=CareerPathsResponse)
def career_paths(
    payload: CareerPathsRequest,
    client: OpenAI = Depends(get_completion_client),
    settings: Settings = Depends(get_settings),
):
    try:
        paths = career_ai.analyze_career_paths(
            client,
            payload.user_profile,
            payload.career_goals,
            model=settings.openai_completion_model,
        )
    except UPSTREAM_ERRORS as exc:
        raise _bad_gateway(exc) from exc
    return CareerPathsResponse(career_paths=paths)


@router.post("/career-advice", response_model=CareerAdviceResponse)
def career_advice(
    payload: CareerAdviceRequest,
    client: OpenAI = Depends(get_completion_client),
    settings: Settings = Depends(get_settings),
):
    try:
        advice = career_ai.generate_career_advice(
            client, payload.user_profile, model=settings.openai_chat_model
        )
    except UPSTREAM_ERRORS as exc:
        raise _bad_gateway(exc) from exc
    return CareerAdviceResponse(advice=advice)


@router.post("/resume-feedback", response_model=ResumeFeedbackResponse)
def resume_feedback(
    payload: ResumeFeedbackRequest,
    client: OpenAI = Depends(get_completion_client),
    settings: Settings = Depends(get_settings),
):
    try:
        feedback = career_ai.analyze_resume(
            client, payload.resume_text, model=settings.openai_chat_model
        )
    except UPSTREAM_ERRORS as exc:
        raise _bad_gateway(exc) from exc
    return ResumeFeedbackResponse(feedback=feedback)


@router.post("/interview-questions", response_model=InterviewQuestionsResponse)
def interview_questions(
    payload: InterviewQuestionsRequest,
    client: OpenAI = Depends(get_completion_client),
    settings: Settings = Depends(get_settings),
):
    try:
        questions = career_ai.generate_interview_questions(
            client,
            payload.job_title,
            payload.company,
            model=settings.openai_chat_model,
        )
    except UPSTREAM_ERRORS as exc:
        raise _bad_gateway(exc) from exc
    return InterviewQuestionsResponse(questions=questions)
