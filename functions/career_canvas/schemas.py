"""
Pydantic request/response schemas for the Career Canvas API.

Create endpoints take the `*Base` document models directly; the schemas here
cover partial updates, sub-record actions and list/AI envelopes.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

from shared.documents import (
    CareerJourneyEntry,
    Certification,
    Education,
    Experience,
    InterviewAnalytics,
    InterviewQuestion,
    MentorAvailability,
    ProjectDuration,
    ResponseEvaluation,
    SalaryRange,
    Story,
    UserPreferences,
)
from shared.types import (
    ApprovalStatus,
    CareerStage,
    ConnectionStatus,
    MentorshipStatus,
    ProjectStatus,
    StoryVisibility,
)


class Pagination(BaseModel):
    total: int
    limit: int
    offset: int
    has_more: bool


class StoryListResponse(BaseModel):
    stories: list[Story]
    pagination: Pagination


class StoryUpdate(BaseModel):
    title: Optional[str] = None
    content: Optional[str] = None
    career_stage: Optional[CareerStage] = None
    tags: Optional[list[str]] = None
    related_skills: Optional[list[str]] = None
    media_urls: Optional[list[str]] = None
    visibility: Optional[StoryVisibility] = None


class CommentRequest(BaseModel):
    user_id: Optional[str] = None
    display_name: Optional[str] = None
    text: str = Field(..., min_length=1, max_length=1000)


class UserUpdate(BaseModel):
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_picture: Optional[str] = None
    microsoft_id: Optional[str] = None
    preferences: Optional[UserPreferences] = None


class CareerProfileUpdate(BaseModel):
    current_role: Optional[str] = None
    current_company: Optional[str] = None
    years_of_experience: Optional[int] = None
    skills: Optional[list[str]] = None
    interests: Optional[list[str]] = None
    career_goals: Optional[list[str]] = None
    industry_preferences: Optional[list[str]] = None
    location_preferences: Optional[list[str]] = None
    salary_range: Optional[SalaryRange] = None
    education: Optional[list[Education]] = None
    experience: Optional[list[Experience]] = None
    certifications: Optional[list[Certification]] = None


class UserProfileUpdate(BaseModel):
    display_name: Optional[str] = None
    email: Optional[str] = None
    department: Optional[str] = None
    job_title: Optional[str] = None
    location: Optional[str] = None
    skills: Optional[list[str]] = None
    years_of_experience: Optional[int] = None
    bio: Optional[str] = None
    profile_picture_url: Optional[str] = None
    career_journey: Optional[list[CareerJourneyEntry]] = None
    mentorship_preferences: Optional[MentorAvailability] = None
    mentorship_goals: Optional[list[str]] = None
    career_goals: Optional[list[str]] = None
    interests: Optional[list[str]] = None


class ProjectUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[ProjectStatus] = None
    required_skills: Optional[list[str]] = None
    duration: Optional[ProjectDuration] = None
    estimated_hours: Optional[float] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    max_participants: Optional[int] = None
    department: Optional[str] = None
    outcomes: Optional[list[str]] = None
    learning_objectives: Optional[list[str]] = None


class ParticipantRequest(BaseModel):
    user_id: str = Field(..., min_length=1)
    display_name: Optional[str] = None
    role: Optional[str] = None


class ApprovalRequest(BaseModel):
    status: ApprovalStatus
    manager_id: Optional[str] = None
    notes: Optional[str] = None


class MentorshipUpdate(BaseModel):
    status: Optional[MentorshipStatus] = None
    focus_areas: Optional[list[str]] = None
    goals: Optional[list[str]] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    meeting_frequency: Optional[str] = None
    notes: Optional[str] = None


class DeleteResponse(BaseModel):
    status: Literal["ok"]


class ConnectionResponse(BaseModel):
    success: bool
    collections_count: int
    collections: list[str]


class MentorRecommendationRequest(BaseModel):
    user_profile: dict
    career_goals: dict


class MentorRecommendationResponse(BaseModel):
    recommendations: Any


class CareerPathsRequest(BaseModel):
    user_profile: dict
    career_goals: Optional[dict] = None


class CareerPathsResponse(BaseModel):
    career_paths: Any


class CareerAdviceRequest(BaseModel):
    user_profile: dict


class CareerAdviceResponse(BaseModel):
    advice: str


class ResumeFeedbackRequest(BaseModel):
    resume_text: str = Field(..., min_length=1, max_length=20000)


class ResumeFeedbackResponse(BaseModel):
    feedback: str


class InterviewQuestionsRequest(BaseModel):
    job_title: str = Field(..., min_length=1, max_length=200)
    company: Optional[str] = None


class InterviewQuestionsResponse(BaseModel):
    questions: list[str]


class ConnectionStatusUpdate(BaseModel):
    status: ConnectionStatus


class InterviewResponseRequest(BaseModel):
    question_id: str = Field(..., min_length=1)
    answer: str = Field(..., min_length=1)
    score: float = Field(..., ge=0, le=100)
    feedback: str = ""
    strengths: list[str] = Field(default_factory=list)
    improvements: list[str] = Field(default_factory=list)
    confidence: float = Field(0, ge=0, le=100)


class CompleteInterviewRequest(BaseModel):
    overall_score: float = Field(..., ge=0, le=100)
    feedback: str = Field(..., min_length=1)


class InterviewAnalyticsResponse(InterviewAnalytics):
    # Average score per question category over recent completed sessions.
    category_performance: dict[str, float] = Field(default_factory=dict)
    recent_sessions_count: int = 0


class InterviewQuestionRequest(BaseModel):
    topic: str = Field(..., min_length=1, max_length=100)
    previous_questions: list[str] = Field(default_factory=list)


class InterviewQuestionResponse(BaseModel):
    question: InterviewQuestion
    source: Literal["ai", "fallback"]


class EvaluateResponseRequest(BaseModel):
    question: str = Field(..., min_length=1)
    answer: str = Field(..., min_length=1, max_length=20000)
    category: str = "general"


class EvaluateResponseResponse(BaseModel):
    evaluation: ResponseEvaluation
    source: Literal["ai", "fallback"]
