# Copyright 2025 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# ==============================================================================

"""
Document schemas for Career Canvas.

Each `Document` subclass corresponds to one collection. Building an instance
validates it, so a document that exists in memory is always a valid write.
The `*Base` models hold the client-writable fields and double as request
bodies for the create endpoints.
"""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from shared.types import (
    ApprovalStatus,
    CareerStage,
    ConnectionStatus,
    DurationUnit,
    InterviewDifficulty,
    MentorshipStatus,
    ProjectStatus,
    StoryVisibility,
)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return uuid.uuid4().hex


def _collect_text(value: Any, path: List[str]) -> List[str]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        collected: List[str] = []
        for item in value:
            collected.extend(_collect_text(item, path))
        return collected
    if not path:
        if isinstance(value, Enum):
            return [str(value.value)]
        return [str(value)]
    head, rest = path[0], path[1:]
    if isinstance(value, dict):
        return _collect_text(value.get(head), rest)
    return _collect_text(getattr(value, head, None), rest)


class DocumentModel(BaseModel):
    """Shared config for documents and their embedded sub-records."""

    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")


class Document(DocumentModel):
    """A stored record with an id and write timestamps."""

    # Collection name, also used as the SQL table name.
    collection: ClassVar[str] = ""
    # Fields that can be used as `find` filters.
    key_fields: ClassVar[Tuple[str, ...]] = ()
    unique_fields: ClassVar[Tuple[str, ...]] = ()
    # Dotted paths matched by `search`.
    text_index_fields: ClassVar[Tuple[str, ...]] = ()

    id: str = Field(default_factory=new_id)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    def with_changes(self, changes: Dict[str, Any]) -> "Document":
        """
        Returns a re-validated copy with top-level fields replaced.

        `id` and `created_at` are never overwritten; `updated_at` is bumped.
        Raises pydantic.ValidationError if the result violates the schema.
        """
        payload = self.model_dump()
        payload.update(changes)
        payload["id"] = self.id
        payload["created_at"] = self.created_at
        payload["updated_at"] = utcnow()
        return type(self).model_validate(payload)

    def key_values(self) -> Dict[str, Any]:
        payload = self.model_dump(mode="json", include=set(self.key_fields))
        return {name: payload.get(name) for name in self.key_fields}

    def search_text(self) -> str:
        parts: List[str] = []
        for path in self.text_index_fields:
            parts.extend(_collect_text(self, path.split(".")))
        return " ".join(part for part in parts if part).lower()


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


class UserPreferences(DocumentModel):
    notifications: bool = True
    public_profile: bool = False
    data_sharing: bool = False


class UserBase(DocumentModel):
    email: str = Field(..., min_length=1, description="Unique, stored lowercase")
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    profile_picture: Optional[str] = None
    microsoft_id: Optional[str] = Field(
        None, description="Microsoft identity id, unique when set"
    )
    preferences: UserPreferences = Field(default_factory=UserPreferences)

    @field_validator("email")
    @classmethod
    def _lowercase_email(cls, value: str) -> str:
        return value.lower()

    @field_validator("microsoft_id")
    @classmethod
    def _blank_id_is_missing(cls, value: Optional[str]) -> Optional[str]:
        return value or None


class User(UserBase, Document):
    collection: ClassVar[str] = "users"
    key_fields: ClassVar[Tuple[str, ...]] = ("email", "microsoft_id")
    unique_fields: ClassVar[Tuple[str, ...]] = ("email", "microsoft_id")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


# ---------------------------------------------------------------------------
# Career profiles
# ---------------------------------------------------------------------------


class SalaryRange(DocumentModel):
    min: Optional[float] = Field(None, ge=0)
    max: Optional[float] = Field(None, ge=0)
    currency: str = "USD"


class Education(DocumentModel):
    institution: str = Field(..., min_length=1)
    degree: str = Field(..., min_length=1)
    field: str = Field(..., min_length=1)
    graduation_year: int


class Experience(DocumentModel):
    company: str = Field(..., min_length=1)
    role: str = Field(..., min_length=1)
    start_date: datetime
    end_date: Optional[datetime] = None
    description: Optional[str] = None
    achievements: List[str] = Field(default_factory=list)


class Certification(DocumentModel):
    name: str = Field(..., min_length=1)
    issuer: str = Field(..., min_length=1)
    issue_date: datetime
    expiration_date: Optional[datetime] = None
    credential_id: Optional[str] = None


class CareerProfileBase(DocumentModel):
    user_id: str = Field(..., min_length=1, description="Owning user id")
    current_role: Optional[str] = None
    current_company: Optional[str] = None
    years_of_experience: int = Field(0, ge=0)
    skills: List[str] = Field(default_factory=list)
    interests: List[str] = Field(default_factory=list)
    career_goals: List[str] = Field(default_factory=list)
    industry_preferences: List[str] = Field(default_factory=list)
    location_preferences: List[str] = Field(default_factory=list)
    salary_range: Optional[SalaryRange] = None
    education: List[Education] = Field(default_factory=list)
    experience: List[Experience] = Field(default_factory=list)
    certifications: List[Certification] = Field(default_factory=list)


class CareerProfile(CareerProfileBase, Document):
    collection: ClassVar[str] = "career_profiles"
    key_fields: ClassVar[Tuple[str, ...]] = ("user_id",)
    unique_fields: ClassVar[Tuple[str, ...]] = ("user_id",)
    text_index_fields: ClassVar[Tuple[str, ...]] = (
        "current_role",
        "skills",
        "interests",
    )


# ---------------------------------------------------------------------------
# User profiles (directory entries used for mentor discovery)
# ---------------------------------------------------------------------------


class CareerJourneyEntry(DocumentModel):
    role: Optional[str] = None
    company: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    description: Optional[str] = None
    skills: List[str] = Field(default_factory=list)
    achievements: List[str] = Field(default_factory=list)


class MentorAvailability(DocumentModel):
    is_available_as_mentor: bool = False
    mentorship_areas: List[str] = Field(default_factory=list)
    mentorship_capacity: Optional[int] = Field(None, ge=0)
    preferred_meeting_frequency: Optional[str] = None


class UserProfileBase(DocumentModel):
    user_id: str = Field(..., min_length=1)
    display_name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=1)
    department: Optional[str] = None
    job_title: Optional[str] = None
    location: Optional[str] = None
    skills: List[str] = Field(default_factory=list)
    years_of_experience: Optional[int] = Field(None, ge=0)
    bio: Optional[str] = None
    profile_picture_url: Optional[str] = None
    career_journey: List[CareerJourneyEntry] = Field(default_factory=list)
    mentorship_preferences: MentorAvailability = Field(
        default_factory=MentorAvailability
    )
    mentorship_goals: List[str] = Field(default_factory=list)
    career_goals: List[str] = Field(default_factory=list)
    interests: List[str] = Field(default_factory=list)

    @field_validator("email")
    @classmethod
    def _lowercase_email(cls, value: str) -> str:
        return value.lower()


class UserProfile(UserProfileBase, Document):
    collection: ClassVar[str] = "user_profiles"
    key_fields: ClassVar[Tuple[str, ...]] = ("user_id", "email")
    unique_fields: ClassVar[Tuple[str, ...]] = ("user_id", "email")
    text_index_fields: ClassVar[Tuple[str, ...]] = (
        "display_name",
        "job_title",
        "skills",
        "department",
        "mentorship_preferences.mentorship_areas",
    )


# ---------------------------------------------------------------------------
# Stories
# ---------------------------------------------------------------------------


class StoryComment(DocumentModel):
    user_id: Optional[str] = None
    display_name: Optional[str] = None
    text: Optional[str] = None
    timestamp: datetime = Field(default_factory=utcnow)


class StoryBase(DocumentModel):
    author_id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1)
    career_stage: CareerStage
    tags: List[str] = Field(default_factory=list)
    related_skills: List[str] = Field(default_factory=list)
    media_urls: List[str] = Field(default_factory=list)
    likes: int = Field(0, ge=0)
    comments: List[StoryComment] = Field(default_factory=list)
    visibility: StoryVisibility = StoryVisibility.ORGANIZATION


class Story(StoryBase, Document):
    collection: ClassVar[str] = "stories"
    key_fields: ClassVar[Tuple[str, ...]] = (
        "author_id",
        "career_stage",
        "visibility",
    )
    text_index_fields: ClassVar[Tuple[str, ...]] = (
        "title",
        "content",
        "tags",
        "related_skills",
    )


# ---------------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------------


class ManagerApproval(DocumentModel):
    status: ApprovalStatus = ApprovalStatus.PENDING
    manager_id: Optional[str] = None
    notes: Optional[str] = None
    date: Optional[datetime] = None


class ProjectParticipant(DocumentModel):
    user_id: Optional[str] = None
    display_name: Optional[str] = None
    role: Optional[str] = None
    join_date: Optional[datetime] = None
    manager_approval: ManagerApproval = Field(default_factory=ManagerApproval)


class ProjectDuration(DocumentModel):
    value: Optional[float] = Field(None, ge=0)
    unit: DurationUnit = DurationUnit.WEEKS


class ProjectBase(DocumentModel):
    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    creator_id: str = Field(..., min_length=1)
    status: ProjectStatus = ProjectStatus.OPEN
    required_skills: List[str] = Field(default_factory=list)
    duration: Optional[ProjectDuration] = None
    estimated_hours: Optional[float] = Field(None, ge=0)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    max_participants: Optional[int] = Field(None, ge=0)
    participants: List[ProjectParticipant] = Field(default_factory=list)
    department: Optional[str] = None
    outcomes: List[str] = Field(default_factory=list)
    learning_objectives: List[str] = Field(default_factory=list)


class Project(ProjectBase, Document):
    collection: ClassVar[str] = "projects"
    key_fields: ClassVar[Tuple[str, ...]] = ("creator_id", "status")
    text_index_fields: ClassVar[Tuple[str, ...]] = (
        "title",
        "description",
        "required_skills",
        "department",
    )

    def participant(self, user_id: str) -> Optional[ProjectParticipant]:
        for entry in self.participants:
            if entry.user_id == user_id:
                return entry
        return None


# ---------------------------------------------------------------------------
# Mentorships
# ---------------------------------------------------------------------------


class MentorshipSession(DocumentModel):
    date: Optional[datetime] = None
    duration: Optional[int] = Field(None, ge=0, description="Minutes")
    notes: Optional[str] = None
    completed: bool = False


class ProgressEntry(DocumentModel):
    date: datetime = Field(default_factory=utcnow)
    milestone: Optional[str] = None
    achieved: bool = False


class MentorshipFeedback(DocumentModel):
    mentor_rating: Optional[int] = Field(None, ge=1, le=5)
    mentee_rating: Optional[int] = Field(None, ge=1, le=5)
    mentor_feedback: Optional[str] = None
    mentee_feedback: Optional[str] = None


class MentorshipBase(DocumentModel):
    mentor_id: str = Field(..., min_length=1)
    mentee_id: str = Field(..., min_length=1)
    status: MentorshipStatus = MentorshipStatus.REQUESTED
    focus_areas: List[str] = Field(default_factory=list)
    goals: List[str] = Field(default_factory=list)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    meeting_frequency: Optional[str] = None
    notes: Optional[str] = None
    sessions: List[MentorshipSession] = Field(default_factory=list)
    progress: List[ProgressEntry] = Field(default_factory=list)
    feedback: Optional[MentorshipFeedback] = None


class Mentorship(MentorshipBase, Document):
    collection: ClassVar[str] = "mentorships"
    # The (mentor_id, mentee_id) pair is indexed but not unique.
    key_fields: ClassVar[Tuple[str, ...]] = ("mentor_id", "mentee_id", "status")


# ---------------------------------------------------------------------------
# Mentor connections and mentorship preferences
# ---------------------------------------------------------------------------


DEFAULT_CONNECTION_MESSAGE = "Connection request"


class ConnectionRequestBase(DocumentModel):
    user_id: str = Field(..., min_length=1, description="Requesting user id")
    mentor_id: str = Field(..., min_length=1)
    message: str = DEFAULT_CONNECTION_MESSAGE

    @field_validator("message", mode="before")
    @classmethod
    def _default_message(cls, value: Any) -> Any:
        return value or DEFAULT_CONNECTION_MESSAGE


class ConnectionRequest(ConnectionRequestBase, Document):
    collection: ClassVar[str] = "connection_requests"
    key_fields: ClassVar[Tuple[str, ...]] = ("user_id", "mentor_id", "status")

    status: ConnectionStatus = ConnectionStatus.PENDING


class MatchPreferences(DocumentModel):
    industries: List[str] = Field(default_factory=list)
    skills: List[str] = Field(default_factory=list)
    career_levels: List[str] = Field(default_factory=list)
    meeting_frequency: str = "monthly"
    communication_style: str = "casual"
    goals: List[str] = Field(default_factory=list)
    time_commitment: str = "1-2-hours"
    remote_preference: str = "hybrid"


class PreferredAvailability(DocumentModel):
    timezone: str = "UTC"
    preferred_times: List[str] = Field(default_factory=list)
    start_date: datetime = Field(default_factory=utcnow)
    end_date: Optional[datetime] = None


class MentorshipPreferencesBase(DocumentModel):
    user_id: str = Field(..., min_length=1)
    mentorship_type: str = Field(..., min_length=1, description="e.g. mentor, mentee")
    interests: List[str] = Field(default_factory=list)
    preferred_departments: List[str] = Field(default_factory=list)
    availability_type: str = "flexible"
    session_frequency: str = "bi-weekly"
    communication_style: str = "mixed"
    goals: str = ""
    experience: str = ""
    preferences: MatchPreferences = Field(default_factory=MatchPreferences)
    availability: PreferredAvailability = Field(default_factory=PreferredAvailability)
    bio: str = ""
    is_active: bool = True


class MentorshipPreferences(MentorshipPreferencesBase, Document):
    """One preferences record per user; submitting again replaces it."""

    collection: ClassVar[str] = "mentorship_preferences"
    key_fields: ClassVar[Tuple[str, ...]] = ("user_id",)
    unique_fields: ClassVar[Tuple[str, ...]] = ("user_id",)


# ---------------------------------------------------------------------------
# Mock interviews
# ---------------------------------------------------------------------------


# Number of scores kept in InterviewAnalytics.progress_trend.
PROGRESS_TREND_LENGTH = 20


class InterviewQuestion(DocumentModel):
    id: str = Field(default_factory=new_id)
    question: str = Field(..., min_length=1)
    category: str = "general"
    difficulty: InterviewDifficulty = InterviewDifficulty.MEDIUM


class ResponseEvaluation(DocumentModel):
    score: float = Field(..., ge=0, le=100)
    feedback: str = ""
    strengths: List[str] = Field(default_factory=list)
    improvements: List[str] = Field(default_factory=list)
    confidence: float = Field(0, ge=0, le=100)


class InterviewResponse(ResponseEvaluation):
    question_id: str = Field(..., min_length=1)
    answer: str = Field(..., min_length=1)
    timestamp: datetime = Field(default_factory=utcnow)


class InterviewSessionBase(DocumentModel):
    user_id: str = Field(..., min_length=1)
    topic: str = Field(..., min_length=1)
    questions: List[InterviewQuestion] = Field(..., min_length=1)


class InterviewSession(InterviewSessionBase, Document):
    collection: ClassVar[str] = "interview_sessions"
    key_fields: ClassVar[Tuple[str, ...]] = ("user_id",)

    start_time: datetime = Field(default_factory=utcnow)
    end_time: Optional[datetime] = None
    responses: List[InterviewResponse] = Field(default_factory=list)
    overall_score: Optional[float] = Field(None, ge=0, le=100)
    feedback: Optional[str] = None

    @property
    def completed(self) -> bool:
        return self.end_time is not None

    def question(self, question_id: str) -> Optional[InterviewQuestion]:
        for entry in self.questions:
            if entry.id == question_id:
                return entry
        return None


class ScorePoint(DocumentModel):
    date: datetime = Field(default_factory=utcnow)
    score: float


class InterviewAnalyticsBase(DocumentModel):
    user_id: str = Field(..., min_length=1)
    total_interviews: int = Field(0, ge=0)
    average_score: float = 0
    last_interview_date: Optional[datetime] = None
    progress_trend: List[ScorePoint] = Field(default_factory=list)


class InterviewAnalytics(InterviewAnalyticsBase, Document):
    """Running interview statistics for one user."""

    collection: ClassVar[str] = "user_interview_analytics"
    key_fields: ClassVar[Tuple[str, ...]] = ("user_id",)
    unique_fields: ClassVar[Tuple[str, ...]] = ("user_id",)

    def scored(self, score: float, when: Optional[datetime] = None) -> Dict[str, Any]:
        """
        Returns the changes that record one more completed interview.

        The average is kept to two decimals and only the most recent
        PROGRESS_TREND_LENGTH scores stay in the trend.
        """
        when = when or utcnow()
        total = self.total_interviews + 1
        average = (self.average_score * self.total_interviews + score) / total
        trend = [*self.progress_trend, ScorePoint(date=when, score=score)]
        return {
            "total_interviews": total,
            "average_score": round(average, 2),
            "last_interview_date": when,
            "progress_trend": trend[-PROGRESS_TREND_LENGTH:],
        }


DOCUMENT_TYPES = (
    User,
    CareerProfile,
    UserProfile,
    Story,
    Project,
    Mentorship,
    ConnectionRequest,
    MentorshipPreferences,
    InterviewSession,
    InterviewAnalytics,
)
