"""
HTTP routes for users, profiles, the mentor directory and mentor connections.
"""

from __future__ import annotations

import logging
from typing import Any, Literal

from fastapi import APIRouter, Depends, HTTPException, Query

from career_canvas.db import DbClient
from career_canvas.dependencies import get_db_client
from career_canvas.routes import (
    delete_or_404,
    get_or_404,
    insert_or_409,
    update_or_error,
)
from career_canvas.schemas import (
    CareerProfileUpdate,
    ConnectionStatusUpdate,
    DeleteResponse,
    UserProfileUpdate,
    UserUpdate,
)
from shared.documents import (
    CareerProfile,
    CareerProfileBase,
    ConnectionRequest,
    ConnectionRequestBase,
    MentorshipPreferences,
    MentorshipPreferencesBase,
    User,
    UserBase,
    UserProfile,
    UserProfileBase,
)
from shared.types import ConnectionStatus

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


@router.post("/users", response_model=User, status_code=201)
def create_user(payload: UserBase, db: DbClient = Depends(get_db_client)):
    user = insert_or_409(db, User.model_validate(payload.model_dump()))
    logger.info("User created with ID: %s", user.id)
    return user


@router.get("/users", response_model=list[User])
def list_users(
    email: str | None = Query(None),
    microsoft_id: str | None = Query(None),
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: DbClient = Depends(get_db_client),
):
    filters: dict[str, Any] = {}
    if email:
        filters["email"] = email.strip().lower()
    if microsoft_id:
        filters["microsoft_id"] = microsoft_id
    return db.find(User, limit=limit, offset=offset, **filters)


@router.get("/users/{user_id}", response_model=User)
def get_user(user_id: str, db: DbClient = Depends(get_db_client)):
    return get_or_404(db, User, user_id)


@router.patch("/users/{user_id}", response_model=User)
def update_user(
    user_id: str, payload: UserUpdate, db: DbClient = Depends(get_db_client)
):
    return update_or_error(db, User, user_id, payload.model_dump(exclude_unset=True))


@router.delete("/users/{user_id}", response_model=DeleteResponse)
def delete_user(user_id: str, db: DbClient = Depends(get_db_client)):
    return delete_or_404(db, User, user_id)


# ---------------------------------------------------------------------------
# Career profiles
# ---------------------------------------------------------------------------


@router.post("/career-profiles", response_model=CareerProfile, status_code=201)
def create_career_profile(
    payload: CareerProfileBase, db: DbClient = Depends(get_db_client)
):
    return insert_or_409(db, CareerProfile.model_validate(payload.model_dump()))


@router.get("/career-profiles", response_model=list[CareerProfile])
def list_career_profiles(
    user_id: str | None = Query(None),
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: DbClient = Depends(get_db_client),
):
    filters = {"user_id": user_id} if user_id else {}
    return db.find(CareerProfile, limit=limit, offset=offset, **filters)


@router.get("/career-profiles/search", response_model=list[CareerProfile])
def search_career_profiles(
    q: str = Query(..., min_length=1),
    limit: int = Query(20, ge=1, le=100),
    db: DbClient = Depends(get_db_client),
):
    return db.search(CareerProfile, q, limit=limit)


@router.get("/career-profiles/{profile_id}", response_model=CareerProfile)
def get_career_profile(profile_id: str, db: DbClient = Depends(get_db_client)):
    return get_or_404(db, CareerProfile, profile_id)


@router.patch("/career-profiles/{profile_id}", response_model=CareerProfile)
def update_career_profile(
    profile_id: str,
    payload: CareerProfileUpdate,
    db: DbClient = Depends(get_db_client),
):
    return update_or_error(
        db, CareerProfile, profile_id, payload.model_dump(exclude_unset=True)
    )


@router.delete("/career-profiles/{profile_id}", response_model=DeleteResponse)
def delete_career_profile(profile_id: str, db: DbClient = Depends(get_db_client)):
    return delete_or_404(db, CareerProfile, profile_id)


# ---------------------------------------------------------------------------
# User profiles
# ---------------------------------------------------------------------------


@router.post("/profiles", response_model=UserProfile, status_code=201)
def create_profile(payload: UserProfileBase, db: DbClient = Depends(get_db_client)):
    return insert_or_409(db, UserProfile.model_validate(payload.model_dump()))


@router.get("/profiles", response_model=list[UserProfile])
def list_profiles(
    user_id: str | None = Query(None),
    email: str | None = Query(None),
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: DbClient = Depends(get_db_client),
):
    filters: dict[str, Any] = {}
    if user_id:
        filters["user_id"] = user_id
    if email:
        filters["email"] = email.strip().lower()
    return db.find(UserProfile, limit=limit, offset=offset, **filters)


def _csv(value: str | None) -> list[str]:
    if not value:
        return []
    return [item.strip().lower() for item in value.split(",") if item.strip()]


MENTOR_LIMIT = 100


def _matches_search(profile: UserProfile, needle: str) -> bool:
    fields = [
        profile.display_name,
        profile.job_title,
        profile.department,
        profile.bio,
        *profile.skills,
    ]
    return any(needle in (field or "").lower() for field in fields)


@router.get("/profiles/mentors", response_model=list[UserProfile])
def list_mentors(
    area: str | None = Query(None, description="Mentorship area to match"),
    departments: str | None = Query(None, description="Comma-separated"),
    skills: str | None = Query(None, description="Comma-separated, any may match"),
    min_experience: int = Query(0, ge=0),
    max_experience: int = Query(50, ge=0),
    search: str | None = Query(None),
    sort_by: Literal[
        "display_name", "years_of_experience", "created_at"
    ] = Query("years_of_experience"),
    sort_order: Literal["asc", "desc"] = Query("desc"),
    db: DbClient = Depends(get_db_client),
):
    """
    Lists profiles available as mentors. Profiles without years of experience
    count as 0 for the experience range; at most MENTOR_LIMIT are returned.
    """
    wanted_area = area.strip().lower() if area else None
    wanted_departments = set(_csv(departments))
    wanted_skills = set(_csv(skills))
    needle = search.strip().lower() if search else None

    mentors = []
    for profile in db.find(UserProfile):
        prefs = profile.mentorship_preferences
        if not prefs.is_available_as_mentor:
            continue
        if wanted_area and wanted_area not in (
            a.lower() for a in prefs.mentorship_areas
        ):
            continue
        if wanted_departments and (profile.department or "").lower() not in (
            wanted_departments
        ):
            continue
        if wanted_skills and not wanted_skills & {s.lower() for s in profile.skills}:
            continue
        experience = profile.years_of_experience or 0
        if not min_experience <= experience <= max_experience:
            continue
        if needle and not _matches_search(profile, needle):
            continue
        mentors.append(profile)

    def sort_key(profile: UserProfile):
        value = getattr(profile, sort_by)
        if sort_by == "display_name":
            return value.lower()
        if sort_by == "years_of_experience":
            return value or 0
        return value

    mentors.sort(key=sort_key, reverse=sort_order == "desc")
    logger.info("Found %d available mentors", len(mentors))
    return mentors[:MENTOR_LIMIT]


@router.get("/profiles/search", response_model=list[UserProfile])
def search_profiles(
    q: str = Query(..., min_length=1),
    limit: int = Query(20, ge=1, le=100),
    db: DbClient = Depends(get_db_client),
):
    return db.search(UserProfile, q, limit=limit)


@router.get("/profiles/{profile_id}", response_model=UserProfile)
def get_profile(profile_id: str, db: DbClient = Depends(get_db_client)):
    return get_or_404(db, UserProfile, profile_id)


@router.patch("/profiles/{profile_id}", response_model=UserProfile)
def update_profile(
    profile_id: str,
    payload: UserProfileUpdate,
    db: DbClient = Depends(get_db_client),
):
    return update_or_error(
        db, UserProfile, profile_id, payload.model_dump(exclude_unset=True)
    )


@router.delete("/profiles/{profile_id}", response_model=DeleteResponse)
def delete_profile(profile_id: str, db: DbClient = Depends(get_db_client)):
    return delete_or_404(db, UserProfile, profile_id)


# ---------------------------------------------------------------------------
# Mentor connection requests
# ---------------------------------------------------------------------------


@router.post(
    "/connection-requests", response_model=ConnectionRequest, status_code=201
)
def submit_connection_request(
    payload: ConnectionRequestBase, db: DbClient = Depends(get_db_client)
):
    request = insert_or_409(db, ConnectionRequest.model_validate(payload.model_dump()))
    logger.info(
        "Connection request %s from %s to mentor %s",
        request.id,
        request.user_id,
        request.mentor_id,
    )
    return request


@router.get("/connection-requests", response_model=list[ConnectionRequest])
def list_connection_requests(
    user_id: str | None = Query(None),
    mentor_id: str | None = Query(None),
    status: ConnectionStatus | None = Query(None),
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: DbClient = Depends(get_db_client),
):
    filters: dict[str, Any] = {}
    if user_id:
        filters["user_id"] = user_id
    if mentor_id:
        filters["mentor_id"] = mentor_id
    if status:
        filters["status"] = status
    return db.find(ConnectionRequest, limit=limit, offset=offset, **filters)


@router.patch("/connection-requests/{request_id}", response_model=ConnectionRequest)
def update_connection_request(
    request_id: str,
    payload: ConnectionStatusUpdate,
    db: DbClient = Depends(get_db_client),
):
    return update_or_error(db, ConnectionRequest, request_id, payload.model_dump())


# ---------------------------------------------------------------------------
# Mentorship preferences
# ---------------------------------------------------------------------------


@router.post(
    "/mentorship-preferences",
    response_model=MentorshipPreferences,
    status_code=201,
)
def submit_mentorship_preferences(
    payload: MentorshipPreferencesBase, db: DbClient = Depends(get_db_client)
):
    """Creates the user's preferences, or replaces every field of existing ones."""
    found = db.find(MentorshipPreferences, limit=1, user_id=payload.user_id)
    if found:
        logger.info("Replacing mentorship preferences for %s", payload.user_id)
        return update_or_error(
            db, MentorshipPreferences, found[0].id, payload.model_dump()
        )
    return insert_or_409(
        db, MentorshipPreferences.model_validate(payload.model_dump())
    )


@router.get(
    "/mentorship-preferences/{user_id}", response_model=MentorshipPreferences
)
def get_mentorship_preferences(user_id: str, db: DbClient = Depends(get_db_client)):
    found = db.find(MentorshipPreferences, limit=1, user_id=user_id)
    if not found:
        raise HTTPException(status_code=404, detail="No preferences found for user")
    return found[0]
