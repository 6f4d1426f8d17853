"""
HTTP routes for stories, projects and mentorships.
"""

from __future__ import annotations

import logging
from typing import Any, Type

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import PlainTextResponse
from pydantic import ValidationError

from career_canvas.db import DbClient, DuplicateKeyError
from career_canvas.dependencies import get_db_client
from career_canvas.schemas import (
    ApprovalRequest,
    CommentRequest,
    ConnectionResponse,
    DeleteResponse,
    MentorshipUpdate,
    Pagination,
    ParticipantRequest,
    ProjectUpdate,
    StoryListResponse,
    StoryUpdate,
)
from shared.documents import (
    Document,
    ManagerApproval,
    Mentorship,
    MentorshipBase,
    MentorshipFeedback,
    MentorshipSession,
    ProgressEntry,
    Project,
    ProjectBase,
    ProjectParticipant,
    Story,
    StoryBase,
    StoryComment,
    utcnow,
)
from shared.types import (
    CareerStage,
    MentorshipStatus,
    ProjectStatus,
    StoryVisibility,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def get_or_404(db: DbClient, doc_type: Type[Document], doc_id: str):
    doc = db.get(doc_type, doc_id)
    if not doc:
        logger.info("%s %s not found", doc_type.__name__, doc_id)
        raise HTTPException(status_code=404, detail=f"{doc_type.__name__} not found")
    return doc


def insert_or_409(db: DbClient, doc: Document):
    try:
        return db.insert(doc)
    except DuplicateKeyError as exc:
        logger.info("Rejected duplicate %s.%s", exc.collection, exc.key)
        raise HTTPException(status_code=409, detail=str(exc)) from exc


def update_or_error(
    db: DbClient, doc_type: Type[Document], doc_id: str, changes: dict[str, Any]
):
    """Apply `changes`, mapping schema violations to 422 and key clashes to 409."""
    try:
        updated = db.update(doc_type, doc_id, changes)
    except ValidationError as exc:
        raise HTTPException(
            status_code=422,
            detail=exc.errors(
                include_url=False, include_context=False, include_input=False
            ),
        ) from exc
    except DuplicateKeyError as exc:
        logger.info("Rejected duplicate %s.%s", exc.collection, exc.key)
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    if updated is None:
        raise HTTPException(status_code=404, detail=f"{doc_type.__name__} not found")
    return updated


def delete_or_404(db: DbClient, doc_type: Type[Document], doc_id: str) -> DeleteResponse:
    if not db.delete(doc_type, doc_id):
        raise HTTPException(status_code=404, detail=f"{doc_type.__name__} not found")
    logger.info("%s %s deleted", doc_type.__name__, doc_id)
    return DeleteResponse(status="ok")


@router.api_route("/hello", methods=["GET", "POST"], response_class=PlainTextResponse)
async def hello(request: Request, name: str | None = Query(None)):
    logger.info('Http function processed request for url "%s"', request.url)
    body = (await request.body()).decode("utf-8", errors="replace")
    return f"Hello, {name or body or 'World'}! Welcome to Career Canvas API."


@router.get("/test-connection", response_model=ConnectionResponse)
def test_connection(db: DbClient = Depends(get_db_client)):
    try:
        collections = db.list_collections()
    except Exception as exc:
        logger.exception("Database connection test failed: %s", exc)
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    return ConnectionResponse(
        success=True, collections_count=len(collections), collections=collections
    )


# ---------------------------------------------------------------------------
# Stories
# ---------------------------------------------------------------------------


@router.get("/stories", response_model=StoryListResponse)
def list_stories(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    visibility: StoryVisibility = Query(StoryVisibility.PUBLIC),
    career_stage: CareerStage | None = Query(None),
    author_id: str | None = Query(None),
    db: DbClient = Depends(get_db_client),
):
    filters: dict[str, Any] = {"visibility": visibility}
    if career_stage:
        filters["career_stage"] = career_stage
    if author_id:
        filters["author_id"] = author_id

    stories = db.find(Story, limit=limit, offset=offset, **filters)
    total = db.count(Story, **filters)
    logger.info("Retrieved %d stories", len(stories))
    return StoryListResponse(
        stories=stories,
        pagination=Pagination(
            total=total,
            limit=limit,
            offset=offset,
            has_more=offset + limit < total,
        ),
    )


@router.post("/stories", response_model=Story, status_code=201)
def submit_story(payload: StoryBase, db: DbClient = Depends(get_db_client)):
    story = insert_or_409(db, Story.model_validate(payload.model_dump()))
    logger.info("Story inserted with ID: %s", story.id)
    return story


@router.get("/stories/search", response_model=list[Story])
def search_stories(
    q: str = Query(..., min_length=1),
    limit: int = Query(20, ge=1, le=100),
    db: DbClient = Depends(get_db_client),
):
    return db.search(Story, q, limit=limit)


@router.get("/stories/{story_id}", response_model=Story)
def get_story(story_id: str, db: DbClient = Depends(get_db_client)):
    return get_or_404(db, Story, story_id)


def _owned_story(db: DbClient, story_id: str, author_id: str | None) -> Story:
    story = get_or_404(db, Story, story_id)
    if author_id and story.author_id != author_id:
        raise HTTPException(
            status_code=404,
            detail="Story not found or you do not have permission to change it",
        )
    return story


@router.patch("/stories/{story_id}", response_model=Story)
def update_story(
    story_id: str,
    payload: StoryUpdate,
    author_id: str | None = Query(None),
    db: DbClient = Depends(get_db_client),
):
    _owned_story(db, story_id, author_id)
    story = update_or_error(
        db, Story, story_id, payload.model_dump(exclude_unset=True)
    )
    logger.info("Story updated successfully: %s", story_id)
    return story


@router.delete("/stories/{story_id}", response_model=DeleteResponse)
def delete_story(
    story_id: str,
    author_id: str | None = Query(None),
    db: DbClient = Depends(get_db_client),
):
    _owned_story(db, story_id, author_id)
    return delete_or_404(db, Story, story_id)


@router.post("/stories/{story_id}/comments", response_model=Story, status_code=201)
def add_story_comment(
    story_id: str, payload: CommentRequest, db: DbClient = Depends(get_db_client)
):
    story = get_or_404(db, Story, story_id)
    comment = StoryComment(**payload.model_dump())
    return update_or_error(
        db, Story, story_id, {"comments": [*story.comments, comment]}
    )


@router.post("/stories/{story_id}/like", response_model=Story)
def like_story(story_id: str, db: DbClient = Depends(get_db_client)):
    story = get_or_404(db, Story, story_id)
    return update_or_error(db, Story, story_id, {"likes": story.likes + 1})


# ---------------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------------


@router.get("/projects", response_model=list[Project])
def list_projects(
    status: ProjectStatus | None = Query(None),
    creator_id: str | None = Query(None),
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: DbClient = Depends(get_db_client),
):
    filters: dict[str, Any] = {}
    if status:
        filters["status"] = status
    if creator_id:
        filters["creator_id"] = creator_id
    return db.find(Project, limit=limit, offset=offset, **filters)


@router.post("/projects", response_model=Project, status_code=201)
def create_project(payload: ProjectBase, db: DbClient = Depends(get_db_client)):
    project = insert_or_409(db, Project.model_validate(payload.model_dump()))
    logger.info("Project created with ID: %s", project.id)
    return project


@router.get("/projects/search", response_model=list[Project])
def search_projects(
    q: str = Query(..., min_length=1),
    limit: int = Query(20, ge=1, le=100),
    db: DbClient = Depends(get_db_client),
):
    return db.search(Project, q, limit=limit)


@router.get("/projects/{project_id}", response_model=Project)
def get_project(project_id: str, db: DbClient = Depends(get_db_client)):
    return get_or_404(db, Project, project_id)


@router.patch("/projects/{project_id}", response_model=Project)
def update_project(
    project_id: str, payload: ProjectUpdate, db: DbClient = Depends(get_db_client)
):
    return update_or_error(
        db, Project, project_id, payload.model_dump(exclude_unset=True)
    )


@router.delete("/projects/{project_id}", response_model=DeleteResponse)
def delete_project(project_id: str, db: DbClient = Depends(get_db_client)):
    return delete_or_404(db, Project, project_id)


@router.post(
    "/projects/{project_id}/participants", response_model=Project, status_code=201
)
def join_project(
    project_id: str,
    payload: ParticipantRequest,
    db: DbClient = Depends(get_db_client),
):
    project = get_or_404(db, Project, project_id)
    if project.participant(payload.user_id):
        raise HTTPException(status_code=409, detail="User already joined this project")
    if (
        project.max_participants is not None
        and len(project.participants) >= project.max_participants
    ):
        raise HTTPException(status_code=409, detail="Project is full")

    participant = ProjectParticipant(**payload.model_dump(), join_date=utcnow())
    logger.info("User %s joined project %s", payload.user_id, project_id)
    return update_or_error(
        db, Project, project_id, {"participants": [*project.participants, participant]}
    )


@router.put(
    "/projects/{project_id}/participants/{user_id}/approval", response_model=Project
)
def set_participant_approval(
    project_id: str,
    user_id: str,
    payload: ApprovalRequest,
    db: DbClient = Depends(get_db_client),
):
    project = get_or_404(db, Project, project_id)
    if not project.participant(user_id):
        raise HTTPException(status_code=404, detail="Participant not found")

    approval = ManagerApproval(**payload.model_dump(), date=utcnow())
    participants = [
        entry.model_copy(update={"manager_approval": approval})
        if entry.user_id == user_id
        else entry
        for entry in project.participants
    ]
    return update_or_error(db, Project, project_id, {"participants": participants})


# ---------------------------------------------------------------------------
# Mentorships
# ---------------------------------------------------------------------------


@router.get("/mentorships", response_model=list[Mentorship])
def list_mentorships(
    mentor_id: str | None = Query(None),
    mentee_id: str | None = Query(None),
    status: MentorshipStatus | None = Query(None),
    db: DbClient = Depends(get_db_client),
):
    filters: dict[str, Any] = {}
    if mentor_id:
        filters["mentor_id"] = mentor_id
    if mentee_id:
        filters["mentee_id"] = mentee_id
    if status:
        filters["status"] = status
    return db.find(Mentorship, **filters)


@router.post("/mentorships", response_model=Mentorship, status_code=201)
def request_mentorship(
    payload: MentorshipBase, db: DbClient = Depends(get_db_client)
):
    mentorship = insert_or_409(db, Mentorship.model_validate(payload.model_dump()))
    logger.info(
        "Mentorship %s requested by %s with mentor %s",
        mentorship.id,
        mentorship.mentee_id,
        mentorship.mentor_id,
    )
    return mentorship


@router.get("/mentorships/{mentorship_id}", response_model=Mentorship)
def get_mentorship(mentorship_id: str, db: DbClient = Depends(get_db_client)):
    return get_or_404(db, Mentorship, mentorship_id)


@router.patch("/mentorships/{mentorship_id}", response_model=Mentorship)
def update_mentorship(
    mentorship_id: str,
    payload: MentorshipUpdate,
    db: DbClient = Depends(get_db_client),
):
    return update_or_error(
        db, Mentorship, mentorship_id, payload.model_dump(exclude_unset=True)
    )


@router.delete("/mentorships/{mentorship_id}", response_model=DeleteResponse)
def delete_mentorship(mentorship_id: str, db: DbClient = Depends(get_db_client)):
    return delete_or_404(db, Mentorship, mentorship_id)


@router.post(
    "/mentorships/{mentorship_id}/sessions",
    response_model=Mentorship,
    status_code=201,
)
def add_mentorship_session(
    mentorship_id: str,
    payload: MentorshipSession,
    db: DbClient = Depends(get_db_client),
):
    mentorship = get_or_404(db, Mentorship, mentorship_id)
    return update_or_error(
        db, Mentorship, mentorship_id, {"sessions": [*mentorship.sessions, payload]}
    )


@router.post(
    "/mentorships/{mentorship_id}/progress",
    response_model=Mentorship,
    status_code=201,
)
def record_mentorship_progress(
    mentorship_id: str,
    payload: ProgressEntry,
    db: DbClient = Depends(get_db_client),
):
    mentorship = get_or_404(db, Mentorship, mentorship_id)
    return update_or_error(
        db, Mentorship, mentorship_id, {"progress": [*mentorship.progress, payload]}
    )


@router.put("/mentorships/{mentorship_id}/feedback", response_model=Mentorship)
def set_mentorship_feedback(
    mentorship_id: str,
    payload: MentorshipFeedback,
    db: DbClient = Depends(get_db_client),
):
    mentorship = get_or_404(db, Mentorship, mentorship_id)
    feedback = mentorship.feedback.model_dump() if mentorship.feedback else {}
    feedback.update(payload.model_dump(exclude_unset=True))
    return update_or_error(db, Mentorship, mentorship_id, {"feedback": feedback})
