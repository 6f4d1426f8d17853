"""
Seed the configured document store with sample Career Canvas data.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from career_canvas.db import DbClient, DuplicateKeyError, SqlDbClient
from career_canvas.dependencies import get_db_client
from shared.documents import (
    Mentorship,
    MentorAvailability,
    Project,
    Story,
    User,
    UserProfile,
)
from shared.types import CareerStage, StoryVisibility

logger = logging.getLogger(__name__)

SAMPLE_MENTORS = [
    {
        "first_name": "Sarah",
        "last_name": "Johnson",
        "email": "sarah.johnson@company.com",
        "job_title": "Senior Software Engineer",
        "department": "Engineering",
        "skills": ["React", "TypeScript", "Leadership", "System Design", "Azure"],
        "areas": ["Frontend Development", "Technical Leadership"],
        "years": 8,
    },
    {
        "first_name": "Michael",
        "last_name": "Chen",
        "email": "michael.chen@company.com",
        "job_title": "Principal Product Manager",
        "department": "Product",
        "skills": ["Product Strategy", "Data Analysis", "Agile", "SQL", "Python"],
        "areas": ["Product Management", "Technical to Business Transition"],
        "years": 10,
    },
    {
        "first_name": "Jessica",
        "last_name": "Rodriguez",
        "email": "jessica.rodriguez@company.com",
        "job_title": "Marketing Director",
        "department": "Marketing",
        "skills": ["Digital Marketing", "Brand Strategy", "Team Management"],
        "areas": ["Marketing Leadership", "Career Change"],
        "years": 12,
    },
]

SAMPLE_MENTEE = {
    "first_name": "Alex",
    "last_name": "Kim",
    "email": "alex.kim@company.com",
}


def _ensure_user(db: DbClient, fields: dict) -> tuple[User, bool]:
    """Returns the user with this email and whether it was just created."""
    existing = db.find(User, email=fields["email"].lower())
    if existing:
        return existing[0], False
    try:
        return db.insert(User.model_validate(fields)), True
    except DuplicateKeyError:
        return db.find(User, email=fields["email"].lower())[0], False


def seed(db: DbClient) -> dict[str, int]:
    """
    Insert sample documents and return how many of each were written.

    People (users and their directory profiles) are reused when they already
    exist. Stories, projects and mentorships are not deduplicated, so every
    run adds one more of each.
    """
    counts = {"users": 0, "profiles": 0, "stories": 0, "projects": 0, "mentorships": 0}

    mentors: list[User] = []
    for sample in SAMPLE_MENTORS:
        user, created = _ensure_user(
            db,
            {
                "first_name": sample["first_name"],
                "last_name": sample["last_name"],
                "email": sample["email"],
            },
        )
        mentors.append(user)
        counts["users"] += int(created)
        if db.find(UserProfile, user_id=user.id):
            continue
        db.insert(
            UserProfile(
                user_id=user.id,
                display_name=user.full_name,
                email=user.email,
                job_title=sample["job_title"],
                department=sample["department"],
                skills=sample["skills"],
                years_of_experience=sample["years"],
                mentorship_preferences=MentorAvailability(
                    is_available_as_mentor=True,
                    mentorship_areas=sample["areas"],
                    mentorship_capacity=3,
                    preferred_meeting_frequency="bi-weekly",
                ),
            )
        )
        counts["profiles"] += 1

    mentee, created = _ensure_user(db, SAMPLE_MENTEE)
    counts["users"] += int(created)

    db.insert(
        Story(
            author_id=mentors[0].id,
            title="Leading My First Cross-Functional Project",
            content=(
                "When I was asked to lead a project involving engineering, design, "
                "and marketing teams, I initially felt overwhelmed..."
            ),
            career_stage=CareerStage.MID,
            tags=["leadership", "project-management", "teamwork"],
            related_skills=["Leadership", "Communication"],
            visibility=StoryVisibility.PUBLIC,
        )
    )
    counts["stories"] += 1

    db.insert(
        Project(
            title="Internal Mentoring Portal Revamp",
            description="Refresh the mentor discovery experience for the portal.",
            creator_id=mentors[1].id,
            required_skills=["React", "Python", "UX Research"],
            department="Product",
            max_participants=4,
        )
    )
    counts["projects"] += 1

    db.insert(
        Mentorship(
            mentor_id=mentors[0].id,
            mentee_id=mentee.id,
            focus_areas=["Technical Leadership"],
            goals=["Lead a feature team within a year"],
            meeting_frequency="bi-weekly",
        )
    )
    counts["mentorships"] += 1
    return counts


def main() -> int:
    parser = argparse.ArgumentParser(description="Seed Career Canvas sample data")
    parser.add_argument(
        "--database-url",
        type=str,
        default=None,
        help="SQLAlchemy URL to seed (defaults to DATABASE_URL)",
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s:%(message)s")

    db = SqlDbClient(args.database_url) if args.database_url else get_db_client()
    counts = seed(db)
    for collection, count in counts.items():
        logger.info("Seeded %d %s", count, collection)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
