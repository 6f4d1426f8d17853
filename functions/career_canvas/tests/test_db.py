import unittest
from datetime import datetime, timedelta, timezone

from pydantic import ValidationError

from career_canvas.db import (
    DuplicateKeyError,
    InMemoryDbClient,
    SqlDbClient,
    find_statement,
)
from shared.documents import (
    CareerProfile,
    ConnectionRequest,
    InterviewAnalytics,
    InterviewQuestion,
    InterviewResponse,
    InterviewSession,
    MentorAvailability,
    Mentorship,
    MentorshipPreferences,
    Story,
    User,
    UserProfile,
)
from shared.types import CareerStage, ConnectionStatus, StoryVisibility

BASE_TIME = datetime(2024, 5, 1, tzinfo=timezone.utc)


def make_story(title="A story", minutes=0, **overrides) -> Story:
    fields = {
        "author_id": "author-1",
        "title": title,
        "content": "Some content",
        "career_stage": CareerStage.MID,
        "visibility": StoryVisibility.PUBLIC,
        "created_at": BASE_TIME + timedelta(minutes=minutes),
    }
    fields.update(overrides)
    return Story(**fields)


def make_user(email="ada@example.com", microsoft_id=None) -> User:
    return User(
        email=email,
        first_name="Ada",
        last_name="Lovelace",
        microsoft_id=microsoft_id,
    )


class DbClientContract:
    """Behaviour shared by every DbClient implementation."""

    def make_client(self):
        raise NotImplementedError

    def setUp(self):
        self.db = self.make_client()

    def test_insert_and_get(self):
        story = self.db.insert(make_story(tags=["leadership"]))
        fetched = self.db.get(Story, story.id)
        self.assertIsNotNone(fetched)
        self.assertEqual(fetched.title, "A story")
        self.assertEqual(fetched.career_stage, CareerStage.MID)
        self.assertEqual(fetched.tags, ["leadership"])

    def test_get_missing_returns_none(self):
        self.assertIsNone(self.db.get(Story, "missing"))

    def test_duplicate_email_rejected(self):
        self.db.insert(make_user("ada@example.com"))
        with self.assertRaises(DuplicateKeyError) as ctx:
            self.db.insert(make_user("  ADA@example.com "))
        self.assertEqual(ctx.exception.key, "email")
        self.assertEqual(len(self.db.find(User)), 1)

    def test_duplicate_microsoft_id_rejected(self):
        self.db.insert(make_user("ada@example.com", microsoft_id="ms-1"))
        with self.assertRaises(DuplicateKeyError) as ctx:
            self.db.insert(make_user("grace@example.com", microsoft_id="ms-1"))
        self.assertEqual(ctx.exception.key, "microsoft_id")

    def test_users_without_microsoft_id_do_not_collide(self):
        self.db.insert(make_user("ada@example.com"))
        self.db.insert(make_user("grace@example.com"))
        self.assertEqual(self.db.count(User), 2)

    def test_update_rechecks_unique_keys(self):
        self.db.insert(make_user("ada@example.com"))
        grace = self.db.insert(make_user("grace@example.com"))
        with self.assertRaises(DuplicateKeyError):
            self.db.update(User, grace.id, {"email": "ada@example.com"})
        self.assertEqual(self.db.get(User, grace.id).email, "grace@example.com")

    def test_update_revalidates_document(self):
        story = self.db.insert(make_story())
        with self.assertRaises(ValidationError):
            self.db.update(Story, story.id, {"career_stage": "intern"})
        self.assertEqual(self.db.get(Story, story.id).career_stage, CareerStage.MID)

    def test_update_replaces_fields_and_bumps_timestamp(self):
        story = self.db.insert(make_story())
        updated = self.db.update(Story, story.id, {"title": "New title"})
        self.assertEqual(updated.title, "New title")
        self.assertEqual(updated.created_at, story.created_at)
        self.assertGreater(updated.updated_at, story.created_at)
        self.assertEqual(self.db.get(Story, story.id).title, "New title")

    def test_update_missing_returns_none(self):
        self.assertIsNone(self.db.update(Story, "missing", {"title": "x"}))

    def test_find_filters_newest_first(self):
        self.db.insert(make_story("old", minutes=0))
        self.db.insert(make_story("new", minutes=5))
        self.db.insert(make_story("hidden", minutes=10, visibility="private"))

        public = self.db.find(Story, visibility=StoryVisibility.PUBLIC)
        self.assertEqual([s.title for s in public], ["new", "old"])
        self.assertEqual(self.db.count(Story, visibility="private"), 1)

    def test_find_pagination(self):
        for minute in range(5):
            self.db.insert(make_story(f"story {minute}", minutes=minute))
        page = self.db.find(Story, limit=2, offset=1)
        self.assertEqual([s.title for s in page], ["story 3", "story 2"])

    def test_find_rejects_unindexed_filter(self):
        with self.assertRaises(ValueError):
            self.db.find(Story, title="A story")

    def test_search_requires_every_term(self):
        self.db.insert(
            make_story("Leading a team", related_skills=["Public Speaking"])
        )
        self.db.insert(make_story("Learning Rust", tags=["systems"]))

        self.assertEqual(
            [s.title for s in self.db.search(Story, "team speaking")],
            ["Leading a team"],
        )
        self.assertEqual(self.db.search(Story, "team rust"), [])
        self.assertEqual(len(self.db.search(Story, "LEARNING")), 1)

    def test_search_nested_field(self):
        self.db.insert(
            UserProfile(
                user_id="u1",
                display_name="Sarah Johnson",
                email="sarah@example.com",
                mentorship_preferences=MentorAvailability(
                    is_available_as_mentor=True,
                    mentorship_areas=["Technical Leadership"],
                ),
            )
        )
        results = self.db.search(UserProfile, "technical leadership")
        self.assertEqual(len(results), 1)
        self.assertEqual(results[0].display_name, "Sarah Johnson")

    def test_one_career_profile_per_user(self):
        self.db.insert(CareerProfile(user_id="u1"))
        with self.assertRaises(DuplicateKeyError):
            self.db.insert(CareerProfile(user_id="u1", skills=["python"]))

    def test_mentorship_pair_is_not_unique(self):
        self.db.insert(Mentorship(mentor_id="m1", mentee_id="e1"))
        self.db.insert(Mentorship(mentor_id="m1", mentee_id="e1"))
        self.db.insert(Mentorship(mentor_id="m1", mentee_id="e2"))
        pair = self.db.find(Mentorship, mentor_id="m1", mentee_id="e1")
        self.assertEqual(len(pair), 2)

    def test_profile_email_case_variants_collide(self):
        self.db.insert(UserProfile(user_id="u1", display_name="A", email="Alice@x.com"))
        with self.assertRaises(DuplicateKeyError):
            self.db.insert(
                UserProfile(user_id="u2", display_name="A", email="alice@x.com")
            )

    def test_one_preferences_record_per_user(self):
        self.db.insert(MentorshipPreferences(user_id="u1", mentorship_type="mentee"))
        with self.assertRaises(DuplicateKeyError):
            self.db.insert(
                MentorshipPreferences(user_id="u1", mentorship_type="mentor")
            )

    def test_one_interview_analytics_per_user(self):
        self.db.insert(InterviewAnalytics(user_id="u1"))
        with self.assertRaises(DuplicateKeyError):
            self.db.insert(InterviewAnalytics(user_id="u1", total_interviews=3))

    def test_connection_requests_filter_by_status(self):
        pending = self.db.insert(
            ConnectionRequest(user_id="u1", mentor_id="m1", created_at=BASE_TIME)
        )
        self.db.insert(
            ConnectionRequest(
                user_id="u2",
                mentor_id="m1",
                status=ConnectionStatus.DECLINED,
                created_at=BASE_TIME + timedelta(minutes=1),
            )
        )
        found = self.db.find(
            ConnectionRequest, mentor_id="m1", status=ConnectionStatus.PENDING
        )
        self.assertEqual([r.id for r in found], [pending.id])

        self.db.update(
            ConnectionRequest, pending.id, {"status": ConnectionStatus.ACCEPTED}
        )
        self.assertEqual(
            self.db.count(ConnectionRequest, status=ConnectionStatus.ACCEPTED), 1
        )

    def test_interview_sessions_round_trip_nested_records(self):
        session = self.db.insert(
            InterviewSession(
                user_id="u1",
                topic="technical",
                questions=[InterviewQuestion(id="q1", question="Why Python?")],
            )
        )
        response = InterviewResponse(question_id="q1", answer="Readability", score=70)
        self.db.update(InterviewSession, session.id, {"responses": [response]})

        stored = self.db.get(InterviewSession, session.id)
        self.assertEqual(stored.responses[0].score, 70)
        self.assertEqual(stored.question("q1").question, "Why Python?")
        self.assertFalse(stored.completed)

    def test_delete(self):
        story = self.db.insert(make_story())
        self.assertTrue(self.db.delete(Story, story.id))
        self.assertFalse(self.db.delete(Story, story.id))
        self.assertIsNone(self.db.get(Story, story.id))

    def test_list_collections(self):
        self.db.insert(make_story())
        self.assertIn("stories", self.db.list_collections())


class InMemoryDbClientTests(DbClientContract, unittest.TestCase):
    def make_client(self):
        return InMemoryDbClient()

    def test_reset_clears_documents(self):
        self.db.insert(make_story())
        self.db.reset()
        self.assertEqual(self.db.find(Story), [])

    def test_returned_documents_are_copies(self):
        story = self.db.insert(make_story())
        fetched = self.db.get(Story, story.id)
        fetched.tags.append("mutated")
        self.assertEqual(self.db.get(Story, story.id).tags, [])


class SqlDbClientTests(DbClientContract, unittest.TestCase):
    """
    Uses SQLite via SQLAlchemy URL for fast/local testing of the SQL client logic.
    """

    def make_client(self):
        return SqlDbClient("sqlite+pysqlite:///:memory:")

    def test_requires_url(self):
        with self.assertRaises(ValueError):
            SqlDbClient("")

    def test_mentorship_pair_lookup_uses_compound_index(self):
        stmt = find_statement(Mentorship, {"mentor_id": "m1", "mentee_id": "e1"})
        compiled = stmt.compile(
            dialect=self.db.engine.dialect,
            compile_kwargs={"literal_binds": True},
        )
        with self.db.engine.connect() as conn:
            plan = conn.exec_driver_sql(f"EXPLAIN QUERY PLAN {compiled}").fetchall()
        details = " ".join(str(row[-1]) for row in plan)
        self.assertIn("ix_mentorships_mentor_mentee", details)

    def test_key_columns_follow_document(self):
        story = self.db.insert(make_story())
        self.db.update(Story, story.id, {"visibility": "private"})
        self.assertEqual(self.db.count(Story, visibility="public"), 0)
        self.assertEqual(self.db.count(Story, visibility="private"), 1)


if __name__ == "__main__":
    unittest.main()
