import json
import unittest
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

from fastapi.testclient import TestClient

from career_canvas import dependencies
from career_canvas.app import create_app
from career_canvas.config import Settings
from career_canvas.db import InMemoryDbClient
from career_canvas.dependencies import get_db_client, get_optional_completion_client
from models import career_ai
from shared.documents import InterviewAnalytics


def chat_response(content):
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))]
    )


def session_payload(**overrides):
    payload = {
        "user_id": "u1",
        "topic": "senior-behavioral",
        "questions": [
            {
                "id": "q1",
                "question": "Tell me about a hard call.",
                "category": "behavioral",
            },
            {"id": "q2", "question": "How do you debug?", "category": "technical"},
        ],
    }
    payload.update(overrides)
    return payload


class InterviewApiTests(unittest.TestCase):
    def setUp(self):
        self.app = create_app()
        self.db = InMemoryDbClient()
        self.completions = MagicMock()
        self.app.dependency_overrides[get_db_client] = lambda: self.db
        self.app.dependency_overrides[get_optional_completion_client] = (
            lambda: self.completions
        )
        self.client = TestClient(self.app)

    def _create_session(self, **overrides):
        response = self.client.post("/api/interviews", json=session_payload(**overrides))
        self.assertEqual(response.status_code, 201)
        return response.json()

    def _respond(self, session_id, question_id, score):
        return self.client.post(
            f"/api/interviews/{session_id}/responses",
            json={"question_id": question_id, "answer": "An answer", "score": score},
        )

    def test_create_and_get_session(self):
        session = self._create_session()
        self.assertEqual(session["responses"], [])
        self.assertIsNone(session["end_time"])
        self.assertEqual(session["questions"][0]["difficulty"], "medium")

        response = self.client.get(f"/api/interviews/{session['id']}")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["topic"], "senior-behavioral")

    def test_session_requires_questions(self):
        response = self.client.post("/api/interviews", json=session_payload(questions=[]))
        self.assertEqual(response.status_code, 422)

    def test_missing_session_returns_404(self):
        self.assertEqual(self.client.get("/api/interviews/nope").status_code, 404)
        self.assertEqual(self._respond("nope", "q1", 50).status_code, 404)
        response = self.client.put(
            "/api/interviews/nope/complete",
            json={"overall_score": 80, "feedback": "Good"},
        )
        self.assertEqual(response.status_code, 404)

    def test_add_responses(self):
        session = self._create_session()
        response = self._respond(session["id"], "q1", 70)
        self.assertEqual(response.status_code, 201)
        response = self._respond(session["id"], "q2", 90)
        responses = response.json()["responses"]
        self.assertEqual([r["question_id"] for r in responses], ["q1", "q2"])
        self.assertIsNotNone(responses[0]["timestamp"])

    def test_response_to_unknown_question_returns_404(self):
        session = self._create_session()
        self.assertEqual(self._respond(session["id"], "q9", 70).status_code, 404)

    def test_response_score_out_of_range(self):
        session = self._create_session()
        self.assertEqual(self._respond(session["id"], "q1", 101).status_code, 422)

    def test_complete_updates_analytics(self):
        first = self._create_session()
        response = self.client.put(
            f"/api/interviews/{first['id']}/complete",
            json={"overall_score": 80, "feedback": "Good structure"},
        )
        self.assertEqual(response.status_code, 200)
        completed = response.json()
        self.assertIsNotNone(completed["end_time"])
        self.assertEqual(completed["overall_score"], 80)

        second = self._create_session()
        self.client.put(
            f"/api/interviews/{second['id']}/complete",
            json={"overall_score": 65, "feedback": "Add examples"},
        )

        analytics = self.db.find(InterviewAnalytics, user_id="u1")
        self.assertEqual(len(analytics), 1)
        self.assertEqual(analytics[0].total_interviews, 2)
        self.assertEqual(analytics[0].average_score, 72.5)
        self.assertEqual([p.score for p in analytics[0].progress_trend], [80, 65])

    def test_second_completion_conflicts(self):
        session = self._create_session()
        body = {"overall_score": 80, "feedback": "Good"}
        self.client.put(f"/api/interviews/{session['id']}/complete", json=body)

        response = self.client.put(
            f"/api/interviews/{session['id']}/complete", json=body
        )
        self.assertEqual(response.status_code, 409)
        self.assertEqual(self._respond(session["id"], "q1", 50).status_code, 409)
        self.assertEqual(
            self.db.find(InterviewAnalytics, user_id="u1")[0].total_interviews, 1
        )

    def test_list_sessions_for_user(self):
        older = self._create_session()
        newer = self._create_session()
        self._create_session(user_id="u2")

        response = self.client.get("/api/interviews", params={"user_id": "u1"})
        self.assertEqual(
            [s["id"] for s in response.json()], [newer["id"], older["id"]]
        )
        response = self.client.get(
            "/api/interviews", params={"user_id": "u1", "limit": 1}
        )
        self.assertEqual(len(response.json()), 1)

    def test_analytics_defaults_for_new_user(self):
        response = self.client.get("/api/interviews/analytics/u1")
        self.assertEqual(response.status_code, 200)
        payload = response.json()
        self.assertEqual(payload["total_interviews"], 0)
        self.assertEqual(payload["average_score"], 0)
        self.assertEqual(payload["category_performance"], {})
        self.assertEqual(payload["recent_sessions_count"], 0)

    def test_analytics_category_performance(self):
        session = self._create_session()
        self._respond(session["id"], "q1", 60)
        self._respond(session["id"], "q2", 90)
        self.client.put(
            f"/api/interviews/{session['id']}/complete",
            json={"overall_score": 75, "feedback": "Balanced"},
        )
        unfinished = self._create_session()
        self._respond(unfinished["id"], "q1", 10)

        payload = self.client.get("/api/interviews/analytics/u1").json()
        self.assertEqual(payload["total_interviews"], 1)
        self.assertEqual(payload["recent_sessions_count"], 1)
        self.assertEqual(
            payload["category_performance"], {"behavioral": 60, "technical": 90}
        )

    # AI helpers

    def test_ai_interview_question(self):
        question = {
            "id": "ai_1",
            "question": "Describe a reorg you led.",
            "category": "senior-behavioral",
            "difficulty": "hard",
        }
        self.completions.chat.completions.create.return_value = chat_response(
            json.dumps(question)
        )
        response = self.client.post(
            "/api/ai/interview-question",
            json={"topic": "senior-behavioral", "previous_questions": ["q1"]},
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"question": question, "source": "ai"})

    def test_interview_question_without_api_key_uses_fallback(self):
        del self.app.dependency_overrides[get_optional_completion_client]
        with patch.object(
            dependencies, "get_settings", return_value=Settings(openai_api_key=None)
        ):
            response = self.client.post(
                "/api/ai/interview-question", json={"topic": "technical"}
            )
        self.assertEqual(response.status_code, 200)
        payload = response.json()
        self.assertEqual(payload["source"], "fallback")
        self.assertIn(
            payload["question"]["id"],
            [q.id for q in career_ai.FALLBACK_QUESTIONS["technical"]],
        )

    def test_evaluate_response(self):
        evaluation = {
            "score": 82,
            "feedback": "Clear and specific.",
            "strengths": ["Structure"],
            "improvements": [],
            "confidence": 75,
        }
        self.completions.chat.completions.create.return_value = chat_response(
            json.dumps(evaluation)
        )
        response = self.client.post(
            "/api/ai/evaluate-response",
            json={"question": "Why us?", "answer": "Because of the mission."},
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["evaluation"]["score"], 82)
        self.assertEqual(response.json()["source"], "ai")

    def test_evaluate_response_falls_back_on_bad_reply(self):
        self.completions.chat.completions.create.return_value = chat_response(
            "Pretty good answer overall."
        )
        response = self.client.post(
            "/api/ai/evaluate-response",
            json={"question": "Why us?", "answer": "Because of the mission."},
        )
        self.assertEqual(response.status_code, 200)
        payload = response.json()
        self.assertEqual(payload["source"], "fallback")
        self.assertEqual(payload["evaluation"]["score"], 60)


if __name__ == "__main__":
    unittest.main()
