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

import json
from typing import Any, Optional, Sequence, Tuple

CAREER_COUNSELOR_SYSTEM_PROMPT = (
    "You are a career counselor AI assistant helping professionals with "
    "career development."
)
RESUME_REVIEWER_SYSTEM_PROMPT = (
    "You are an expert resume reviewer. Provide constructive feedback on resumes."
)
INTERVIEW_COACH_SYSTEM_PROMPT = (
    "You are an interview preparation expert. Generate relevant interview questions."
)


def _as_json(value: Any) -> str:
    return json.dumps(value, indent=2, default=str)


def make_mentor_recommendations_prompt(
    user_profile: dict, career_goals: dict
) -> str:
    return f"""
Given the following user profile and career goals, recommend potential mentors.

User Profile:
{_as_json(user_profile)}

Career Goals:
{_as_json(career_goals)}

Respond with only a JSON array in this format:
[
  {{
    "mentorId": "uniqueId",
    "matchScore": 0.95,
    "matchReason": "Strong alignment in AI technology experience and leadership goals"
  }}
]
"""


def make_career_paths_prompt(
    user_profile: dict, career_goals: Optional[dict] = None
) -> str:
    goals_section = ""
    if career_goals:
        goals_section = f"\nCareer Goals:\n{_as_json(career_goals)}\n"
    return f"""
Given the following user profile with skills and experience, suggest potential career paths.

User Profile:
{_as_json(user_profile)}
{goals_section}
Respond with only a JSON array in this format:
[
  {{
    "pathName": "Data Science Leader",
    "alignment": 0.92,
    "explanation": "Your strong background in statistics and machine learning aligns well with this path",
    "nextSteps": ["Gain experience leading ML projects", "Develop mentoring skills"]
  }}
]
"""


def make_career_advice_prompt(user_profile: dict) -> str:
    return (
        "Based on this user profile, provide personalized career advice: "
        + json.dumps(user_profile, default=str)
    )


def make_resume_feedback_prompt(resume_text: str) -> str:
    return f"Please analyze this resume and provide feedback: {resume_text}"


def make_interview_questions_prompt(job_title: str, company: Optional[str] = None) -> str:
    company_context = f" at {company}" if company else ""
    return (
        f"Generate 10 interview questions for a {job_title} position"
        f"{company_context}. Return as a JSON array."
    )


INTERVIEW_QUESTION_SYSTEM_PROMPT = (
    "You are an expert interview question generator. Generate relevant, "
    "thoughtful interview questions based on the given topic and criteria. "
    "Return the response as a JSON object with id, question, category, and "
    "difficulty fields."
)
INTERVIEW_EVALUATOR_SYSTEM_PROMPT = (
    "You are an expert interview evaluator. Provide constructive, detailed "
    "feedback on interview responses."
)

CAREER_LEVELS = ("early", "mid", "senior")


def split_career_level(topic: str) -> Tuple[Optional[str], str]:
    """
    Splits a combined topic such as "senior-behavioral" into its career level
    and question topic. Topics without a known level prefix are returned whole.
    """
    level, _, rest = topic.partition("-")
    if rest and level in CAREER_LEVELS:
        return f"{level}-career", rest
    return None, topic


def make_interview_question_prompt(
    topic: str, previous_questions: Sequence[str] = ()
) -> str:
    career_level, question_topic = split_career_level(topic)
    career_context = ""
    if career_level:
        career_context = (
            f"\nCareer Level Context: This is for someone at {career_level} level. "
            "Tailor the question complexity and expectations accordingly."
        )
    used_questions = ""
    if previous_questions:
        used_questions = (
            f"\nAvoid these already used questions: {', '.join(previous_questions)}"
        )
    return f"""Generate an interview question for the topic: "{question_topic}".{career_context}
The question should be:
- Relevant to the topic and career level
- Appropriate difficulty level for the target audience
- Engaging and thought-provoking
- Different from previous questions{used_questions}

Return as JSON with fields: id (unique), question (string), category ("{topic}"), difficulty ("easy", "medium", or "hard")"""


def make_response_evaluation_prompt(question: str, answer: str, category: str) -> str:
    return f"""Evaluate this interview response:

Question: "{question}"
Category: {category}
Answer: "{answer}"

Provide a detailed evaluation with:
1. A score from 0-100
2. Specific feedback
3. List of strengths (if any)
4. List of areas for improvement
5. Confidence level (0-100)

Return as JSON with fields: score, feedback, strengths (array), improvements (array), confidence"""
