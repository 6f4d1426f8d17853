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

"""Career recommendations and assistant calls built on the OpenAI wrappers."""

import json
import logging
import random
import re
from typing import Any, List, Optional, Sequence, Tuple

from openai import OpenAI, OpenAIError
from pydantic import ValidationError

from models import openai_api, prompts
from models.openai_api import CompletionInvalidResponseException
from shared.documents import InterviewQuestion, ResponseEvaluation, new_id
from shared.types import InterviewDifficulty

logger = logging.getLogger(__name__)

ADVICE_FALLBACK = "Unable to generate advice at this time."
RESUME_FALLBACK = "Unable to analyze resume at this time."


class CareerAssistantError(Exception):
    pass


def _parse_json_response(text: str) -> Any:
    return json.loads(text.strip())


def generate_mentor_recommendations(
    client: OpenAI,
    user_profile: dict,
    career_goals: dict,
    model: str = openai_api.DEFAULT_COMPLETION_MODEL,
) -> Any:
    """
    Asks the completion model for mentors matching a profile and goals.

    Returns the parsed JSON, normally a list of
    {mentorId, matchScore, matchReason}. Network and JSON errors are raised
    to the caller as-is.
    """
    prompt = prompts.make_mentor_recommendations_prompt(user_profile, career_goals)
    text = openai_api.call_completion(
        client, prompt, model=model, max_tokens=1000, temperature=0.5
    )
    return _parse_json_response(text)


def analyze_career_paths(
    client: OpenAI,
    user_profile: dict,
    career_goals: Optional[dict] = None,
    model: str = openai_api.DEFAULT_COMPLETION_MODEL,
) -> Any:
    """Same contract as generate_mentor_recommendations, for career paths."""
    prompt = prompts.make_career_paths_prompt(user_profile, career_goals)
    text = openai_api.call_completion(
        client, prompt, model=model, max_tokens=1000, temperature=0.5
    )
    return _parse_json_response(text)


def _chat(
    client: OpenAI,
    system_prompt: str,
    user_prompt: str,
    *,
    model: str,
    max_tokens: int,
    temperature: float,
    task: str,
) -> Optional[str]:
    try:
        return openai_api.call_chat(
            client,
            system_prompt,
            user_prompt,
            model=model,
            max_tokens=max_tokens,
            temperature=temperature,
        )
    except (OpenAIError, CompletionInvalidResponseException) as exc:
        logger.error("Error while trying to %s: %s", task, exc)
        raise CareerAssistantError(f"Failed to {task}") from exc


def generate_career_advice(
    client: OpenAI,
    user_profile: dict,
    model: str = openai_api.DEFAULT_CHAT_MODEL,
) -> str:
    content = _chat(
        client,
        prompts.CAREER_COUNSELOR_SYSTEM_PROMPT,
        prompts.make_career_advice_prompt(user_profile),
        model=model,
        max_tokens=500,
        temperature=0.7,
        task="generate career advice",
    )
    return content or ADVICE_FALLBACK


def analyze_resume(
    client: OpenAI,
    resume_text: str,
    model: str = openai_api.DEFAULT_CHAT_MODEL,
) -> str:
    content = _chat(
        client,
        prompts.RESUME_REVIEWER_SYSTEM_PROMPT,
        prompts.make_resume_feedback_prompt(resume_text),
        model=model,
        max_tokens=800,
        temperature=0.5,
        task="analyze resume",
    )
    return content or RESUME_FALLBACK


def generate_interview_questions(
    client: OpenAI,
    job_title: str,
    company: Optional[str] = None,
    model: str = openai_api.DEFAULT_CHAT_MODEL,
) -> List[str]:
    """
    Returns interview questions for a role.

    The model is asked for a JSON array; if it answers in plain text instead,
    each non-empty line is taken as one question.
    """
    content = _chat(
        client,
        prompts.INTERVIEW_COACH_SYSTEM_PROMPT,
        prompts.make_interview_questions_prompt(job_title, company),
        model=model,
        max_tokens=600,
        temperature=0.6,
        task="generate interview questions",
    )
    if not content:
        return []
    try:
        parsed = _parse_json_response(content)
    except json.JSONDecodeError:
        parsed = None
    if isinstance(parsed, list):
        return [str(question) for question in parsed]
    return [line.strip() for line in content.splitlines() if line.strip()]


# ---------------------------------------------------------------------------
# Mock interviews
# ---------------------------------------------------------------------------

SOURCE_AI = "ai"
SOURCE_FALLBACK = "fallback"


# (id, question, difficulty) per topic, used when the model is unavailable.
_FALLBACK_QUESTION_TABLE = {
    "behavioral": [
        ("behavioral_1", "Tell me about a challenging project you worked on "
         "and how you overcame obstacles.", "medium"),
        ("behavioral_2", "Describe a time when you had to work with a "
         "difficult team member.", "medium"),
    ],
    "technical": [
        ("technical_1", "Explain a complex technical concept to someone "
         "without a technical background.", "medium"),
        ("technical_2", "How do you approach debugging a complex issue?",
         "medium"),
    ],
    "early-career": [
        ("early_1", "What motivates you to start your career in this field?",
         "easy"),
        ("early_2", "How do you handle constructive feedback?", "easy"),
    ],
    "mid-career": [
        ("mid_1", "How has your leadership approach evolved over your "
         "career?", "medium"),
        ("mid_2", "Describe a strategic decision you made that had "
         "significant impact.", "hard"),
    ],
    "senior-career": [
        ("senior_1", "How do you develop and execute long-term strategic "
         "vision for your organization?", "hard"),
        ("senior_2", "Describe how you've led organizational transformation "
         "or major change initiatives.", "hard"),
        ("senior_3", "How do you build and maintain relationships with "
         "C-level executives?", "hard"),
    ],
    "general": [
        ("general_1", "What are your career goals for the next 3-5 years?",
         "easy"),
        ("general_2", "How do you prioritize competing demands on your time?",
         "medium"),
    ],
}

FALLBACK_QUESTIONS = {
    topic: [
        InterviewQuestion(
            id=qid, question=question, category=topic, difficulty=difficulty
        )
        for qid, question, difficulty in rows
    ]
    for topic, rows in _FALLBACK_QUESTION_TABLE.items()
}

_EXAMPLE_WORDS = re.compile(
    r"\b(example|instance|time|situation|project)\b", re.I
)
_QUANTIFIED_RESULT = re.compile(
    r"\d+%|\$\d+|\d+\s*(users|people|days|months|years)", re.I
)


def fallback_question(
    topic: str, previous_ids: Sequence[str] = ()
) -> InterviewQuestion:
    """
    Picks a canned question for the topic, preferring ones whose id or text
    is not in `previous_ids`. "senior-behavioral" falls back to the
    behavioral set; unknown topics use the general set.
    """
    _, question_topic = prompts.split_career_level(topic)
    questions = (
        FALLBACK_QUESTIONS.get(topic)
        or FALLBACK_QUESTIONS.get(question_topic)
        or FALLBACK_QUESTIONS["general"]
    )
    used = set(previous_ids)
    available = [
        q for q in questions if q.id not in used and q.question not in used
    ] or questions
    return random.choice(available).model_copy()


def basic_evaluation(answer: str) -> ResponseEvaluation:
    """
    Scores an answer without the model, from its length and whether it gives
    concrete examples and measurable results.
    """
    word_count = len(answer.split())
    has_examples = bool(_EXAMPLE_WORDS.search(answer))
    has_results = bool(_QUANTIFIED_RESULT.search(answer))

    score = 60
    if word_count > 50:
        score += 10
    if word_count > 100:
        score += 10
    if has_examples:
        score += 15
    if has_results:
        score += 10
    score = min(100, max(30, score))

    strengths = []
    improvements = []
    if has_examples:
        strengths.append("Provided specific examples")
    if has_results:
        strengths.append("Included quantifiable results")
    if word_count > 100:
        strengths.append("Comprehensive answer")
    if not has_examples:
        improvements.append("Include more specific examples")
    if not has_results:
        improvements.append("Add quantifiable metrics")
    if word_count < 50:
        improvements.append("Provide more detailed explanations")

    if score >= 80:
        feedback = "Strong response with good detail and examples."
    elif score >= 60:
        feedback = "Solid response with room for improvement."
    else:
        feedback = "Consider adding more specific examples and details."

    return ResponseEvaluation(
        score=score,
        feedback=feedback,
        strengths=strengths,
        improvements=improvements,
        confidence=min(100, score + 5),
    )


def generate_interview_question(
    client: Optional[OpenAI],
    topic: str,
    previous_questions: Sequence[str] = (),
    model: str = openai_api.DEFAULT_CHAT_MODEL,
) -> Tuple[InterviewQuestion, str]:
    """
    Returns a new interview question and where it came from ("ai" or
    "fallback").

    Without a client, or when the call fails or returns nothing, a canned
    question for the topic is used. A reply that is not JSON becomes the
    question text.
    """
    if client is None:
        logger.info("No completion client configured, using fallback question")
        return fallback_question(topic, previous_questions), SOURCE_FALLBACK
    try:
        content = _chat(
            client,
            prompts.INTERVIEW_QUESTION_SYSTEM_PROMPT,
            prompts.make_interview_question_prompt(topic, previous_questions),
            model=model,
            max_tokens=500,
            temperature=0.7,
            task="generate interview question",
        )
    except CareerAssistantError:
        return fallback_question(topic, previous_questions), SOURCE_FALLBACK
    if not content:
        return fallback_question(topic, previous_questions), SOURCE_FALLBACK

    try:
        question = InterviewQuestion.model_validate(_parse_json_response(content))
        return question, SOURCE_AI
    except (json.JSONDecodeError, ValidationError):
        return (
            InterviewQuestion(
                id=f"ai_{new_id()}",
                question=content.strip(),
                category="general",
                difficulty=InterviewDifficulty.MEDIUM,
            ),
            SOURCE_AI,
        )


def evaluate_interview_response(
    client: Optional[OpenAI],
    question: str,
    answer: str,
    category: str,
    model: str = openai_api.DEFAULT_CHAT_MODEL,
) -> Tuple[ResponseEvaluation, str]:
    """Scores an answer with the model, or with basic_evaluation when it can't."""
    if client is None:
        logger.info("No completion client configured, using basic evaluation")
        return basic_evaluation(answer), SOURCE_FALLBACK
    try:
        content = _chat(
            client,
            prompts.INTERVIEW_EVALUATOR_SYSTEM_PROMPT,
            prompts.make_response_evaluation_prompt(question, answer, category),
            model=model,
            max_tokens=800,
            temperature=0.3,
            task="evaluate interview response",
        )
    except CareerAssistantError:
        return basic_evaluation(answer), SOURCE_FALLBACK
    if not content:
        return basic_evaluation(answer), SOURCE_FALLBACK
    try:
        evaluation = ResponseEvaluation.model_validate(_parse_json_response(content))
        return evaluation, SOURCE_AI
    except (json.JSONDecodeError, ValidationError) as exc:
        logger.warning("Unusable evaluation, using basic evaluation: %s", exc)
        return basic_evaluation(answer), SOURCE_FALLBACK
