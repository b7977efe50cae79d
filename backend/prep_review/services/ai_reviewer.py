"""
AI review of submitted application documents.

Scores a document 0-100, returns a short feedback list and proposed
text replacements. Any failure, a missing API key, or too little text
produces the neutral default review for the document type instead.
"""
import asyncio
import json
import logging
import math

from openai import AsyncOpenAI, OpenAIError
from pydantic import BaseModel, Field

from prep_review.config import settings

logger = logging.getLogger(__name__)

NEUTRAL_SCORE = 50
MAX_FEEDBACK_ITEMS = 5

_REVIEWER_PROFILES = {
    "CV/Resume": (
        "an expert career consultant and PhD mentor specialized in evaluating academic CVs/resumes",
        "format, clarity, academic achievements, research experience, publications, "
        "and relevance to PhD applications",
    ),
    "Statement of Purpose": (
        "an expert graduate admissions advisor specialized in evaluating Statements of Purpose",
        "clarity of research interests, academic goals, motivation, relevance to target programs, "
        "overall structure, and how effectively it connects past experiences to future goals",
    ),
    "Personal History Statement": (
        "an expert in diversity and inclusion in higher education specialized in evaluating "
        "Personal History Statements",
        "how effectively it communicates personal challenges, identity formation, diverse perspectives, "
        "commitment to diversity, and how these contribute to academic communities",
    ),
}
_GENERIC_PROFILE = (
    "an experienced graduate admissions mentor",
    "clarity, structure, and how well it supports a graduate application",
)

_DEFAULT_FEEDBACK = {
    "CV/Resume": [
        "We couldn't analyze your CV completely. Please try again later.",
        "Make sure your CV includes key sections like education, research experience, and publications.",
        "Consider highlighting your academic achievements and skills relevant to your field.",
    ],
    "Statement of Purpose": [
        "We couldn't analyze your Statement of Purpose completely. Please try again later.",
        "Make sure your SOP clearly articulates your research interests and academic goals.",
        "Consider explaining how your past experiences have prepared you for your intended program.",
        "Ensure your statement demonstrates fit with your target programs.",
    ],
    "Personal History Statement": [
        "We couldn't analyze your Personal History Statement completely. Please try again later.",
        "Make sure your statement authentically describes your background and personal journey.",
        "Consider articulating how your unique experiences and perspective will contribute to diversity.",
        "Focus on connecting your personal experiences to your academic and career aspirations.",
    ],
}
_GENERIC_DEFAULT_FEEDBACK = [
    "We couldn't analyze your document completely. Please try again later.",
    "Make sure the document is complete and clearly structured.",
]

PROMPT_TEMPLATE = """\
You are {role}.
Please analyze the following {document_type} and:

1. Evaluate its strengths and weaknesses on a scale of 0-100.
2. Provide 3-5 specific pieces of feedback for improvement.
3. Consider {criteria}.
4. Propose up to 5 concrete rewrites. Each must quote a passage exactly as it
   appears in the document and give the improved replacement text.

{document_type} Content:
{text}

Respond in the following JSON format:
{{
  "score": <number between 0-100>,
  "feedback": ["<specific feedback point>", "..."],
  "suggestions": [
    {{"originalText": "<exact passage>", "suggestedText": "<replacement>"}}
  ]
}}
"""


class ReviewSuggestion(BaseModel):
    original_text: str
    suggested_text: str
    position: int | None = None


class ReviewResult(BaseModel):
    score: int = Field(..., ge=0, le=100)
    feedback: list[str] = Field(default_factory=list)
    suggestions: list[ReviewSuggestion] = Field(default_factory=list)


def default_review(document_type: str) -> ReviewResult:
    feedback = _DEFAULT_FEEDBACK.get(document_type, _GENERIC_DEFAULT_FEEDBACK)
    return ReviewResult(score=NEUTRAL_SCORE, feedback=list(feedback))


def build_prompt(text: str, document_type: str) -> str:
    role, criteria = _REVIEWER_PROFILES.get(document_type, _GENERIC_PROFILE)
    return PROMPT_TEMPLATE.format(
        role=role,
        document_type=document_type or "document",
        criteria=criteria,
        text=text,
    )


def parse_review(raw: str, text: str) -> ReviewResult:
    """Validate the model's JSON answer against the reviewed text."""
    data = json.loads(raw)
    raw_score = float(data["score"])
    if not math.isfinite(raw_score):
        raise ValueError(f"score is not a finite number: {data['score']!r}")
    score = min(100, max(0, round(raw_score)))

    raw_feedback = data.get("feedback") or []
    raw_suggestions = data.get("suggestions") or []
    if not isinstance(raw_feedback, list) or not isinstance(raw_suggestions, list):
        raise ValueError("feedback and suggestions must be JSON arrays")

    feedback = [
        item.strip() for item in raw_feedback
        if isinstance(item, str) and item.strip()
    ]

    suggestions: list[ReviewSuggestion] = []
    for item in raw_suggestions:
        original = (item.get("originalText") or "").strip()
        suggested = (item.get("suggestedText") or "").strip()
        if not original or not suggested or original == suggested:
            continue
        # Only keep rewrites anchored in the actual document
        position = text.find(original)
        if position < 0:
            continue
        suggestions.append(ReviewSuggestion(
            original_text=original,
            suggested_text=suggested,
            position=position,
        ))

    return ReviewResult(score=score, feedback=feedback[:MAX_FEEDBACK_ITEMS], suggestions=suggestions)


class AIReviewer:
    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        timeout: float | None = None,
        min_chars: int | None = None,
    ):
        self.api_key = api_key or settings.openai_api_key
        self.model = model or settings.openai_model
        self.timeout = timeout or settings.ai_timeout_seconds
        self.min_chars = min_chars if min_chars is not None else settings.min_analysis_chars
        self._client = AsyncOpenAI(api_key=self.api_key) if self.api_key else None
        if self._client is None:
            logger.info("OpenAI API key not configured - reviews fall back to default feedback")

    async def review(self, text: str, document_type: str) -> ReviewResult:
        if len(text.strip()) < self.min_chars:
            logger.info("Insufficient content for analysis (%d chars)", len(text.strip()))
            return default_review(document_type)
        if self._client is None:
            return default_review(document_type)

        try:
            raw = await asyncio.wait_for(self._complete(build_prompt(text, document_type)), self.timeout)
            result = parse_review(raw, text)
        except asyncio.TimeoutError:
            logger.warning("AI review timed out after %.1fs", self.timeout)
            return default_review(document_type)
        except (OpenAIError, ValueError, KeyError, TypeError, AttributeError) as exc:
            logger.warning("AI review failed, using default feedback: %s", exc)
            return default_review(document_type)

        logger.info("AI review for %s: score=%d, %d suggestions", document_type, result.score, len(result.suggestions))
        return result

    async def _complete(self, prompt: str) -> str:
        response = await self._client.chat.completions.create(
            model=self.model,
            messages=[{"role": "user", "content": prompt}],
            temperature=0.7,
            max_tokens=1200,
            response_format={"type": "json_object"},
        )
        return response.choices[0].message.content or ""


_reviewer: AIReviewer | None = None


def get_reviewer() -> AIReviewer:
    global _reviewer
    if _reviewer is None:
        _reviewer = AIReviewer()
    return _reviewer
