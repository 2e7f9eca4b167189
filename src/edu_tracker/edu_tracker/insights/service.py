"""
insights/service.py

Best-effort AI commentary on attendance data. Every failure path returns a
canned sentence; nothing here raises to the caller.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional, Sequence

from langchain_core.prompts import PromptTemplate

from ..attendance.model import AggregatedStats
from ..common.datetime_utils import ms_to_hours
from ..core.constants import WEEKLY_TARGET_HOURS

logger = logging.getLogger(__name__)

NO_DATA_MESSAGE = "No data to analyse yet."
UNAVAILABLE_MESSAGE = "Cannot reach the AI service, please check the API key."
ANALYSIS_FALLBACK = "The analysis service is temporarily unavailable, please try again later."
QUOTE_FALLBACK = "Keep it up!"
NO_CLIENT_QUOTE = "Great work today!"

ANALYSIS_TEMPLATE = PromptTemplate(
    input_variables=["data", "target"],
    template="""
You are a teaching assistant who tracks student attendance. Using the clock-in
data below (name, team, total hours) write a short weekly review.

Data:
{data}

Include:
1. The most active team or student.
2. Students clearly below the weekly target of {target} hours.
3. Brief management advice for the teacher.

Keep the tone professional and encouraging. Plain paragraphs, no Markdown.
""",
)

QUOTE_TEMPLATE = PromptTemplate(
    input_variables=["name", "hours"],
    template=(
        "Write one short, light-hearted line of encouragement for the student {name}, "
        "who just finished {hours} hours of study. At most 30 words."
    ),
)


def build_llm(api_key: Optional[str], model_name: str) -> Optional[Any]:
    """Groq chat model, or None when no key is configured."""
    if not api_key:
        logger.warning("GROQ_API_KEY missing, AI commentary disabled")
        return None

    from langchain_groq import ChatGroq

    return ChatGroq(temperature=0.7, model_name=model_name, groq_api_key=api_key)


def _text_of(response: Any) -> str:
    content = getattr(response, "content", response)
    return content.strip() if isinstance(content, str) else ""


class InsightsService:
    def __init__(self, llm: Optional[Any]):
        self._llm = llm

    async def analyze(self, stats: Sequence[AggregatedStats]) -> str:
        if self._llm is None:
            return UNAVAILABLE_MESSAGE
        if not stats:
            return NO_DATA_MESSAGE

        summary = [
            {"name": s.student_name, "team": s.team_number, "hours": f"{ms_to_hours(s.total_duration_ms):.2f}"}
            for s in stats
        ]
        prompt = ANALYSIS_TEMPLATE.format(data=json.dumps(summary, indent=2, ensure_ascii=False), target=WEEKLY_TARGET_HOURS)
        try:
            response = await self._llm.ainvoke(prompt)
        except Exception as e:
            logger.error(f"Attendance analysis failed: {e}")
            return ANALYSIS_FALLBACK
        return _text_of(response) or "Could not generate the report."

    async def congratulate(self, student_name: str, duration_ms: int) -> str:
        if self._llm is None:
            return NO_CLIENT_QUOTE

        prompt = QUOTE_TEMPLATE.format(name=student_name, hours=f"{ms_to_hours(duration_ms, digits=1):.1f}")
        try:
            response = await self._llm.ainvoke(prompt)
        except Exception as e:
            logger.warning(f"Quote generation failed: {e}")
            return QUOTE_FALLBACK
        return _text_of(response) or QUOTE_FALLBACK
