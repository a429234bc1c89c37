"""AI coaching advisor backed by a LangChain chat model.

Every entry point either returns a validated result or raises
``AdvisoryError``; it never touches storage. Fallback content for failed
calls lives at the bottom of this module and is applied by the callers in
``academy.services.coaching``.
"""

import json
from functools import lru_cache
from typing import Any, Optional, Sequence

import structlog
from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import HumanMessage, SystemMessage
from langchain_google_genai import ChatGoogleGenerativeAI
from pydantic import BaseModel, ValidationError

from academy import config
from academy.errors import AdvisoryError
from academy.schemas import (
    Drill,
    DrillResponse,
    PlanDay,
    ProgressInsight,
    RetentionPlan,
    SkillScores,
    TrainingPlanWeek,
)
from academy.services import prompts

logger = structlog.get_logger(__name__)


def get_chat_llm(*, temperature: float = 0.7) -> BaseChatModel:
    if not config.GOOGLE_API_KEY:
        raise AdvisoryError("GOOGLE_API_KEY (or GEMINI_API_KEY) environment variable must be set")

    logger.info("chat_llm_created", model=config.LLM_MODEL)
    return ChatGoogleGenerativeAI(
        model=config.LLM_MODEL,
        temperature=temperature,
        google_api_key=config.GOOGLE_API_KEY,
        timeout=config.LLM_TIMEOUT_SECONDS,
        max_retries=config.LLM_MAX_RETRIES,
    )


def extract_json_object(text: str) -> dict[str, Any]:
    """Pull the outermost JSON object out of a model reply."""
    text = text.strip()
    if not text:
        raise AdvisoryError("Empty response from AI advisor")

    candidate = text
    start = text.find("{")
    end = text.rfind("}")
    if start != -1 and end != -1 and end > start:
        candidate = text[start : end + 1]

    try:
        parsed = json.loads(candidate)
    except json.JSONDecodeError as exc:
        logger.warning("advisor_reply_not_json", preview=candidate[:200])
        raise AdvisoryError("AI advisor returned malformed JSON") from exc

    if not isinstance(parsed, dict):
        raise AdvisoryError("AI advisor reply is not a JSON object")
    return parsed


class Advisor:
    def __init__(self, llm: Optional[BaseChatModel] = None) -> None:
        self._llm = llm

    @property
    def llm(self) -> BaseChatModel:
        if self._llm is None:
            self._llm = get_chat_llm()
        return self._llm

    def _ask(self, system_prompt: str, prompt: str, result_type: type[BaseModel]) -> Any:
        messages = [SystemMessage(content=system_prompt), HumanMessage(content=prompt)]
        try:
            response = self.llm.invoke(messages)
        except AdvisoryError:
            raise
        except Exception as exc:
            logger.warning("advisor_call_failed", result=result_type.__name__, error=str(exc))
            raise AdvisoryError(f"AI advisor request failed: {exc}") from exc

        content = response.content if isinstance(response.content, str) else str(response.content)
        payload = extract_json_object(content)
        try:
            return result_type.model_validate(payload)
        except ValidationError as exc:
            logger.warning("advisor_reply_invalid", result=result_type.__name__, errors=exc.error_count())
            raise AdvisoryError(f"AI advisor reply does not match {result_type.__name__}") from exc

    def generate_training_plan(
        self,
        name: str,
        age: int,
        skill_level: str,
        current_skills: SkillScores,
        focus_areas: Optional[Sequence[str]] = None,
    ) -> TrainingPlanWeek:
        prompt = prompts.TRAINING_PLAN_PROMPT.format(
            name=name,
            age=age,
            skill_level=skill_level,
            serve=current_skills.serve,
            footwork=current_skills.footwork,
            stamina=current_skills.stamina,
            mental_focus=current_skills.mental_focus,
            focus_line=f"Priority Focus Areas: {', '.join(focus_areas)}\n" if focus_areas else "",
            drill_shape=prompts.DRILL_SHAPE,
        )
        return self._ask(prompts.COACH_SYSTEM_PROMPT, prompt, TrainingPlanWeek)

    def generate_progress_summary(
        self,
        name: str,
        previous_skills: SkillScores,
        current_skills: SkillScores,
        session_notes: Sequence[str],
        attendance_rate: float,
    ) -> ProgressInsight:
        prompt = prompts.PROGRESS_SUMMARY_PROMPT.format(
            name=name,
            previous=previous_skills,
            current=current_skills,
            notes=". ".join(session_notes) or "none",
            attendance_rate=attendance_rate,
        )
        return self._ask(prompts.PROGRESS_SYSTEM_PROMPT, prompt, ProgressInsight)

    def recommend_drills(
        self,
        query: str,
        age_group: Optional[str] = None,
        skill_level: Optional[str] = None,
    ) -> list[Drill]:
        prompt = prompts.DRILLS_PROMPT.format(
            query=query,
            age_line=f"Age Group: {age_group}\n" if age_group else "",
            level_line=f"Skill Level: {skill_level}\n" if skill_level else "",
            drill_shape=prompts.DRILL_SHAPE,
        )
        return self._ask(prompts.DRILLS_SYSTEM_PROMPT, prompt, DrillResponse).drills

    def analyze_dropout_risk(
        self,
        name: str,
        attendance_rate: float,
        skill_progression: Sequence[int],
        missed_sessions: int,
        recent_notes: Sequence[str],
    ) -> RetentionPlan:
        prompt = prompts.DROPOUT_RISK_PROMPT.format(
            name=name,
            attendance_rate=attendance_rate,
            progression=" -> ".join(str(score) for score in skill_progression) or "no assessments",
            missed_sessions=missed_sessions,
            notes=". ".join(recent_notes) or "none",
        )
        return self._ask(prompts.RETENTION_SYSTEM_PROMPT, prompt, RetentionPlan)


@lru_cache()
def get_advisor() -> Advisor:
    return Advisor()


# -----------------------------
# Fallback content
# -----------------------------
def _drill(name, description, duration, difficulty, equipment, steps) -> Drill:
    return Drill(
        name=name,
        description=description,
        duration=duration,
        difficulty=difficulty,
        equipment=equipment,
        steps=steps,
    )


def fallback_drills(query: str, skill_level: Optional[str] = None) -> list[Drill]:
    """Static drills picked by keywords in ``query``."""
    text = query.lower()
    level = skill_level or "intermediate"

    if "serve" in text or "serving" in text:
        return [
            _drill("Target Practice Serves", "Improve serve accuracy by aiming at specific targets",
                   "15-20 mins", level, ["tennis balls", "cones or targets"],
                   ["Place targets in service boxes", "Start with slow, controlled serves",
                    "Focus on consistent contact point",
                    "Gradually increase power while maintaining accuracy",
                    "Practice both first and second serves"]),
            _drill("Shadow Serving", "Practice serve motion without a ball to perfect technique",
                   "10-15 mins", "beginner", ["tennis racket"],
                   ["Stand in serving position", "Practice the complete serving motion slowly",
                    "Focus on smooth weight transfer", "Repeat the motion 20-30 times",
                    "Gradually increase speed of motion"]),
        ]

    if "footwork" in text or "movement" in text:
        return [
            _drill("Ladder Drills", "Improve foot speed and coordination",
                   "10-15 mins", level, ["agility ladder or cones"],
                   ["Set up ladder or cones in a line", "Practice quick feet through the ladder",
                    "Use different patterns: in-in-out-out", "Focus on staying on balls of feet",
                    "Rest 30 seconds between sets"]),
            _drill("Split Step Practice", "Master the fundamental ready position",
                   "8-12 mins", "beginner", ["tennis court"],
                   ["Start in ready position at baseline", "Practice small jump as opponent hits",
                    "Land on balls of feet, knees bent", "Immediately move in desired direction",
                    "Repeat 15-20 times"]),
        ]

    if "forehand" in text or "groundstroke" in text:
        return [
            _drill("Wall Rally Practice", "Develop consistent forehand technique",
                   "15-20 mins", level, ["tennis ball", "wall or backboard"],
                   ["Stand 6-8 feet from wall", "Hit gentle forehand shots against wall",
                    "Focus on smooth swing path", "Maintain consistent contact point",
                    "Count consecutive hits"]),
            _drill("Forehand Cross-Court", "Practice forehand accuracy and placement",
                   "12-18 mins", "intermediate", ["tennis balls", "cones"],
                   ["Set up targets in cross-court areas", "Hit forehands from baseline",
                    "Focus on topspin and depth", "Aim for consistency over power",
                    "Track successful target hits"]),
        ]

    return [
        _drill("Mini Tennis", "Improve hand-eye coordination and control",
               "10-15 mins", "beginner", ["tennis balls", "short court or service boxes"],
               ["Play within service boxes only", "Use gentle, controlled shots",
                "Focus on consistent ball contact", "Rally back and forth", "Gradually increase pace"]),
        _drill("Cone Weaving", "Enhance agility and court movement",
               "8-12 mins", "intermediate", ["cones", "tennis court"],
               ["Set up cones in zigzag pattern", "Weave through cones at varying speeds",
                "Stay low and balanced", "Use proper tennis movement patterns",
                "Time yourself for improvement"]),
        _drill("Ball Bounce Control", "Develop racket control and touch",
               "5-10 mins", "beginner", ["tennis ball", "tennis racket"],
               ["Bounce ball on racket strings", "Keep ball low and controlled",
                "Alternate between forehand and backhand sides",
                "Try to reach 50 consecutive bounces", "Progress to walking while bouncing"]),
    ]


def fallback_training_plan(skill_level: str) -> TrainingPlanWeek:
    drills = fallback_drills("serve", skill_level) + fallback_drills("footwork", skill_level)
    return TrainingPlanWeek(
        week=1,
        focus_areas=["Serve", "Footwork"],
        days=[
            PlanDay(
                day="Day 1-2",
                drills=drills,
                notes="Standard plan used while the AI advisor is unavailable.",
            )
        ],
        progress_goals=[
            "Improve consistency using serve drills",
            "Build foundational movement with footwork patterns",
        ],
    )
