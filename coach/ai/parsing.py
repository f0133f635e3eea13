import json
import logging

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from coach.ai.adapter import CoachMessage


logger = logging.getLogger(__name__)

_WEEKLY_TOPIC = "weekly_reflection"


class GuidancePayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    title: str = Field(min_length=1, max_length=255)
    body: str = Field(min_length=1)
    call_to_action: str = Field(alias="callToAction", min_length=1)


def _strip_code_fence(raw: str) -> str:
    text = raw.strip()
    if text.startswith("```"):
        text = text.split("\n", 1)[1] if "\n" in text else ""
        if text.rstrip().endswith("```"):
            text = text.rstrip()[:-3]
    return text.strip()


def fallback_guidance(user_context: dict) -> CoachMessage:
    name = user_context.get("firstName")
    greeting = f"{name}, take" if name else "Take"
    if user_context.get("topic") == _WEEKLY_TOPIC:
        return CoachMessage(
            title="Look Back Together",
            body=(
                f"{greeting} ten minutes this week to talk about one moment that "
                "brought you closer and one that felt hard. Listen to understand, "
                "not to answer."
            ),
            call_to_action="What is one thing you want to do differently next week?",
        )
    return CoachMessage(
        title="Small Moments Matter",
        body=(
            f"{greeting} a moment today to notice something your partner does "
            "well and tell them. Specific appreciation builds connection faster "
            "than grand gestures."
        ),
        call_to_action="What is one thing you appreciated about your partner today?",
    )


def parse_guidance(raw: str | None, user_context: dict) -> CoachMessage:
    if raw:
        try:
            payload = GuidancePayload.model_validate(json.loads(_strip_code_fence(raw)))
            return CoachMessage(
                title=payload.title,
                body=payload.body,
                call_to_action=payload.call_to_action,
            )
        except (ValueError, ValidationError) as exc:
            logger.warning(
                "Coach output did not match the guidance schema, using template",
                extra={"error": str(exc)},
            )
    return fallback_guidance(user_context)
