import logging

from coach.ai.adapter import CoachMessageGenerator
from coach.ai.openai_adapter import OpenAICoachGenerator
from coach.ai.template_adapter import TemplateCoachGenerator
from config import Settings


logger = logging.getLogger(__name__)


def build_generator(settings: Settings) -> CoachMessageGenerator:
    if not settings.openai_api_key:
        logger.warning("OPENAI_API_KEY is not set, coach messages use templates")
        return TemplateCoachGenerator()
    return OpenAICoachGenerator(
        api_key=settings.openai_api_key,
        model=settings.openai_model,
        base_url=settings.openai_base_url,
        timeout=settings.openai_timeout_seconds,
    )
