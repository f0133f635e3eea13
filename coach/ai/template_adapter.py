from coach.ai.adapter import CoachMessage, CoachMessageGenerator
from coach.ai.parsing import fallback_guidance


_CHAT_REPLIES = (
    "That's a wonderful question. Let me help you think through this together. "
    "Open communication is the foundation of any strong relationship. "
    "What specific challenge are you facing?",
    "I hear you. It's completely normal to experience ups and downs in "
    "relationships. Can you tell me more about what you're hoping to achieve?",
    "Thank you for sharing with me. Building stronger connections takes time and "
    "intentional effort. What small step could you take today toward your goal?",
)


class TemplateCoachGenerator(CoachMessageGenerator):
    """Offline generator used when no completion API is configured."""

    name = "template"

    async def generate_guidance(self, user_context: dict) -> CoachMessage:
        return fallback_guidance(user_context)

    async def chat(self, message: str, context: dict | None = None) -> str:
        return _CHAT_REPLIES[len(message) % len(_CHAT_REPLIES)]
