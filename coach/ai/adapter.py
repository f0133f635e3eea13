from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class CoachMessage:
    title: str
    body: str
    call_to_action: str


class CoachGenerationError(Exception):
    pass


class CoachMessageGenerator(ABC):
    name: str = "abstract"

    @abstractmethod
    async def generate_guidance(self, user_context: dict) -> CoachMessage:
        """
        Returns a title/body/call-to-action message for the given context.
        """
        raise NotImplementedError

    @abstractmethod
    async def chat(self, message: str, context: dict | None = None) -> str:
        raise NotImplementedError

    async def suggestions(self, user_id: int) -> list[str]:
        return [
            "Try a 5-minute gratitude exercise with your partner",
            "Read the conflict resolution course this week",
            'Play "Love Language Quiz" together',
        ]

    async def aclose(self) -> None:
        return None
