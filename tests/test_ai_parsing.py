import json

import httpx
import pytest

from coach.ai.adapter import CoachGenerationError
from coach.ai.openai_adapter import OpenAICoachGenerator
from coach.ai.parsing import fallback_guidance, parse_guidance
from coach.ai.template_adapter import TemplateCoachGenerator


def test_parse_plain_json():
    raw = json.dumps(
        {"title": "Listen First", "body": "Ask one open question.", "callToAction": "Try it"}
    )

    message = parse_guidance(raw, {})

    assert message.title == "Listen First"
    assert message.call_to_action == "Try it"


def test_parse_fenced_json():
    raw = '```json\n{"title": "T", "body": "B", "callToAction": "C"}\n```'

    message = parse_guidance(raw, {})

    assert (message.title, message.body, message.call_to_action) == ("T", "B", "C")


@pytest.mark.parametrize(
    "raw",
    [None, "", "not json", '{"title": "Only a title"}', '{"title": "", "body": "x", "callToAction": "y"}'],
)
def test_unusable_output_falls_back_to_template(raw):
    message = parse_guidance(raw, {"firstName": "Mia"})

    assert message == fallback_guidance({"firstName": "Mia"})
    assert message.body.startswith("Mia, take")


def test_weekly_fallback_has_its_own_title():
    assert fallback_guidance({"topic": "weekly_reflection"}).title == "Look Back Together"
    assert fallback_guidance({}).title == "Small Moments Matter"


async def test_template_chat_is_deterministic():
    generator = TemplateCoachGenerator()

    first = await generator.chat("How do we argue less?")
    second = await generator.chat("How do we argue less?")

    assert first == second
    assert len(await generator.suggestions(1)) == 3


def _generator(handler):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return OpenAICoachGenerator(
        api_key="sk-test", model="test-model", base_url="https://llm.test/v1/", client=client
    )


async def test_openai_generator_posts_chat_completion():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = json.loads(request.content)
        content = json.dumps({"title": "Hi", "body": "Body", "callToAction": "Go"})
        return httpx.Response(200, json={"choices": [{"message": {"content": content}}]})

    generator = _generator(handler)
    message = await generator.generate_guidance({"firstName": "Jo"})
    await generator.aclose()

    assert seen["url"] == "https://llm.test/v1/chat/completions"
    assert seen["auth"] == "Bearer sk-test"
    assert seen["body"]["model"] == "test-model"
    assert message.title == "Hi"


async def test_openai_generator_raises_on_http_error():
    generator = _generator(lambda request: httpx.Response(502, json={"error": "bad"}))

    with pytest.raises(CoachGenerationError):
        await generator.chat("hello")
    await generator.aclose()


async def test_openai_chat_falls_back_on_empty_reply():
    generator = _generator(lambda request: httpx.Response(200, json={"choices": []}))

    reply = await generator.chat("hello")
    await generator.aclose()

    assert reply == "I apologize, I cannot respond at this time."
