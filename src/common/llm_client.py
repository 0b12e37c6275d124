import json
from enum import Enum
from logging import WARNING, getLogger
from typing import Any, TypeVar

from anthropic import AsyncAnthropic
from openai import AsyncOpenAI
from pydantic import BaseModel, ValidationError

from common.logger import logger


getLogger("anthropic._base_client").setLevel(WARNING)
getLogger("openai._base_client").setLevel(WARNING)

T = TypeVar("T", bound=BaseModel)

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/openai/"
GROQ_BASE_URL = "https://api.groq.com/openai/v1"


class ClaudeChatModel(str, Enum):
    OPUS = "claude-opus-4-20250514"
    SONNET = "claude-sonnet-4-20250514"


class GeminiChatModel(str, Enum):
    PRO = "gemini-2.5-pro-preview-05-06"
    FLASH_LITE = "gemini-2.5-flash-lite-preview-06-17"
    FLASH = "gemini-2.5-flash"


class OpenAIChatModel(str, Enum):
    GPT41 = "gpt-4.1-2025-04-14"


class LlamaChatModel(str, Enum):
    SCOUT = "meta-llama/llama-4-scout-17b-16e-instruct"


class LLMResponseError(ValueError):
    """Reply text could not be turned into JSON or did not match the schema."""


def resolve_model(name: str) -> Enum:
    for family in (ClaudeChatModel, GeminiChatModel, OpenAIChatModel, LlamaChatModel):
        try:
            return family(name)
        except ValueError:
            continue
    raise ValueError(f"Invalid model: {name}")


def extract_json(text: str) -> Any:
    """Parse the JSON object embedded in a model reply.

    Leading chatter before the first `{` and a trailing code fence are dropped.
    """
    text = text.strip()
    start = text.find("{")
    if start == -1:
        raise LLMResponseError("No JSON object found in model response")
    end = len(text) - 3 if text.endswith("```") else len(text)

    try:
        return json.loads(text[start:end])
    except json.JSONDecodeError as e:
        snippet = text[start : start + 200]
        logger.debug(f"JSON snippet: {snippet}")
        raise LLMResponseError(f"Failed to parse JSON from model response: {e}") from e


def _to_openai_content(part: dict[str, Any]) -> dict[str, Any]:
    if part["type"] == "image":
        return {"type": "image_url", "image_url": {"url": part["image"]}}
    return {"type": "text", "text": part["text"]}


def _to_anthropic_content(part: dict[str, Any]) -> dict[str, Any]:
    if part["type"] == "image":
        header, _, payload = part["image"].partition(",")
        media_type = header.removeprefix("data:").removesuffix(";base64")
        return {"type": "image", "source": {"type": "base64", "media_type": media_type, "data": payload}}
    return {"type": "text", "text": part["text"]}


def _normalize(messages: list[dict[str, Any]] | str) -> list[dict[str, Any]]:
    if isinstance(messages, str):
        return [{"role": "user", "content": [{"type": "text", "text": messages}]}]
    return messages


class LLMClient:
    """Thin adapter over the hosted model providers.

    Messages use one neutral shape, `{"role", "content": [{"type": "text", "text"} |
    {"type": "image", "image": <data url>}]}`, converted to each provider's format.
    """

    def __init__(self, model: str, temperature: float = 0.5, max_tokens: int = 32768, api_keys: dict[str, str] | None = None):
        self.model = resolve_model(model)
        self.temperature = temperature
        self.max_tokens = max_tokens
        self._api_keys = api_keys or {}
        self._client: AsyncOpenAI | AsyncAnthropic | None = None

    def _require_key(self, name: str) -> str:
        key = self._api_keys.get(name, "")
        if not key:
            raise ValueError(f"{name} is required for model {self.model.value}. Please set it in your environment or .env file.")
        return key

    def _get_client(self) -> AsyncOpenAI | AsyncAnthropic:
        if self._client:
            return self._client

        if isinstance(self.model, ClaudeChatModel):
            self._client = AsyncAnthropic(api_key=self._require_key("ANTHROPIC_API_KEY"))
        elif isinstance(self.model, GeminiChatModel):
            self._client = AsyncOpenAI(api_key=self._require_key("GOOGLE_API_KEY"), base_url=GEMINI_BASE_URL)
        elif isinstance(self.model, LlamaChatModel):
            self._client = AsyncOpenAI(api_key=self._require_key("GROQ_API_KEY"), base_url=GROQ_BASE_URL)
        else:
            self._client = AsyncOpenAI(api_key=self._require_key("OPENAI_API_KEY"))
        return self._client

    async def generate_text(self, messages: list[dict[str, Any]] | str, temperature: float | None = None) -> str:
        messages = _normalize(messages)
        client = self._get_client()
        temperature = self.temperature if temperature is None else temperature

        if isinstance(client, AsyncAnthropic):
            response = await client.messages.create(
                model=self.model.value,
                max_tokens=self.max_tokens,
                temperature=temperature,
                messages=[{"role": m["role"], "content": [_to_anthropic_content(p) for p in m["content"]]} for m in messages],
            )
            return "".join(block.text for block in response.content if block.type == "text")

        response = await client.chat.completions.create(
            model=self.model.value,
            max_tokens=self.max_tokens,
            temperature=temperature,
            messages=[{"role": m["role"], "content": [_to_openai_content(p) for p in m["content"]]} for m in messages],
        )
        return response.choices[0].message.content or ""

    async def generate_json(self, messages: list[dict[str, Any]] | str, schema: type[T] | None = None, temperature: float | None = None) -> T | Any:
        text = await self.generate_text(messages, temperature)
        parsed = extract_json(text)

        if schema is None:
            return parsed

        try:
            return schema.model_validate(parsed)
        except ValidationError as e:
            logger.debug(f"Schema validation failed for {schema.__name__}: {e}")
            raise LLMResponseError(f"Model response does not match {schema.__name__}: {e}") from e
