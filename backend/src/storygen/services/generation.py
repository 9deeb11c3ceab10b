"""Turn document text into epics and user stories with one chat completion call."""
import json
import logging
from typing import Optional

from openai import APIConnectionError, APIStatusError, APITimeoutError
from pydantic import ValidationError

from storygen.client.openai_client import get_openai_client
from storygen.config.settings import settings
from storygen.errors import (
    EmptyUpstreamResponse,
    MalformedResponse,
    MissingCredential,
    SchemaViolation,
    UpstreamError,
    UpstreamTimeout,
)
from storygen.schemas import GenerationResult
from storygen.services.prompts import build_story_prompt
from storygen.utils.text import find_json_object

logger = logging.getLogger(__name__)


def parse_generation_result(content: str) -> GenerationResult:
    raw = find_json_object(content)
    if raw is None:
        raise MalformedResponse("Failed to parse JSON response: no JSON object found")

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise MalformedResponse(f"Failed to parse JSON response: {e}") from e

    try:
        return GenerationResult.model_validate(data)
    except ValidationError as e:
        raise SchemaViolation(f"Invalid response structure: {e}") from e


def _message_content(response) -> Optional[str]:
    choices = getattr(response, "choices", None) or []
    if not choices:
        return None
    message = getattr(choices[0], "message", None)
    return getattr(message, "content", None)


class GenerationClient:
    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = None,
        model: str = None,
        temperature: float = None,
        max_tokens: int = None,
        timeout: float = None,
    ):
        self.api_key = api_key
        self.base_url = base_url or settings.LLM_BASE_URL
        self.model = model or settings.LLM_MODEL
        self.temperature = settings.LLM_TEMPERATURE if temperature is None else temperature
        self.max_tokens = max_tokens or settings.LLM_MAX_TOKENS
        self.timeout = settings.LLM_TIMEOUT_SECONDS if timeout is None else timeout

    async def generate(self, document_text: str) -> GenerationResult:
        if not self.api_key or not self.api_key.strip():
            raise MissingCredential()

        messages = [{"role": "user", "content": build_story_prompt(document_text)}]

        async with get_openai_client(self.api_key, self.base_url, self.timeout) as client:
            try:
                response = await client.chat.completions.create(
                    model=self.model,
                    messages=messages,
                    temperature=self.temperature,
                    max_tokens=self.max_tokens,
                )
            except APITimeoutError as e:
                raise UpstreamTimeout(f"LLM API request timed out after {self.timeout}s") from e
            except APIStatusError as e:
                raise UpstreamError.from_response(e.status_code, e.response.text) from e
            except APIConnectionError as e:
                raise UpstreamError(f"LLM API connection failed: {e}") from e

        content = _message_content(response)
        if not content or not content.strip():
            raise EmptyUpstreamResponse()

        try:
            result = parse_generation_result(content)
        except (MalformedResponse, SchemaViolation):
            logger.error(f"Unusable LLM response ({len(content)} chars): {content[:500]}")
            raise

        logger.info(
            f"LLM returned {len(result.epics)} epics, "
            f"{sum(len(e.user_stories) for e in result.epics)} user stories"
        )
        return result


def get_generation_client() -> GenerationClient:
    """Build a client from current settings; the API key is read here, per request."""
    return GenerationClient(api_key=settings.LLM_API_KEY)
