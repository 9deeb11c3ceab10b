from openai import AsyncOpenAI

from storygen.config.settings import settings


def get_openai_client(api_key: str, base_url: str = None, timeout: float = None) -> AsyncOpenAI:
    # max_retries=0: one request per generation, failures are recorded, not retried
    return AsyncOpenAI(
        api_key=api_key,
        base_url=base_url or settings.LLM_BASE_URL,
        timeout=timeout if timeout is not None else settings.LLM_TIMEOUT_SECONDS,
        max_retries=0,
    )
