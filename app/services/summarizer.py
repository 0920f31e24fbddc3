import logging
from dataclasses import dataclass
from ..config import get_settings
import httpx
from openai import AsyncOpenAI, APIError, AuthenticationError, RateLimitError, BadRequestError

logger = logging.getLogger(__name__)
settings = get_settings()

MAX_PROMPT_CHARS = 500
BLOCKED_PROMPT_WORDS = ("hack", "exploit", "bypass", "unauthorized")

SUMMARY_SYSTEM_PROMPT = (
    "You are an expert meeting notes summarizer. Create a clear, structured summary "
    "of the provided content that follows the user's instructions. The summary must be "
    "clear and concise, organized with headings/sections, professional in tone, "
    "and actionable when applicable."
)


class SummarizerError(Exception):
    """Provider failure with a message that is safe to show to users."""


@dataclass
class SummaryResult:
    summary: str
    tokens_used: int
    model: str


def validate_prompt(prompt: str) -> bool:
    if not prompt or not prompt.strip():
        return False
    if len(prompt) > MAX_PROMPT_CHARS:
        return False
    lower = prompt.lower()
    return not any(word in lower for word in BLOCKED_PROMPT_WORDS)


def build_prompt(content: str, prompt: str) -> str:
    return (
        f"CONTENT TO SUMMARIZE:\n{content}\n\n"
        f"USER INSTRUCTIONS:\n{prompt}\n\n"
        "SUMMARY:"
    )


async def _ollama_complete(prompt: str, max_tokens: int) -> SummaryResult:
    async with httpx.AsyncClient(timeout=120) as client:
        r = await client.post(
            f"{settings.ollama_base}/api/generate",
            json={
                "model": settings.ollama_model,
                "system": SUMMARY_SYSTEM_PROMPT,
                "prompt": prompt,
                "stream": False,
                "options": {"num_predict": max_tokens},
            },
        )
        r.raise_for_status()
        j = r.json()
    tokens = (j.get("prompt_eval_count") or 0) + (j.get("eval_count") or 0)
    return SummaryResult(summary=j.get("response", ""), tokens_used=tokens, model=settings.ollama_model)


async def _openai_complete(prompt: str, max_tokens: int) -> SummaryResult:
    if not settings.openai_key:
        raise SummarizerError("AI service not properly configured")
    client = AsyncOpenAI(api_key=settings.openai_key)
    r = await client.chat.completions.create(
        model=settings.openai_model,
        messages=[
            {"role": "system", "content": SUMMARY_SYSTEM_PROMPT},
            {"role": "user", "content": prompt},
        ],
        temperature=0.2,
        max_tokens=max_tokens,
    )
    tokens = r.usage.total_tokens if r.usage else 0
    return SummaryResult(summary=r.choices[0].message.content or "", tokens_used=tokens, model=r.model)


async def generate_summary(content: str, prompt: str, max_tokens: int = 1000) -> SummaryResult:
    full_prompt = build_prompt(content, prompt)
    try:
        if settings.llm_provider == "ollama":
            result = await _ollama_complete(full_prompt, max_tokens)
        else:
            result = await _openai_complete(full_prompt, max_tokens)
    except SummarizerError:
        raise
    except AuthenticationError as e:
        logger.exception("LLM authentication failed")
        raise SummarizerError("AI service not properly configured") from e
    except RateLimitError as e:
        logger.exception("LLM quota exceeded")
        raise SummarizerError("AI service quota exceeded") from e
    except BadRequestError as e:
        logger.exception("LLM rejected request")
        raise SummarizerError("Content violates AI service policies") from e
    except (APIError, httpx.HTTPError) as e:
        logger.exception("LLM error")
        raise SummarizerError("Failed to generate summary. Please try again.") from e

    result.summary = result.summary.strip()
    logger.info("Summary generated model=%s tokens=%s", result.model, result.tokens_used)
    return result
