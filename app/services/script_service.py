"""
Podcast script generation from parsed document text.

Joins the documents' text, bounds its size, asks the completion service for a
two-host conversational script and estimates how long it takes to read aloud.
"""

import logging
import math
from typing import Dict, List, Optional, Protocol, Sequence

from pydantic import BaseModel

from app.errors import GenerationFailure

logger = logging.getLogger(__name__)

DOCUMENT_SEPARATOR = "\n\n---\n\n"
# ~100k tokens at roughly 4 characters per token
MAX_INPUT_CHARS = 400_000
TRUNCATION_MARKER = "\n\n[Content truncated due to length]"
TEMPERATURE = 0.7
MAX_OUTPUT_TOKENS = 4000
WORDS_PER_MINUTE = 150

SYSTEM_PROMPT = """You are a talented podcast script writer. Your job is to convert document content into an engaging, conversational podcast script that feels natural and easy to listen to.

Guidelines:
- Create a script suitable for a podcast conversation between two hosts
- Make it engaging, clear, and easy to follow
- Break down complex topics into digestible segments
- Use natural dialogue markers (e.g., "Host 1:", "Host 2:")
- Include transitions and natural flow
- Maintain accuracy to the original content
- Keep a conversational, friendly tone
- Structure the content logically with clear sections
- The script should be ready to be read aloud by text-to-speech

Format the output as a clean transcript with clear speaker labels and natural dialogue."""


class CompletionClient(Protocol):
    async def complete(
        self,
        model: str,
        messages: List[Dict[str, str]],
        temperature: float,
        max_tokens: int,
    ) -> str:
        ...


class PodcastScript(BaseModel):
    transcript: str
    estimated_duration: int  # seconds


def combine_texts(texts: Sequence[str]) -> str:
    return DOCUMENT_SEPARATOR.join(texts).strip()


def truncate_text(text: str, limit: int = MAX_INPUT_CHARS) -> str:
    """Cut text to limit characters and mark the cut; shorter text is returned as is."""
    if len(text) <= limit:
        return text
    return text[:limit] + TRUNCATION_MARKER


def build_messages(
    text: str,
    document_count: int,
    name: Optional[str] = None,
    description: Optional[str] = None,
) -> List[Dict[str, str]]:
    header = ""
    if name:
        header += f"Title: {name}\n"
    if description:
        header += f"Context: {description}\n\n"
    plural = "s" if document_count > 1 else ""
    user_prompt = (
        f"Convert the following document{plural} into a podcast script:\n\n"
        f"{header}\n{text}\n\n"
        "Please create an engaging podcast script that captures the key points "
        "and makes them accessible and interesting for listeners."
    )
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": user_prompt},
    ]


def estimate_duration(transcript: str, words_per_minute: int = WORDS_PER_MINUTE) -> int:
    """Spoken length in seconds, rounded up."""
    word_count = len(transcript.split())
    return math.ceil(word_count / words_per_minute * 60)


async def generate_podcast_script(
    texts: Sequence[str],
    llm: CompletionClient,
    model: str,
    name: Optional[str] = None,
    description: Optional[str] = None,
) -> PodcastScript:
    combined = combine_texts(texts)
    text_to_process = truncate_text(combined, MAX_INPUT_CHARS)
    if len(text_to_process) != len(combined):
        logger.info("Combined text truncated from %d to %d characters", len(combined), MAX_INPUT_CHARS)

    transcript = await llm.complete(
        model=model,
        messages=build_messages(text_to_process, len(texts), name, description),
        temperature=TEMPERATURE,
        max_tokens=MAX_OUTPUT_TOKENS,
    )
    if not transcript or not transcript.strip():
        raise GenerationFailure("No transcript generated by the completion service")

    return PodcastScript(transcript=transcript, estimated_duration=estimate_duration(transcript))
