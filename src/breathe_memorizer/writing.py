from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Callable

from .llm.openai_client import OpenAIScriptClient, PromptMetadata

logger = logging.getLogger(__name__)

GENERATION_FAILED_MESSAGE = "Failed to generate answer. Please try again."
CONNECTION_FAILED_MESSAGE = "Error connecting to AI. Please check your connection."

REFINE_SYSTEM_PROMPT = (
    "You are an expert interview coach who rewrites spoken answers so they are "
    "easy to deliver from memory.\n"
    "Your responsibilities:\n"
    "- Make it conversational, punchy, and memorable.\n"
    "- Be direct, value-driven, and clear.\n"
    "- Keep it comfortable to speak in 60-90 seconds.\n"
    "- Structure it as Problem-Action-Result or STAR.\n"
    "- Output plain text only (no Markdown, no quotes, no preamble or commentary)."
)

REFINE_USER_PROMPT_TEMPLATE = (
    "Topic or interview question: {topic}\n"
    "\n"
    "Current draft:\n"
    "-----\n"
    "{content}\n"
    "-----\n"
    "Return ONLY the improved script text."
)

GENERATE_SYSTEM_PROMPT = (
    "You write world-class interview scripts.\n"
    "Style: high-authority, results-oriented, and charismatic.\n"
    "Format: a conversational script ready for memorization, plain text only."
)

GENERATE_USER_PROMPT_TEMPLATE = (
    "Create a script answering the following interview question: {question}\n"
    "Return ONLY the script text."
)


class ScriptWriter(ABC):
    """Drafts or refines script text before a memorization session."""

    @abstractmethod
    def refine(self, topic: str, content: str) -> str:
        """Return an improved version of ``content``."""
        raise NotImplementedError

    @abstractmethod
    def generate(self, question: str) -> str:
        """Return a fresh script answering ``question``."""
        raise NotImplementedError


class NoOpScriptWriter(ScriptWriter):
    """Leaves drafts untouched and generates nothing."""

    def refine(self, topic: str, content: str) -> str:
        return content

    def generate(self, question: str) -> str:
        return ""


class CallableScriptWriter(ScriptWriter):
    """Adapt a ``(task, subject, draft) -> str`` callable into the ScriptWriter interface."""

    def __init__(self, func: Callable[[str, str, str], str]) -> None:
        self._func = func

    def refine(self, topic: str, content: str) -> str:
        return self._func("refine", topic, content)

    def generate(self, question: str) -> str:
        return self._func("generate", question, "")


class OpenAIScriptWriter(ScriptWriter):
    """ScriptWriter backed by the OpenAI Responses API.

    Failures never propagate: a failed refine returns the draft unchanged and a
    failed request returns ``CONNECTION_FAILED_MESSAGE`` and an empty generation
    returns ``GENERATION_FAILED_MESSAGE``.
    """

    def __init__(
        self,
        client: OpenAIScriptClient,
        *,
        refine_system_prompt: str = REFINE_SYSTEM_PROMPT,
        refine_user_prompt_template: str = REFINE_USER_PROMPT_TEMPLATE,
        generate_system_prompt: str = GENERATE_SYSTEM_PROMPT,
        generate_user_prompt_template: str = GENERATE_USER_PROMPT_TEMPLATE,
    ) -> None:
        self._client = client
        self._refine_system_prompt = refine_system_prompt
        self._refine_user_prompt_template = refine_user_prompt_template
        self._generate_system_prompt = generate_system_prompt
        self._generate_user_prompt_template = generate_user_prompt_template

    def refine(self, topic: str, content: str) -> str:
        user_prompt = self._refine_user_prompt_template.format(
            topic=topic.strip() or "untitled", content=content.strip()
        )
        metadata = PromptMetadata(task="refine", topic=topic, draft_chars=len(content))
        logger.info("Refining script for topic=%r (%s chars)", topic, len(content))
        try:
            refined = self._client.complete(
                system_prompt=self._refine_system_prompt,
                user_prompt=user_prompt,
                metadata=metadata,
            ).strip()
        except RuntimeError as exc:
            logger.error("Script refinement failed; keeping the draft: %s", exc)
            return content
        return refined or content

    def generate(self, question: str) -> str:
        user_prompt = self._generate_user_prompt_template.format(question=question.strip())
        metadata = PromptMetadata(task="generate", topic=question)
        logger.info("Generating script for question=%r", question)
        try:
            generated = self._client.complete(
                system_prompt=self._generate_system_prompt,
                user_prompt=user_prompt,
                metadata=metadata,
            ).strip()
        except RuntimeError as exc:
            logger.error("Script generation failed: %s", exc)
            return CONNECTION_FAILED_MESSAGE
        return generated or GENERATION_FAILED_MESSAGE
