"""Sentence completion through a chat-completion provider.

The controller runs one request at a time per session. The completion is
inserted only after the provider answers, at whatever the selection is at
that moment, so a failed or cancelled request never touches the document.
"""

from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Protocol

import openai

from .constants import EditorConstants

logger = logging.getLogger(__name__)


class CompletionFailure(Exception):
    """The completion provider could not produce a completion."""


class CompletionClient(Protocol):
    async def complete(self, prompt_text: str) -> str:
        ...


class CompletionTarget(Protocol):
    """Where completions come from and go to (an editing session)."""

    def prompt_text(self) -> str:
        ...

    def insert_completion(self, completion: str) -> None:
        ...


class OpenAICompletionClient:
    """Completes text with an OpenAI chat model.

    The underlying ``openai.AsyncOpenAI`` client is created on first use so
    that a missing API key surfaces as a CompletionFailure, not at startup.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = EditorConstants.DEFAULT_COMPLETION_MODEL,
        system_prompt: str = EditorConstants.DEFAULT_SYSTEM_PROMPT,
        client: Optional[openai.AsyncOpenAI] = None,
    ):
        self.api_key = api_key
        self.model = model
        self.system_prompt = system_prompt
        self._client = client

    @classmethod
    def from_settings(cls, settings: dict) -> "OpenAICompletionClient":
        return cls(
            model=settings.get("completion_model") or EditorConstants.DEFAULT_COMPLETION_MODEL,
            system_prompt=settings.get("system_prompt") or EditorConstants.DEFAULT_SYSTEM_PROMPT,
        )

    @property
    def client(self) -> openai.AsyncOpenAI:
        if self._client is None:
            api_key = self.api_key or os.getenv(EditorConstants.API_KEY_ENV_VAR)
            if not api_key:
                raise CompletionFailure(EditorConstants.MISSING_API_KEY_MESSAGE)
            self._client = openai.AsyncOpenAI(api_key=api_key)
        return self._client

    async def complete(self, prompt_text: str) -> str:
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": self.system_prompt},
                    {"role": "user", "content": prompt_text},
                ],
            )
        except openai.OpenAIError as e:
            raise CompletionFailure(str(e)) from e
        if not response.choices:
            return ""
        return response.choices[0].message.content or ""


class CompletionStatus(Enum):
    IDLE = "idle"
    REQUESTING = "requesting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class CompletionState:
    status: CompletionStatus = CompletionStatus.IDLE
    result: Optional[str] = None
    error: Optional[CompletionFailure] = None


class CompletionController:
    """Runs completion requests for one editing session.

    Args:
        client: The completion provider.
        listener: Called with the new state on every transition.
    """

    def __init__(
        self,
        client: CompletionClient,
        listener: Optional[Callable[[CompletionState], None]] = None,
    ):
        self.client = client
        self.listener = listener
        self._state = CompletionState()
        self._task: Optional[asyncio.Future] = None
        self._cancel_requested = False

    @property
    def state(self) -> CompletionState:
        return self._state

    @property
    def in_flight(self) -> bool:
        return self._task is not None

    def _set_state(self, state: CompletionState) -> None:
        self._state = state
        if self.listener is not None:
            self.listener(state)

    async def request(self, target: CompletionTarget) -> bool:
        """Complete the target's prompt and insert the result.

        Returns:
            True if a completion was inserted, False if the request was
            refused (another one is in flight), cancelled, or failed.
        """
        if self.in_flight:
            logger.debug("Completion already in flight, ignoring request")
            return False
        prompt = target.prompt_text()
        self._set_state(CompletionState(CompletionStatus.REQUESTING))
        self._task = asyncio.ensure_future(self.client.complete(prompt))
        logger.debug(f"Requesting completion for {len(prompt)} characters")
        try:
            completion = await self._task
        except asyncio.CancelledError:
            self._set_state(CompletionState(CompletionStatus.IDLE))
            if self._cancel_requested:
                return False
            raise
        except Exception as e:
            failure = e if isinstance(e, CompletionFailure) else CompletionFailure(str(e))
            logger.warning(f"Completion failed: {failure}")
            self._set_state(CompletionState(CompletionStatus.FAILED, error=failure))
            return False
        finally:
            self._task = None
            self._cancel_requested = False
        target.insert_completion(completion)
        self._set_state(CompletionState(CompletionStatus.SUCCEEDED, result=completion))
        return True

    def cancel(self) -> None:
        """Cancel the in-flight request, if any. Nothing is inserted."""
        if self._task is not None and not self._task.done():
            self._cancel_requested = True
            self._task.cancel()

    def dismiss(self) -> None:
        """Acknowledge a finished request and return to idle."""
        if self._state.status in (CompletionStatus.SUCCEEDED, CompletionStatus.FAILED):
            self._set_state(CompletionState())
