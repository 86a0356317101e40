"""Protocol interface for completion clients."""

from typing import Protocol, runtime_checkable

from newsfilter.llm.models import Completion


@runtime_checkable
class CompletionClient(Protocol):
    """Protocol for chat completion clients.

    Any client exposing ``complete`` with this signature can back the
    scoring client, whichever provider it talks to.
    """

    def complete(self, system_prompt: str, user_prompt: str) -> Completion:
        """Request one JSON-mode completion.

        Args:
            system_prompt: Instruction context.
            user_prompt: Per-item prompt.

        Returns:
            The completion content and usage.

        Raises:
            LlmApiError: If the API call fails.
            LlmResponseError: If the response carries no content.
        """
        ...
