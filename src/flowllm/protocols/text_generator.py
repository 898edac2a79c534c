"""Text-generation client protocol."""

from typing import Protocol, runtime_checkable

from flowllm.entities import GenerationResult


@runtime_checkable
class TextGenerator(Protocol):
    """Protocol for the upstream text-generation backend.

    Implementations report upstream failures through the result's
    ``source`` tag instead of raising, and own any timeout policy.
    """

    async def generate(self, prompt: str, system_instruction: str) -> GenerationResult:
        """Generate a reply for a prompt.

        Args:
            prompt: The user query
            system_instruction: Fixed instruction sent as the system prompt

        Returns:
            GenerationResult with text, latency and source tag
        """
        ...
