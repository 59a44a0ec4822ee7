from dataclasses import dataclass, field
from typing import Protocol, Sequence, Union


@dataclass(frozen=True)
class Attachment:
    mime_type: str
    data: bytes


PromptPart = Union[str, Attachment]


@dataclass(frozen=True)
class GenerationReply:
    """Backend-neutral view of a model reply.

    Each candidate is the list of its parts; a part is its text, or None when
    the part carries something other than text (inline data, tool calls).
    """

    candidates: list[list[str | None]] = field(default_factory=list)


class GenerationBackend(Protocol):
    def generate(
        self,
        *,
        model: str,
        system_instruction: str,
        contents: Sequence[PromptPart],
    ) -> GenerationReply:
        """Send one request to the generative service and return its reply.

        Errors from the service (network, quota, invalid key) are raised as-is.
        """


class ArtifactRenderer(Protocol):
    def render(self, source: str) -> bytes:
        """Compile LaTeX source into PDF bytes synchronously.
        This is a blocking call; callers should offload to threads if needed.
        """
