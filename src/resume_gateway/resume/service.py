import logging
import threading

from .errors import NoContentError
from .extractor import extract_latex
from .interfaces import ArtifactRenderer, Attachment, GenerationBackend, GenerationReply, PromptPart
from .prompts import CONVERSION_PROMPT, CURRENT_DOCUMENT_TEMPLATE, SYSTEM_PROMPT

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.5-flash"


class ResumeService:
    """Core domain service for generating and compiling LaTeX resumes.

    This service is framework-agnostic. Its methods are blocking; the HTTP
    layer runs them in worker threads. The generative backend and the PDF
    renderer are gateways passed in by the caller, so tests can swap either.
    """

    def __init__(
        self,
        backend: GenerationBackend,
        renderer: ArtifactRenderer,
        *,
        model: str = DEFAULT_MODEL,
        max_concurrent_compiles: int = 4,
    ) -> None:
        if max_concurrent_compiles < 1:
            raise ValueError("max_concurrent_compiles must be at least 1")
        self._backend = backend
        self._renderer = renderer
        self._model = model
        self._compile_slots = threading.BoundedSemaphore(max_concurrent_compiles)

    @property
    def model(self) -> str:
        return self._model

    def generate(self, instruction: str, prior_document: str | None = None) -> str:
        """Ask the model to write or edit a resume and return its LaTeX."""
        contents: list[PromptPart] = []
        if prior_document:
            contents.append(CURRENT_DOCUMENT_TEMPLATE.format(document=prior_document))
        contents.append(instruction)
        return self._request(contents)

    def convert(self, file_bytes: bytes, mime_type: str) -> str:
        """Turn an uploaded resume (PDF, DOCX, image...) into LaTeX."""
        logger.info("Converting document with MIME %s, %d bytes", mime_type, len(file_bytes))
        contents: list[PromptPart] = [
            CONVERSION_PROMPT,
            Attachment(mime_type=mime_type, data=file_bytes),
        ]
        return self._request(contents)

    def compile(self, source: str) -> bytes:
        """Render LaTeX source to PDF bytes, waiting for a free compile slot."""
        with self._compile_slots:
            return self._renderer.render(source)

    def _request(self, contents: list[PromptPart]) -> str:
        reply = self._backend.generate(
            model=self._model,
            system_instruction=SYSTEM_PROMPT,
            contents=contents,
        )
        return extract_latex(self._reply_text(reply))

    @staticmethod
    def _reply_text(reply: GenerationReply) -> str:
        if not reply.candidates or not reply.candidates[0]:
            raise NoContentError()
        return "".join(part for part in reply.candidates[0] if part is not None)
