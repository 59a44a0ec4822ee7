import logging
import subprocess
import tempfile
import threading
from pathlib import Path
from typing import Any, Sequence

from .errors import (
    ArtifactMissingError,
    CompileError,
    CompilerFailedError,
    CompilerNotFoundError,
    CompileTimeoutError,
    SourceWriteError,
    WorkspaceError,
)
from .interfaces import ArtifactRenderer, Attachment, GenerationBackend, GenerationReply, PromptPart

logger = logging.getLogger(__name__)


class GeminiBackend(GenerationBackend):
    """Generation backend backed by the google-genai SDK.

    The SDK client is built on first use, so an instance can be created (and
    the app can start) without an API key; calls then fail with the SDK error.
    """

    def __init__(self, api_key: str | None, *, client: Any = None) -> None:
        self._api_key = api_key
        self._client = client
        self._lock = threading.Lock()

    @property
    def client(self) -> Any:
        with self._lock:
            if self._client is None:
                from google import genai

                self._client = genai.Client(api_key=self._api_key or None)
            return self._client

    def generate(
        self,
        *,
        model: str,
        system_instruction: str,
        contents: Sequence[PromptPart],
    ) -> GenerationReply:
        from google.genai import types

        parts: list[Any] = []
        for item in contents:
            if isinstance(item, Attachment):
                parts.append(types.Part.from_bytes(data=item.data, mime_type=item.mime_type))
            else:
                parts.append(item)

        response = self.client.models.generate_content(
            model=model,
            contents=parts,
            config=types.GenerateContentConfig(system_instruction=system_instruction),
        )
        return self._to_reply(response)

    @staticmethod
    def _to_reply(response: Any) -> GenerationReply:
        candidates: list[list[str | None]] = []
        for candidate in getattr(response, "candidates", None) or []:
            content = getattr(candidate, "content", None)
            parts = (getattr(content, "parts", None) if content is not None else None) or []
            texts: list[str | None] = []
            for part in parts:
                # thought summaries are not part of the answer
                if getattr(part, "thought", None):
                    texts.append(None)
                else:
                    texts.append(getattr(part, "text", None))
            candidates.append(texts)
        return GenerationReply(candidates=candidates)


class PdflatexRenderer(ArtifactRenderer):
    """Render LaTeX to PDF by running pdflatex in a throwaway directory.

    Every call gets its own `resume_compile_*` directory holding `main.tex`
    and whatever the compiler produces; it is removed when the call returns,
    whether compilation worked or not.
    """

    SOURCE_NAME = "main.tex"
    ARTIFACT_NAME = "main.pdf"

    def __init__(
        self,
        executable: str = "pdflatex",
        *,
        timeout: float | None = 60.0,
        workspace_root: str | None = None,
    ) -> None:
        self._executable = executable
        self._timeout = timeout
        self._workspace_root = workspace_root

    def render(self, source: str) -> bytes:
        try:
            workspace = tempfile.TemporaryDirectory(prefix="resume_compile_", dir=self._workspace_root)
        except OSError as e:
            raise WorkspaceError(f"failed to create temp dir: {e}") from e
        try:
            pdf = self._compile_in(Path(workspace.name), source)
        except BaseException:
            # the compile error wins over a failed cleanup
            self._remove(workspace, raise_errors=False)
            raise
        self._remove(workspace, raise_errors=True)
        return pdf

    @staticmethod
    def _remove(workspace: tempfile.TemporaryDirectory, *, raise_errors: bool) -> None:
        try:
            workspace.cleanup()
        except OSError as e:
            logger.warning("failed to remove %s: %s", workspace.name, e)
            if raise_errors:
                raise WorkspaceError(f"failed to remove temp dir: {e}") from e

    def _compile_in(self, work_dir: Path, source: str) -> bytes:
        tex_path = work_dir / self.SOURCE_NAME
        try:
            with tex_path.open("w", encoding="utf-8") as f:
                f.write(source)
        except OSError as e:
            raise SourceWriteError(f"failed to write tex file: {e}") from e

        # nonstopmode keeps pdflatex from waiting on stdin after an error
        cmd = [
            self._executable,
            "-interaction=nonstopmode",
            "-output-directory",
            str(work_dir),
            str(tex_path),
        ]
        try:
            proc = subprocess.run(
                cmd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                timeout=self._timeout,
                check=False,
            )
        except FileNotFoundError as e:
            raise CompilerNotFoundError(f"{self._executable} not found on PATH") from e
        except subprocess.TimeoutExpired as e:
            output = _decode(e.output)
            logger.warning("%s timed out after %ss", self._executable, self._timeout)
            raise CompileTimeoutError(f"{self._executable} timed out after {self._timeout}s", output) from e
        except OSError as e:
            raise CompileError(f"failed to start {self._executable}: {e}") from e

        output = _decode(proc.stdout)
        if proc.returncode != 0:
            logger.warning("%s compilation failed:\n%s", self._executable, output)
            raise CompilerFailedError(
                f"{self._executable} failed: exit status {proc.returncode}",
                output,
                returncode=proc.returncode,
            )

        pdf_path = work_dir / self.ARTIFACT_NAME
        try:
            return pdf_path.read_bytes()
        except OSError as e:
            raise ArtifactMissingError(f"failed to read generated pdf: {e}", output) from e


def _decode(raw: bytes | str | None) -> str:
    if raw is None:
        return ""
    if isinstance(raw, str):
        return raw
    # TeX logs are not guaranteed to be valid UTF-8
    return raw.decode("utf-8", errors="replace")
