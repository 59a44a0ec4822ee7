"""
Domain layer for resume generation and compilation.
Provides interfaces (gateways) and a service that talks to the generative
backend and the LaTeX renderer, so front-ends (HTTP or others) can use the
same core logic.
"""

from .errors import (
    ArtifactMissingError,
    CompileError,
    CompilerFailedError,
    CompilerNotFoundError,
    CompileTimeoutError,
    NoContentError,
    ResumeGatewayError,
    SourceWriteError,
    WorkspaceError,
)
from .extractor import extract_latex
from .interfaces import ArtifactRenderer, Attachment, GenerationBackend, GenerationReply
from .service import ResumeService
