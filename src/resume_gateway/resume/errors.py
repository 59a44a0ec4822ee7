class ResumeGatewayError(Exception):
    """Base class for errors raised by the resume domain layer."""


class NoContentError(ResumeGatewayError):
    def __init__(self, message: str = "no content generated") -> None:
        super().__init__(message)


class CompileError(ResumeGatewayError):
    """Raised when a LaTeX source could not be turned into a PDF.

    `output` holds whatever the compiler printed (stdout and stderr combined),
    unparsed, so callers can show it to whoever wrote the markup.
    """

    def __init__(self, message: str, output: str = "") -> None:
        super().__init__(message)
        self.output = output

    def __str__(self) -> str:
        base = super().__str__()
        if self.output:
            return f"{base}\nOutput:\n{self.output}"
        return base


class WorkspaceError(CompileError):
    pass


class SourceWriteError(CompileError):
    pass


class CompilerNotFoundError(CompileError):
    pass


class CompilerFailedError(CompileError):
    def __init__(self, message: str, output: str = "", returncode: int | None = None) -> None:
        super().__init__(message, output)
        self.returncode = returncode


class CompileTimeoutError(CompileError):
    pass


class ArtifactMissingError(CompileError):
    pass
