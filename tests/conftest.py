import stat
from pathlib import Path

import pytest

from resume_gateway.resume import GenerationReply, ResumeService


class FakeBackend:
    def __init__(self, reply: GenerationReply | None = None, error: Exception | None = None) -> None:
        self.reply = reply if reply is not None else GenerationReply(candidates=[])
        self.error = error
        self.calls: list[dict[str, object]] = []

    def generate(self, *, model, system_instruction, contents):
        self.calls.append(
            {"model": model, "system_instruction": system_instruction, "contents": list(contents)}
        )
        if self.error is not None:
            raise self.error
        return self.reply


class FakeRenderer:
    def __init__(self, pdf: bytes = b"%PDF-1.5\nfake", error: Exception | None = None) -> None:
        self.pdf = pdf
        self.error = error
        self.sources: list[str] = []

    def render(self, source: str) -> bytes:
        self.sources.append(source)
        if self.error is not None:
            raise self.error
        return self.pdf


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def renderer() -> FakeRenderer:
    return FakeRenderer()


@pytest.fixture
def service(backend: FakeBackend, renderer: FakeRenderer) -> ResumeService:
    return ResumeService(backend, renderer, model="test-model")


@pytest.fixture
def make_compiler(tmp_path: Path):
    """Write an executable shell script standing in for pdflatex.

    It is called as: <script> -interaction=nonstopmode -output-directory <dir> <dir>/main.tex
    so the script sees the workspace as $3 and the source file as $4.
    """

    def _make(body: str, name: str = "fake-pdflatex") -> str:
        path = tmp_path / name
        path.write_text("#!/bin/sh\n" + body + "\n", encoding="utf-8")
        path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return str(path)

    return _make


@pytest.fixture
def workspace_root(tmp_path: Path) -> Path:
    root = tmp_path / "workspaces"
    root.mkdir()
    return root

