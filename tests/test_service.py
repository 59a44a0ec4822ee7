import threading
import time
from concurrent.futures import ThreadPoolExecutor

import pytest

from resume_gateway.resume import Attachment, GenerationReply, NoContentError, ResumeService
from resume_gateway.resume.prompts import CONVERSION_PROMPT, SYSTEM_PROMPT

DOC = "\\documentclass{article}\n\\begin{document}\nHi\n\\end{document}"


def test_generate_sends_prior_document_then_instruction(service, backend):
    backend.reply = GenerationReply(candidates=[[DOC]])

    latex = service.generate("Add a skills section", "\\documentclass{article}old")

    assert latex == DOC
    call = backend.calls[0]
    assert call["model"] == "test-model"
    assert call["system_instruction"] == SYSTEM_PROMPT
    assert call["contents"] == [
        "Here is my current LaTeX resume code:\n\n\\documentclass{article}old",
        "Add a skills section",
    ]


def test_generate_without_prior_document_sends_instruction_only(service, backend):
    backend.reply = GenerationReply(candidates=[[DOC]])

    service.generate("Write me a resume", "")

    assert backend.calls[0]["contents"] == ["Write me a resume"]


def test_convert_attaches_file_with_mime_type(service, backend):
    backend.reply = GenerationReply(candidates=[[DOC]])

    latex = service.convert(b"%PDF-1.7 data", "application/pdf")

    assert latex == DOC
    assert backend.calls[0]["contents"] == [
        CONVERSION_PROMPT,
        Attachment(mime_type="application/pdf", data=b"%PDF-1.7 data"),
    ]
    assert backend.calls[0]["system_instruction"] == SYSTEM_PROMPT


def test_text_parts_are_concatenated_in_order_and_extracted(service, backend):
    backend.reply = GenerationReply(
        candidates=[["```latex\n\\documentclass{article}\n", None, "\\begin{document}\\end{document}\n```"]]
    )

    assert service.generate("x") == "\\documentclass{article}\n\\begin{document}\\end{document}"


def test_only_first_candidate_is_used(service, backend):
    backend.reply = GenerationReply(candidates=[["first"], ["second"]])

    assert service.generate("x") == "first"


@pytest.mark.parametrize("candidates", [[], [[]]])
def test_empty_reply_is_no_content_error(service, backend, candidates):
    backend.reply = GenerationReply(candidates=candidates)

    with pytest.raises(NoContentError, match="no content generated"):
        service.generate("x")
    with pytest.raises(NoContentError):
        service.convert(b"data", "application/pdf")


def test_backend_errors_propagate_unchanged(service, backend):
    boom = RuntimeError("quota exceeded")
    backend.error = boom

    with pytest.raises(RuntimeError) as excinfo:
        service.generate("x")
    assert excinfo.value is boom


def test_compile_delegates_to_renderer(service, renderer):
    assert service.compile(DOC) == renderer.pdf
    assert renderer.sources == [DOC]


def test_compile_limits_concurrent_renders(backend):
    class SlowRenderer:
        def __init__(self):
            self.active = 0
            self.peak = 0
            self.lock = threading.Lock()

        def render(self, source):
            with self.lock:
                self.active += 1
                self.peak = max(self.peak, self.active)
            time.sleep(0.05)
            with self.lock:
                self.active -= 1
            return source.encode()

    slow = SlowRenderer()
    service = ResumeService(backend, slow, max_concurrent_compiles=2)

    with ThreadPoolExecutor(max_workers=6) as pool:
        results = list(pool.map(service.compile, [str(i) for i in range(6)]))

    assert results == [str(i).encode() for i in range(6)]
    assert slow.peak <= 2


def test_rejects_non_positive_compile_limit(backend, renderer):
    with pytest.raises(ValueError):
        ResumeService(backend, renderer, max_concurrent_compiles=0)
