import asyncio
import logging
import mimetypes
import os
import time

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, File, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from pydantic import BaseModel

from resume_gateway import __version__
from resume_gateway.resume import CompileError, ResumeService
from resume_gateway.resume.adapters import GeminiBackend, PdflatexRenderer
from resume_gateway.resume.service import DEFAULT_MODEL

load_dotenv()

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger("resume_gateway")

# Global configuration defaults
GEMINI_API_KEY = os.getenv("GEMINI_API_KEY", "")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", DEFAULT_MODEL)
MAX_UPLOAD_MB = int(os.getenv("MAX_UPLOAD_MB", "10"))
LATEX_COMPILER = os.getenv("LATEX_COMPILER", "pdflatex")
COMPILE_TIMEOUT_SEC = float(os.getenv("COMPILE_TIMEOUT_SEC", "60"))
MAX_CONCURRENT_COMPILES = int(os.getenv("MAX_CONCURRENT_COMPILES", "4"))
CORS_ORIGINS = [
    o.strip()
    for o in os.getenv("CORS_ORIGINS", "http://localhost:5173,http://localhost:3000").split(",")
    if o.strip()
]

app = FastAPI(
    title="Resume Gateway",
    version=os.getenv("RESUME_GATEWAY_VERSION", __version__),
    description=(
        "RESTful API that writes LaTeX resumes with Gemini and compiles them "
        "to PDF with pdflatex."
    ),
)


@app.middleware("http")
async def _log_requests(request: Request, call_next):
    """Log every request and turn unexpected errors into a plain 500.

    Registered before CORSMiddleware so that CORS wraps it and recovered
    failures still carry the CORS headers.
    """
    started = time.perf_counter()
    try:
        response = await call_next(request)
    except Exception:
        logger.exception("Unhandled error while serving %s %s", request.method, request.url.path)
        response = PlainTextResponse("Internal Server Error", status_code=500)
    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info('"%s %s" %s in %.1fms', request.method, request.url.path, response.status_code, elapsed_ms)
    return response


app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Accept", "Authorization", "Content-Type", "X-CSRF-Token"],
    expose_headers=["Link"],
    max_age=300,
)

SERVICE: ResumeService | None = None


class CompileRequest(BaseModel):
    latex_code: str = ""


class GenerateRequest(BaseModel):
    prompt: str = ""
    current_latex: str = ""


def _build_service() -> ResumeService:
    backend = GeminiBackend(GEMINI_API_KEY)
    renderer = PdflatexRenderer(LATEX_COMPILER, timeout=COMPILE_TIMEOUT_SEC)
    return ResumeService(
        backend,
        renderer,
        model=GEMINI_MODEL,
        max_concurrent_compiles=MAX_CONCURRENT_COMPILES,
    )


def get_service() -> ResumeService:
    global SERVICE
    if SERVICE is None:
        SERVICE = _build_service()
    return SERVICE


_SIGNATURES = [
    (b"%PDF-", "application/pdf"),
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
]
# Control bytes that never appear in plain text
_BINARY_BYTES = frozenset([*range(0x00, 0x09), 0x0B, *range(0x0E, 0x1B), *range(0x1C, 0x20)])


def _detect_mime(data: bytes, filename: str | None) -> str:
    for magic, mime_type in _SIGNATURES:
        if data.startswith(magic):
            return mime_type
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"
    guessed, _ = mimetypes.guess_type(filename or "")
    if guessed:
        return guessed
    if data and not any(b in _BINARY_BYTES for b in data[:512]):
        return "text/plain"
    return "application/octet-stream"


@app.on_event("startup")
async def _startup() -> None:
    if not GEMINI_API_KEY:
        logger.warning("GEMINI_API_KEY not set; AI generation requests will fail")
    get_service()


@app.exception_handler(RequestValidationError)
async def _invalid_body(request: Request, exc: RequestValidationError) -> PlainTextResponse:
    logger.info("Rejected request body for %s: %s", request.url.path, exc.errors())
    return PlainTextResponse("Invalid request body", status_code=400)


@app.get("/health", response_class=PlainTextResponse)
def health() -> PlainTextResponse:
    """Basic health check endpoint."""
    return PlainTextResponse("OK")


@app.post("/api/v1/resume/compile")
async def compile_resume(body: CompileRequest, service: ResumeService = Depends(get_service)) -> Response:
    try:
        pdf = await asyncio.to_thread(service.compile, body.latex_code)
    except CompileError as e:
        return PlainTextResponse(f"Compilation failed: {e}", status_code=500)
    return Response(content=pdf, media_type="application/pdf")


@app.post("/api/v1/resume/generate")
async def generate_resume(body: GenerateRequest, service: ResumeService = Depends(get_service)) -> Response:
    try:
        latex = await asyncio.to_thread(service.generate, body.prompt, body.current_latex)
    except Exception as e:
        logger.warning("AI generation failed: %s", e)
        return PlainTextResponse(f"AI Generation failed: {e}", status_code=500)
    return JSONResponse(content={"latex": latex})


@app.post("/api/v1/resume/upload")
async def upload_resume(
    resume: UploadFile | None = File(None),
    service: ResumeService = Depends(get_service),
) -> Response:
    """Convert an uploaded resume document into LaTeX.

    Accepts multipart/form-data with a single required part named "resume",
    at most MAX_UPLOAD_MB in size. The part's Content-Type is forwarded to the
    model; when missing it is detected from the file contents and name.
    """
    if resume is None:
        return PlainTextResponse("Failed to get file 'resume'", status_code=400)

    chunks: list[bytes] = []
    size_bytes = 0
    CHUNK = 1024 * 1024
    max_bytes = MAX_UPLOAD_MB * 1024 * 1024
    while True:
        chunk = await resume.read(CHUNK)
        if not chunk:
            break
        size_bytes += len(chunk)
        if size_bytes > max_bytes:
            logger.info("Upload %s exceeds %d MB", resume.filename, MAX_UPLOAD_MB)
            return PlainTextResponse("File too large or invalid multipart", status_code=400)
        chunks.append(chunk)
    data = b"".join(chunks)

    mime_type = (resume.content_type or "").strip() or _detect_mime(data, resume.filename)
    logger.info("File uploaded: %s, size: %d, using MIME: %s", resume.filename, size_bytes, mime_type)

    try:
        latex = await asyncio.to_thread(service.convert, data, mime_type)
    except Exception as e:
        logger.warning("AI conversion failed: %s", e)
        return PlainTextResponse(f"AI Conversion failed: {e}", status_code=500)
    return JSONResponse(content={"latex": latex})


def run() -> None:
    """Run the API server using uvicorn.

    Exposes the app at host:port (default 0.0.0.0:8080). Set PORT env var to override.
    """
    import uvicorn

    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "8080"))
    reload = os.getenv("RELOAD", "false").lower() in {"1", "true", "yes", "on"}

    logger.info("Server listening on port %s", port)
    uvicorn.run("resume_gateway.webapi:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    run()
