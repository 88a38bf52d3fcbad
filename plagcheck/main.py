import time
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from plagcheck.config import CORS_ORIGINS
from plagcheck.logger import logger
from plagcheck.schemas.plagiarism_schemas import ErrorResponse
from plagcheck.routers.plagiarism_check import router as plagiarism_router

app = FastAPI(title="Plagiarism Check API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type"],
)


@app.middleware("http")
async def log_api_requests(request: Request, call_next):
    start = time.monotonic()
    response = await call_next(request)
    if request.url.path.startswith("/api"):
        duration_ms = (time.monotonic() - start) * 1000
        logger.info(f"{request.method} {request.url.path} {response.status_code} in {duration_ms:.0f}ms")
    return response


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message).model_dump())


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return _error(exc.status_code, str(exc.detail))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    message = "; ".join(
        f"{'.'.join(str(p) for p in err['loc'][1:]) or 'body'}: {err['msg']}"
        for err in exc.errors()
    )
    return _error(422, message or "Invalid request")


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Error in {request.method} {request.url.path}")
    return _error(500, str(exc) or "An unknown error occurred")


@app.get("/health")
async def health():
    return {"status": "ok"}


app.include_router(plagiarism_router)
