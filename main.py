"""Main entrypoint for the CineMatch FastAPI application.

Exposes the intent router over HTTP: free-text commands go to ``/chat``,
read-only views of the lists live under ``/lists`` and ``/stats``.
"""

from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv
from fastapi import Depends
from fastapi import FastAPI
from fastapi import HTTPException
from fastapi import Request
from fastapi import status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from cinematch import __version__
from cinematch.agents.intent_router import IntentRouter
from cinematch.agents.status_resolver import resolve_status
from cinematch.core.agent import build_router
from cinematch.utils.logger import generate_request_id
from cinematch.utils.logger import log_error
from cinematch.utils.logger import log_info


load_dotenv()

app = FastAPI(title="CineMatch", version=__version__)


class ChatRequest(BaseModel):
    message: str


class ChatResponse(BaseModel):
    reply: str
    request_id: str


@lru_cache(maxsize=1)
def get_router() -> IntentRouter:
    """Build the router on first use and reuse it for the process lifetime."""

    return build_router()


@app.get("/health", status_code=status.HTTP_200_OK)
async def health_check() -> dict:
    """Health check endpoint to verify that the service is running."""

    return {"status": "ok"}


@app.post("/chat", response_model=ChatResponse)
async def chat(
    payload: ChatRequest,
    request: Request,
    router: IntentRouter = Depends(get_router),
) -> ChatResponse:
    """Route one free-text command and return the reply."""

    # Correlation id so all logs for this request can be tied together.
    request_id = generate_request_id()
    request.state.request_id = request_id

    log_info("Received chat message", request_id=request_id, channel="http", length=len(payload.message))

    # Routing may block on the store lock or on the LLM.
    reply = await run_in_threadpool(router.route, payload.message, request_id)
    return ChatResponse(reply=reply, request_id=request_id)


@app.get("/lists/{list_status}")
async def get_list(
    list_status: str,
    order: Optional[str] = None,
    router: IntentRouter = Depends(get_router),
) -> dict:
    """Return the titles of one list, newest first or sorted by ``order``."""

    resolved = resolve_status(list_status)
    if resolved is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Unknown list")

    if order:
        titles = router.operations.sorted_list(resolved, order)
    else:
        titles = router.operations.list_by_status(resolved)
    return {"status": resolved.value, "titles": titles}


@app.get("/stats")
async def get_stats(router: IntentRouter = Depends(get_router)) -> dict:
    counts = router.operations.counts()
    return {
        "total": sum(counts.values()),
        **{list_status.value: count for list_status, count in counts.items()},
    }


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Catch-all handler for uncaught exceptions.

    Ensures the service returns a 500 JSON error rather than crashing, and
    logs the error together with any request_id associated with the request.
    """

    request_id = getattr(request.state, "request_id", None)
    log_error("Unhandled exception", request_id=request_id, channel="http", error=str(exc))

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )
