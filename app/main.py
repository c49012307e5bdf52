import logging
import os
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.database import close_db, get_db, init_db
from app.routers.contacts import router as contacts_router
from app.routers.conversations import router as conversations_router
from app.routers.errors import INTERNAL_ERROR
from app.routers.push import router as push_router
from app.routers.users import router as users_router
from app.services.fanout_hub import FanoutHub

# Load environment variables
load_dotenv()

# Environment variable parsing
ENV = os.getenv("ENV")
ENV_IS_PROD = ENV == "prod"
COMMIT_HASH = os.getenv("COMMIT_HASH")
if not COMMIT_HASH and ENV_IS_PROD:
    raise ValueError("COMMIT_HASH is required for production environments")

APP_ADDR = os.getenv("HOST", "0.0.0.0")
APP_PORT = int(os.getenv("PORT", "8000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

logging.basicConfig(
    level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup and shutdown."""
    # Startup
    await init_db()
    app.state.hub = FanoutHub()
    logger.info("Chat service started (env=%s, version=%s)", ENV, COMMIT_HASH)
    yield
    # Shutdown
    await close_db()


app = FastAPI(
    title="Chat Service",
    description="Direct messaging API with a WebSocket push channel",
    version=COMMIT_HASH or "dev",
    lifespan=lifespan,
)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Render errors as {"message": ..., "field"?: ...}."""
    if isinstance(exc.detail, dict):
        body: Dict[str, Any] = dict(exc.detail)
    else:
        body = {"message": str(exc.detail)}
    return JSONResponse(status_code=exc.status_code, content=body, headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report the first invalid input as a 400 with the offending field."""
    errors = exc.errors()
    body: Dict[str, Any] = {"message": "Invalid request"}
    if errors:
        first = errors[0]
        body["message"] = first.get("msg", body["message"])
        # Integer parts are list indexes or, for unparsable JSON, a character offset
        location = [
            part
            for part in first.get("loc", ())
            if isinstance(part, str) and part != "body"
        ]
        if location:
            body["field"] = location[-1]
    return JSONResponse(status_code=400, content=body)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"message": INTERNAL_ERROR})


# Include routers
app.include_router(users_router, prefix="/api/users", tags=["users"])
app.include_router(contacts_router, prefix="/api/contacts", tags=["contacts"])
app.include_router(
    conversations_router, prefix="/api/conversations", tags=["conversations"]
)
app.include_router(push_router, tags=["push"])


@app.get("/health")
async def health_check(db: AsyncSession = Depends(get_db)) -> Dict[str, Any]:
    """Health check endpoint with database connectivity."""
    try:
        # Test database connection
        result = await db.execute(text("SELECT 1"))
        db_status = "connected" if result.scalar() == 1 else "error"
    except Exception:
        logger.exception("Health check database probe failed")
        db_status = "disconnected"

    return {
        "status": "healthy" if db_status == "connected" else "degraded",
        "database": db_status,
        "environment": ENV,
        "version": COMMIT_HASH,
    }


# If run directly, start the server
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=APP_ADDR, port=APP_PORT)
