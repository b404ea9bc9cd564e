import logging
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv

load_dotenv()

from fastapi import FastAPI, Request  # noqa: E402
from fastapi.middleware.cors import CORSMiddleware  # noqa: E402
from fastapi.responses import JSONResponse  # noqa: E402

from reference_lookup.config import LookupConfig  # noqa: E402
from reference_lookup.orchestrator import LookupOrchestrator  # noqa: E402
from reference_lookup.routes import router as lookup_router  # noqa: E402

# Setup basic logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the process-wide orchestrator and close its clients on shutdown."""
    logger.info("Starting up reference lookup service...")
    config = LookupConfig.from_env()
    orchestrator = LookupOrchestrator(config=config)
    app.state.orchestrator = orchestrator

    yield

    await orchestrator.aclose()
    app.state.orchestrator = None
    logger.info("Shutdown complete")


app = FastAPI(lifespan=lifespan)

cors_origins = os.getenv(
    "CORS_ORIGINS",
    "http://localhost:3000,http://localhost:5173",
).split(",")

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch unhandled exceptions and return JSON so CORS headers are preserved."""
    logger.error(
        "Unhandled exception on %s %s: %s", request.method, request.url.path, exc
    )
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"},
    )


app.include_router(lookup_router)


@app.get("/health")
async def health_check():
    """Liveness check: is the service running?"""
    return {"status": "healthy"}
