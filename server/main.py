# main.py
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from parallel.llm.client_factory import close_clients
from server.routers.selves_api import router as selves_api_router
from server.logging_config import setup_logging, get_logger

from server.config import config

# Initialize logging
setup_logging(log_level=config.LOG_LEVEL)
logger = get_logger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"{config.app_name} API starting")
    yield
    await close_clients()

app = FastAPI(
    title=config.INFO.title,
    description=config.INFO.description,
    version=config.INFO.version,
    docs_url=config.INFO.docs_url,
    redoc_url=config.INFO.redoc_url,
    lifespan=lifespan
)

# Public browser-facing endpoint: any origin, the standard client header set
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS.ALLOW_ORIGINS,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=config.CORS.ALLOW_HEADERS,
)

app.include_router(selves_api_router, prefix="/api/v1")
