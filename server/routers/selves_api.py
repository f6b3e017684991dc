from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from parallel.core.archetypes import archetype_table
from parallel.errors import InvalidInputError, UpstreamError
from parallel.models.schema import ArchetypeInfo, ErrorResponse, GenerateSelvesResponse
from server.config import config
from server.dependencies import SelvesGeneratorDep
from server.logging_config import get_logger
from typing import List


logger = get_logger(__name__)

router = APIRouter()


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message).model_dump())


async def read_user_input(request: Request) -> str:
    """Extract a non-blank userInput from the JSON body, or raise InvalidInputError."""
    try:
        payload = await request.json()
    except ValueError:
        raise InvalidInputError("Request body must be JSON")

    user_input = payload.get("userInput") if isinstance(payload, dict) else None
    if not isinstance(user_input, str) or not user_input.strip():
        raise InvalidInputError()
    return user_input


@router.get("/version")
def get_version():
    return {"version": config.INFO.version}


@router.get("/archetypes", response_model=List[ArchetypeInfo])
def get_archetypes():
    return archetype_table()


@router.post(
    "/generate-selves",
    response_model=GenerateSelvesResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Missing userInput"},
        402: {"model": ErrorResponse, "description": "AI usage limit reached"},
        429: {"model": ErrorResponse, "description": "Rate limit exceeded"},
        500: {"model": ErrorResponse, "description": "Generation failed"},
    },
)
async def generate_selves(request: Request, generator: SelvesGeneratorDep):
    try:
        user_input = await read_user_input(request)
    except InvalidInputError as e:
        logger.warning(f"Rejected generate-selves request: {e}")
        return error_response(e.status_code, str(e))

    try:
        logger.info(f"Generating parallel selves for input of {len(user_input)} chars")
        result = await generator(user_input)
        return result
    except UpstreamError as e:
        logger.error(f"generate-selves error: {type(e).__name__}: {e}")
        return error_response(e.status_code, str(e))
    except Exception as e:
        logger.error(f"generate-selves error: {e}")
        return error_response(500, str(e) or "Unknown error")
