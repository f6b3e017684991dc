from fastapi import Depends
from typing import Annotated, Awaitable, Callable
from parallel.llm.llm_selves import generate_parallel_selves
from parallel.models.schema import GenerateSelvesResponse

SelvesGenerator = Callable[[str], Awaitable[GenerateSelvesResponse]]


def get_selves_generator() -> SelvesGenerator:
    """Dependency returning the upstream generator used by the HTTP boundary"""
    return generate_parallel_selves


# Type alias for easier usage in route handlers
SelvesGeneratorDep = Annotated[SelvesGenerator, Depends(get_selves_generator)]
