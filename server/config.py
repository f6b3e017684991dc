from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional
from os import environ
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Info(BaseModel):
    """Information about the API"""
    title: str = Field("Parallel API", description="API title")
    description: str = Field(
        "Alternate Self Simulator: parallel selves with decision intelligence",
        description="API description"
    )
    version: str = Field("1.0.0", description="API version")
    root_path: str = Field("/", description="API root path")
    docs_url: Optional[str] = Field("/docs", description="API documentation URL")
    redoc_url: Optional[str] = Field("/redoc", description="ReDoc documentation URL")


class ML(BaseModel):
    """Machine Learning configuration"""
    # LLM Service Configuration
    LLM_SERVICE: str = Field(environ.get("LLM_SERVICE", ""), description="LLM service in format 'provider/model'")

    # OpenAI Configuration
    OPENAI_API_KEY: str = Field(environ.get("OPENAI_API_KEY", ""), description="OpenAI API key")
    OPENAI_CHAT_MODEL: str = Field(environ.get("OPENAI_CHAT_MODEL", ""), description="OpenAI chat model")

    # OpenAI-compatible gateway Configuration
    GATEWAY_API_KEY: str = Field(environ.get("GATEWAY_API_KEY", ""), description="Gateway API key")
    GATEWAY_BASE_URL: str = Field(environ.get("GATEWAY_BASE_URL", ""), description="Gateway base URL (OpenAI-compatible)")

    # Anthropic Configuration
    ANTHROPIC_API_KEY: str = Field(environ.get("ANTHROPIC_API_KEY", ""), description="Anthropic API key")
    ANTHROPIC_CHAT_MODEL: str = Field(environ.get("ANTHROPIC_CHAT_MODEL", ""), description="Anthropic chat model")


class Generation(BaseModel):
    """Parallel-self generation settings"""
    TIMEOUT_SECONDS: float = Field(environ.get("GENERATION_TIMEOUT_SECONDS", "45.0"), validate_default=True, description="Upper bound on one generation request")
    TEMPERATURE: float = Field(environ.get("GENERATION_TEMPERATURE", "0.9"), validate_default=True, description="Sampling temperature for generation")
    EXCERPT_CHARS: int = Field(environ.get("GENERATION_EXCERPT_CHARS", "50"), validate_default=True, description="Input excerpt length embedded by the fallback generator")
    FALLBACK_MIRROR: bool = Field(environ.get("GENERATION_FALLBACK_MIRROR", "false"), validate_default=True, description="Show the fixed identity mirror on the fallback path")
    REMOTE_URL: str = Field(environ.get("GENERATION_REMOTE_URL", ""), description="Base URL of a remote generate-selves endpoint")


class SessionTimings(BaseModel):
    """Client session timings (seconds)"""
    MIRROR_SECONDS_PER_WORD: float = Field(environ.get("MIRROR_SECONDS_PER_WORD", "0.12"), validate_default=True)
    MIRROR_DWELL_SECONDS: float = Field(environ.get("MIRROR_DWELL_SECONDS", "3.5"), validate_default=True)
    MIRROR_MIN_DWELL_SECONDS: float = Field(environ.get("MIRROR_MIN_DWELL_SECONDS", "3.5"), validate_default=True)
    MIRROR_FADE_SECONDS: float = Field(environ.get("MIRROR_FADE_SECONDS", "1.2"), validate_default=True)
    PORTAL_SECONDS: float = Field(environ.get("PORTAL_SECONDS", "1.0"), validate_default=True)
    COLLAPSE_MESSAGE_SECONDS: float = Field(environ.get("COLLAPSE_MESSAGE_SECONDS", "4.0"), validate_default=True)
    HIDDEN_REVEAL_SWITCHES: int = Field(environ.get("HIDDEN_REVEAL_SWITCHES", "3"), validate_default=True)


class Uvicorn(BaseModel):
    """Process runner settings for server/run.py"""
    HOST: str = Field(environ.get("UVICORN_HOST", "0.0.0.0"))
    PORT: int = Field(environ.get("UVICORN_PORT", "8000"), validate_default=True)
    WORKERS: int = Field(environ.get("UVICORN_WORKERS", "1"), validate_default=True)
    RELOAD: bool = Field(environ.get("UVICORN_RELOAD", "false"), validate_default=True)


class Cors(BaseModel):
    """CORS policy for the public browser-facing endpoint"""
    ALLOW_ORIGINS: List[str] = Field(["*"])
    ALLOW_HEADERS: List[str] = Field([
        "authorization",
        "x-client-info",
        "apikey",
        "content-type",
        "x-supabase-client-platform",
        "x-supabase-client-platform-version",
        "x-supabase-client-runtime",
        "x-supabase-client-runtime-version",
    ])


class BaseConfig(BaseSettings):
    """
    Defines the application's configuration settings.
    Utilizes pydantic-settings to automatically read from environment variables
    or a .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="allow"
    )

    # General settings
    app_name: str = "Parallel"
    LOG_LEVEL: str = environ.get("LOG_LEVEL", "INFO")
    INFO: Info = Info()
    MACHINE_LEARNING: ML = ML()
    GENERATION: Generation = Generation()
    SESSION: SessionTimings = SessionTimings()
    CORS: Cors = Cors()
    UVICORN: Uvicorn = Uvicorn()

# Create a global config instance
config = BaseConfig()
