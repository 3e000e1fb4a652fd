import pathlib
import os
import logging
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from pydantic import model_validator

from videohost.version import __version__ as app_version

# --------------------------------------------------------------
# Root logging configuration
# --------------------------------------------------------------
# LOG_LEVEL (default INFO) is read before the rest of the app is imported so
# it governs every module-level logger created afterwards.

_root_log_level = getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO)

if not logging.getLogger().hasHandlers():  # pragma: no cover
    logging.basicConfig(
        level=_root_log_level, format="%(levelname)s:%(name)s:%(message)s"
    )
else:
    # pytest / uvicorn already installed handlers; only adjust verbosity.
    logging.getLogger().setLevel(_root_log_level)

# Absolute path to the project-level .env so that loading does not depend on
# the current working directory (matters for `uvicorn --reload`).
_project_root = pathlib.Path(__file__).parent.parent.parent
_ENV_FILE = _project_root / ".env"
if not _ENV_FILE.is_file():
    logging.debug(f"No .env file found at {_ENV_FILE}, relying on environment")


class Settings(BaseSettings):
    # Populated from the .env file and environment variables.
    # See: https://docs.pydantic.dev/latest/concepts/pydantic_settings/

    model_config = SettingsConfigDict(
        env_file=_ENV_FILE,
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    PROJECT_NAME: str = "VideoHost Python FastAPI Backend"
    API_PREFIX: str = "/api"

    # Application build version (surfaced in OpenAPI docs)
    APP_VERSION: str = app_version

    ENVIRONMENT: str = Field(default="dev")

    # ------------------------------------------------------------------
    # AstraDB (Data API collections)
    # ------------------------------------------------------------------

    ASTRA_DB_API_ENDPOINT: str = "http://localhost:8080/api"  # Dummy default for tests
    ASTRA_DB_APPLICATION_TOKEN: str = "test-token"  # Dummy default for tests
    ASTRA_DB_KEYSPACE: str = "test_keyspace"  # Dummy default for tests

    VIDEOS_COLLECTION: str = "videos"
    USERS_COLLECTION: str = "users"

    # ------------------------------------------------------------------
    # Bearer token validation
    # ------------------------------------------------------------------

    AUTH_ISSUER: str = Field(
        default="https://videohost.test/",
        description="Expected `iss` claim; also the base for JWKS discovery.",
    )
    AUTH_AUDIENCE: str = Field(
        default="videohost-api", description="Expected `aud` claim."
    )
    # Comma-separated, e.g. "RS256" for an OIDC provider or "HS256" locally.
    AUTH_ALGORITHMS: str = "RS256"
    AUTH_JWKS_URL: Optional[str] = Field(
        default=None,
        description="JWKS document URL. Defaults to <issuer>.well-known/jwks.json.",
    )
    AUTH_SECRET_KEY: Optional[str] = Field(
        default=None,
        description="Shared secret for HS* algorithms. Takes precedence over JWKS.",
    )
    AUTH_HTTP_TIMEOUT: float = Field(default=5.0, ge=0.5)
    # Minimum seconds between JWKS refetches triggered by an unknown `kid`.
    AUTH_JWKS_REFRESH_INTERVAL: float = Field(default=60.0, ge=0.0)

    @property
    def parsed_auth_algorithms(self) -> list[str]:  # noqa: D401
        return [a.strip() for a in self.AUTH_ALGORITHMS.split(",") if a.strip()]

    @property
    def resolved_jwks_url(self) -> str:  # noqa: D401
        if self.AUTH_JWKS_URL:
            return self.AUTH_JWKS_URL
        issuer = self.AUTH_ISSUER if self.AUTH_ISSUER.endswith("/") else self.AUTH_ISSUER + "/"
        return f"{issuer}.well-known/jwks.json"

    # ------------------------------------------------------------------
    # Object storage (S3 compatible)
    # ------------------------------------------------------------------

    S3_BUCKET_NAME: str = "videohost-media"
    S3_REGION: str = "us-east-1"
    S3_ENDPOINT_URL: Optional[str] = Field(
        default=None, description="Custom endpoint for MinIO / localstack."
    )
    S3_PUBLIC_BASE_URL: Optional[str] = Field(
        default=None,
        description="Base URL used to build public object links (CDN, MinIO).",
    )
    S3_OBJECT_ACL: Optional[str] = "public-read"
    AWS_ACCESS_KEY_ID: Optional[str] = None
    AWS_SECRET_ACCESS_KEY: Optional[str] = None

    MAX_UPLOAD_BYTES: int = Field(default=500 * 1024 * 1024, ge=1)

    # CORS – provide comma-separated string in env ("*" for all)
    CORS_ALLOW_ORIGINS: str = "*"

    @property
    def parsed_cors_origins(self) -> list[str]:  # noqa: D401
        raw = self.CORS_ALLOW_ORIGINS
        if raw.strip() == "*":
            return ["*"]
        origins = []
        for o in raw.split(","):
            o_strip = o.strip()
            if not o_strip:
                continue
            # "http://localhost:4200/" and "http://localhost:4200" must match.
            origins.append(o_strip.rstrip("/"))
        return origins

    # ------------------------------------------------------------------
    # Pydantic hook: boolean env vars coming from env files may carry inline
    # descriptors ("false   # keep local"). Keep only the first token.
    # ------------------------------------------------------------------

    @model_validator(mode="before")
    @classmethod
    def _sanitize_bool_tokens(cls, data):  # type: ignore[return-value]
        if not isinstance(data, dict):
            return data
        for key in (
            "OBSERVABILITY_ENABLED",
            "OTEL_TRACES_ENABLED",
            "LOG_FILE_ENABLED",
        ):
            if key in data and isinstance(data[key], str):
                token = data[key].split("#", 1)[0].strip().split()
                if token:
                    data[key] = token[0]
        return data

    # ------------------------------------------------------------------
    # Observability / Telemetry
    # ------------------------------------------------------------------

    OBSERVABILITY_ENABLED: bool = Field(
        default=True,
        description="Globally enable/disable metrics, traces and log shipping.",
    )

    OTEL_EXPORTER_OTLP_ENDPOINT: Optional[str] = Field(
        default=None,
        description="Base OTLP endpoint, e.g. http://otelcol:4317. Unset disables export.",
    )
    OTEL_TRACES_ENABLED: bool = True
    # "grpc" (default) or "http"
    OTEL_EXPORTER_OTLP_PROTOCOL: str = Field(default="grpc")
    OTEL_TRACES_SAMPLER_RATIO: float = Field(default=1.0, ge=0.0, le=1.0)

    # JSON log lines written to logs/app.log
    LOG_FILE_ENABLED: bool = False


settings = Settings()
