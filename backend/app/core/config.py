from typing import Annotated, Any, Literal

from pydantic import AnyUrl, BeforeValidator, EmailStr, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


def parse_cors(v: Any) -> list[str] | str:
    if isinstance(v, str) and not v.startswith("["):
        return [i.strip() for i in v.split(",") if i.strip()]
    elif isinstance(v, list | str):
        return v
    raise ValueError(v)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        # Use top level .env file (one level above ./backend/)
        env_file="../.env",
        env_ignore_empty=True,
        extra="ignore",
    )
    API_V1_STR: str = "/api/v1"
    SECRET_KEY: str = "changethis"
    # 60 minutes * 24 hours * 8 days = 8 days
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 8
    ENVIRONMENT: Literal["local", "staging", "production"] = "local"
    PROJECT_NAME: str = "Script Choice Provider"
    LOG_LEVEL: str = "INFO"
    SENTRY_DSN: AnyUrl | None = None

    BACKEND_CORS_ORIGINS: Annotated[
        list[AnyUrl] | str, BeforeValidator(parse_cors)
    ] = []

    @computed_field  # type: ignore[prop-decorator]
    @property
    def all_cors_origins(self) -> list[str]:
        return [str(origin).rstrip("/") for origin in self.BACKEND_CORS_ORIGINS]

    DATABASE_URL: str = "sqlite:///./choice_provider.db"

    FIRST_SUPERUSER: EmailStr = "admin@example.com"
    FIRST_SUPERUSER_PASSWORD: str = "changethis"

    # Script engine. None or 0 disables the timeout (SIGALRM, main thread only).
    SCRIPT_EXEC_TIMEOUT: int | None = None
    # Comma-separated top-level module names exposed as script globals (e.g. "re,math").
    SCRIPT_EXTRA_MODULES: str | None = None
    # Comma-separated directories searched first by `import` in unrestricted scripts.
    SCRIPT_PLUGIN_PATHS: str | None = None
    # Comma-separated SHA-256 hashes of unrestricted scripts approved at start-up.
    SCRIPT_APPROVED_HASHES: str | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def script_plugin_paths(self) -> list[str]:
        raw = self.SCRIPT_PLUGIN_PATHS or ""
        return [p.strip() for p in raw.split(",") if p.strip()]

    @computed_field  # type: ignore[prop-decorator]
    @property
    def script_approved_hashes(self) -> list[str]:
        raw = self.SCRIPT_APPROVED_HASHES or ""
        return [h.strip().lower() for h in raw.split(",") if h.strip()]


settings = Settings()  # type: ignore
