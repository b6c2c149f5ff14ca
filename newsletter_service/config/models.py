from pydantic import BaseModel, Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENVIRONMENTS = ("local", "production")


class ApplicationSettings(BaseModel):
    host: str = "127.0.0.1"
    port: int = 8000
    base_url: str = "http://127.0.0.1:8000"
    log_level: str = "INFO"
    # Signs the admin session cookie.
    session_secret: SecretStr = SecretStr("")


class DatabaseSettings(BaseModel):
    path: str = "./data/newsletter.db"
    max_connections: int = Field(default=5, ge=1)
    acquire_timeout_seconds: float = Field(default=2.0, gt=0)
    run_migrations: bool = True

    @field_validator("path")
    @classmethod
    def _must_be_a_file(cls, v: str) -> str:
        # Every pooled connection would open its own private in-memory database.
        if v.strip() == ":memory:" or "mode=memory" in v:
            raise ValueError("in-memory databases are not supported; use a file path")
        return v


class EmailClientSettings(BaseModel):
    # "postmark" sends over HTTP; "dev" only logs (local development).
    backend: str = "dev"
    base_url: str = "http://localhost:8025"
    sender_email: str = "newsletter@example.com"
    authorization_token: SecretStr = SecretStr("")
    timeout_milliseconds: int = Field(default=10_000, gt=0)

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_milliseconds / 1000


class HashingSettings(BaseModel):
    max_workers: int = Field(default=2, ge=1)


class Settings(BaseSettings):
    """
    Service configuration.

    Any field can be overridden with an APP_-prefixed environment
    variable, nested sections joined by a double underscore
    (e.g. APP_DATABASE__PATH).
    """

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    environment: str = "local"
    application: ApplicationSettings = ApplicationSettings()
    database: DatabaseSettings = DatabaseSettings()
    email_client: EmailClientSettings = EmailClientSettings()
    hashing: HashingSettings = HashingSettings()

    @field_validator("environment")
    @classmethod
    def _known_environment(cls, v: str) -> str:
        v = v.lower()
        if v not in ENVIRONMENTS:
            raise ValueError(f"{v} is not a supported environment")
        return v

    @model_validator(mode="after")
    def _production_needs_session_secret(self) -> "Settings":
        if self.environment == "production" and not self.application.session_secret.get_secret_value():
            raise ValueError("application.session_secret must be set in production")
        return self
