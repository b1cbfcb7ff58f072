from pathlib import Path

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    log_level: str = "INFO"

    intake_mode: str = "redis"

    redis_url: str = "redis://localhost:6379/0"
    job_channel: str = "pdf-scraping"
    completion_channel: str = "pdf-complete"
    result_key_prefix: str = "pdf-result:"
    max_concurrent_jobs: int = 2
    message_poll_interval_seconds: float = 1.0

    http_host: str = "0.0.0.0"
    http_port: int = 3000

    portal_url: str = (
        "http://www.sga.pr.gov.br/sga-iap/consultarProcessoLicenciamento.do?action=iniciar"
    )
    browser_headless: bool = True
    browser_executable_path: str | None = None
    download_root: Path = Path("./downloads")

    navigation_timeout_seconds: float = 30.0
    element_timeout_seconds: float = 30.0
    download_settle_seconds: float = 2.0
    download_timeout_seconds: float = 30.0

    inference_provider: str = "gemini"
    api_key: str = ""
    inference_model_name: str = "gemini-2.0-flash"
    inference_temperature: float = 0.9
    inference_timeout_seconds: int = 60
    openai_base_url: str | None = None

    @model_validator(mode="after")
    def _require_api_key(self) -> "Settings":
        if self.inference_provider.lower() != "example" and not self.api_key.strip():
            raise ValueError(
                f"API_KEY is required for inference_provider={self.inference_provider}"
            )
        return self

    @property
    def job_deadline_seconds(self) -> float:
        """Upper bound for one workflow run: the sum of every step timeout."""
        element_actions = 11
        inference_calls = 2
        return (
            self.navigation_timeout_seconds
            + element_actions * self.element_timeout_seconds
            + self.download_settle_seconds
            + self.download_timeout_seconds
            + inference_calls * self.inference_timeout_seconds
        )
