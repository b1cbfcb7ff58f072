import pytest
from pydantic import ValidationError

from sga_worker.config.settings import Settings


@pytest.fixture(autouse=True)
def _api_key(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("API_KEY", "test-key")


class TestSettingsDefaults:
    def test_default_channels(self) -> None:
        s = Settings()
        assert s.job_channel == "pdf-scraping"
        assert s.completion_channel == "pdf-complete"
        assert s.result_key_prefix == "pdf-result:"

    def test_default_navigation_timeout(self) -> None:
        s = Settings()
        assert s.navigation_timeout_seconds == 30.0

    def test_default_settle_delay(self) -> None:
        s = Settings()
        assert s.download_settle_seconds == 2.0

    def test_default_inference_provider(self) -> None:
        s = Settings()
        assert s.inference_provider == "gemini"
        assert s.inference_model_name == "gemini-2.0-flash"

    def test_headless_by_default(self) -> None:
        s = Settings()
        assert s.browser_headless is True


class TestSettingsFromEnv:
    def test_loads_api_key(self) -> None:
        s = Settings()
        assert s.api_key == "test-key"

    def test_loads_intake_mode(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("INTAKE_MODE", "http")
        s = Settings()
        assert s.intake_mode == "http"

    def test_loads_redis_url(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("REDIS_URL", "redis://cache:6379/2")
        s = Settings()
        assert s.redis_url == "redis://cache:6379/2"

    def test_loads_headless_flag(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("BROWSER_HEADLESS", "false")
        s = Settings()
        assert s.browser_headless is False


class TestSettingsValidation:
    def test_missing_api_key_fails_fast(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("API_KEY", "")
        with pytest.raises(ValidationError, match="API_KEY is required"):
            Settings()

    def test_example_provider_needs_no_key(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("API_KEY", "")
        monkeypatch.setenv("INFERENCE_PROVIDER", "example")
        s = Settings()
        assert s.api_key == ""

    def test_invalid_timeout_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ELEMENT_TIMEOUT_SECONDS", "soon")
        with pytest.raises(ValidationError):
            Settings()


class TestJobDeadline:
    def test_deadline_is_sum_of_step_timeouts(self) -> None:
        s = Settings(
            navigation_timeout_seconds=10,
            element_timeout_seconds=1,
            download_settle_seconds=2,
            download_timeout_seconds=5,
            inference_timeout_seconds=20,
        )
        assert s.job_deadline_seconds == 10 + 11 * 1 + 2 + 5 + 2 * 20
