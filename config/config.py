import os
from dataclasses import dataclass
from dotenv import load_dotenv
from pathlib import Path

from utils.logger import get_logger

logger = get_logger(__name__)

ENV_GOOGLE_PLACES_API_KEY = 'GOOGLE_PLACES_API_KEY'
ENV_YELP_API_KEY = 'YELP_API_KEY'
ENV_TRIPADVISOR_API_KEY = 'TRIPADVISOR_API_KEY'


def _load_env_file():
    env_path = Path(__file__).parent.parent / '.env'
    if env_path.exists():
        load_dotenv(dotenv_path=env_path)


def _clean(value: str | None) -> str | None:
    value = (value or '').strip()
    return value or None


@dataclass(frozen=True)
class PlatformCredentials:
    """API keys for each review platform. A None key leaves that platform out."""

    google_key: str | None = None
    yelp_key: str | None = None
    tripadvisor_key: str | None = None

    @classmethod
    def from_env(cls) -> 'PlatformCredentials':
        return cls(
            google_key=_clean(os.getenv(ENV_GOOGLE_PLACES_API_KEY)),
            yelp_key=_clean(os.getenv(ENV_YELP_API_KEY)),
            tripadvisor_key=_clean(os.getenv(ENV_TRIPADVISOR_API_KEY)),
        )

    def missing(self) -> list[str]:
        """Names of the environment variables whose key is not set."""
        pairs = [
            (ENV_GOOGLE_PLACES_API_KEY, self.google_key),
            (ENV_YELP_API_KEY, self.yelp_key),
            (ENV_TRIPADVISOR_API_KEY, self.tripadvisor_key),
        ]
        return [name for name, value in pairs if not value]

    def any_configured(self) -> bool:
        return bool(self.google_key or self.yelp_key or self.tripadvisor_key)


class Config:
    """Configuration management for the review import service."""

    def __init__(self):
        """Initialize configuration with environment variables."""
        # Load environment variables from .env file if it exists
        _load_env_file()

        # Platform credentials
        self.GOOGLE_PLACES_API_KEY = _clean(os.getenv(ENV_GOOGLE_PLACES_API_KEY))
        self.YELP_API_KEY = _clean(os.getenv(ENV_YELP_API_KEY))
        self.TRIPADVISOR_API_KEY = _clean(os.getenv(ENV_TRIPADVISOR_API_KEY))

        # Cache
        self.CACHE_TTL_SECONDS = int(os.getenv('REVIEW_CACHE_TTL_SECONDS', '300'))
        self.CACHE_CLEANUP_INTERVAL_SECONDS = float(
            os.getenv('REVIEW_CACHE_CLEANUP_INTERVAL_SECONDS', '60')
        )

        # Outbound HTTP
        self.HTTP_TIMEOUT_SECONDS = float(os.getenv('REVIEW_HTTP_TIMEOUT_SECONDS', '10'))
        self.RETRY_MAX_ATTEMPTS = int(os.getenv('REVIEW_RETRY_MAX_ATTEMPTS', '3'))
        self.RETRY_BASE_DELAY_SECONDS = float(os.getenv('REVIEW_RETRY_BASE_DELAY_SECONDS', '1.0'))
        self.MAX_PLACES = int(os.getenv('REVIEW_MAX_PLACES', '5'))

        missing = self.credentials().missing()
        if missing:
            logger.warning(
                "Some API keys are missing. Review import functionality may be limited: "
                + ", ".join(missing),
                extra={"extra_fields": {"missing_keys": missing}},
            )

    def credentials(self) -> PlatformCredentials:
        return PlatformCredentials(
            google_key=self.GOOGLE_PLACES_API_KEY,
            yelp_key=self.YELP_API_KEY,
            tripadvisor_key=self.TRIPADVISOR_API_KEY,
        )

    def validate(self) -> bool:
        """
        Validate that at least one review platform can be used.

        Returns:
            bool: True if configuration is valid, False otherwise
        """
        if not self.credentials().any_configured():
            logger.error(
                "No review platform API key is set. Set at least one of: "
                + ", ".join(self.credentials().missing())
            )
            return False
        if self.RETRY_MAX_ATTEMPTS < 1:
            logger.error(f"REVIEW_RETRY_MAX_ATTEMPTS must be >= 1, got {self.RETRY_MAX_ATTEMPTS}")
            return False
        return True

    def get_platform_info(self) -> str:
        """
        Get information about the configured review platforms.

        Returns:
            str: Formatted string with platform availability
        """
        creds = self.credentials()
        configured = [
            name
            for name, key in (
                ("Google Places", creds.google_key),
                ("Yelp", creds.yelp_key),
                ("TripAdvisor", creds.tripadvisor_key),
            )
            if key
        ]
        return ", ".join(configured) if configured else "none"
