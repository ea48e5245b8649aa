"""FastAPI dependencies for service access."""

from config.config import Config
from models.errors import ReviewImportError
from orchestrator.review_import import ReviewImportService
from orchestrator.testimonial_import import InMemoryTestimonialSink
from utils.logger import get_logger

logger = get_logger(__name__)


def get_config() -> Config:
    if not hasattr(get_config, "_instance"):
        get_config._instance = Config()
    return get_config._instance


def get_review_import_service() -> ReviewImportService:
    """
    Dependency to get the review import service (singleton pattern).

    The cache sweeper starts when the service is first built. A CONFIG_ERROR
    from construction is remembered and re-raised on later calls, since the
    configuration it was read from does not change for the process.
    """
    if hasattr(get_review_import_service, "_unavailable"):
        raise get_review_import_service._unavailable

    if not hasattr(get_review_import_service, "_instance"):
        config = get_config()
        try:
            service = ReviewImportService.from_config(config)
        except ReviewImportError as e:
            get_review_import_service._unavailable = e
            raise
        service.cache.start_sweeper(config.CACHE_CLEANUP_INTERVAL_SECONDS)
        get_review_import_service._instance = service
    return get_review_import_service._instance


def shutdown_review_import_service() -> None:
    """Stop the cache sweeper of the service singleton, if one was built."""
    service = getattr(get_review_import_service, "_instance", None)
    if service is not None:
        service.cache.stop_sweeper()


def get_testimonial_sink() -> InMemoryTestimonialSink:
    """Dependency for the persistence collaborator. Override it to plug in a real store."""
    if not hasattr(get_testimonial_sink, "_instance"):
        get_testimonial_sink._instance = InMemoryTestimonialSink()
    return get_testimonial_sink._instance


def get_active_platforms() -> list[str]:
    """Platforms the service can query; empty while none is configured."""
    try:
        return get_review_import_service().platforms
    except ReviewImportError:
        return []
