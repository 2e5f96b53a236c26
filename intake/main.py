"""Client Intake: composition root."""

from intake.core.config import Settings, get_settings
from intake.core.logging import configure_structlog
from intake.integrations.http_store import HttpDraftStore
from intake.services.intake_service import IntakeService


def build_intake_service(settings: Settings | None = None) -> IntakeService:
    """Configure logging and wire an IntakeService to the HTTP draft store."""
    settings = settings or get_settings()
    configure_structlog(
        log_level="DEBUG" if settings.debug else settings.log_level,
        json_logs=settings.json_logs and not settings.debug,
        service=settings.app_name,
    )
    store = HttpDraftStore(base_url=settings.api_base_url, timeout=settings.http_timeout_seconds)
    return IntakeService(store, settings)
