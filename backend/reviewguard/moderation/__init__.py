"""Review workflow integration helpers exposed to the application."""

from reviewguard.moderation.api import router
from reviewguard.moderation.domain.container import configure, configure_from_settings

__all__ = ["router", "configure", "configure_from_settings"]
