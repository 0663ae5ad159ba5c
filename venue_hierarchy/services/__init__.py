"""
Application services.

Usage:
    from venue_hierarchy.services import ServiceFactory

    factory = ServiceFactory()
    store = factory.create_store()
    factory.create_resolution_service(store).on_event_saved(event)
    html = factory.create_display_service(store).render_event(...)
"""

from .display import HierarchyDisplayService
from .factory import ServiceFactory
from .resolution import LocationResolutionService, ResolutionResult, ResolutionStatus

__all__ = [
    "HierarchyDisplayService",
    "LocationResolutionService",
    "ResolutionResult",
    "ResolutionStatus",
    "ServiceFactory",
]
