"""
Scheduling API

FastAPI routers for the scheduling domain.
"""

from serenite.domains.scheduling.api.routes import appointments_router, consultations_router

__all__ = ["appointments_router", "consultations_router"]
