from fastapi import APIRouter

from serenite.domains.scheduling.api import appointments_router, consultations_router

api_router = APIRouter()

# Scheduling domain
api_router.include_router(appointments_router)
api_router.include_router(consultations_router)
