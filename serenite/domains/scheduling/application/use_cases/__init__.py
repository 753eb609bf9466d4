"""
Scheduling Use Cases

Application layer workflows for the scheduling domain.
"""

from serenite.domains.scheduling.application.use_cases.appointment_workflow import AppointmentWorkflow
from serenite.domains.scheduling.application.use_cases.consultation_workflow import ConsultationWorkflow

__all__ = [
    "AppointmentWorkflow",
    "ConsultationWorkflow",
]
