"""
Scheduling Domain

Appointment requests, their proposed slots and the consultations recorded
once a request is confirmed.
"""
