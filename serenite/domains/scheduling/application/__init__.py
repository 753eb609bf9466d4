"""
Scheduling Application Layer

Use cases, ports and DTOs for the scheduling bounded context.
"""
