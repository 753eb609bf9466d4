"""Scheduling persistence layer."""
