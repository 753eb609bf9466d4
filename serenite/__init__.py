"""Serenite: appointment requests and consultations between clients and providers."""

__version__ = "0.1.0"
