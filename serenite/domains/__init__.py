"""Bounded contexts of the Serenite platform."""
