"""Core building blocks: DDD base classes, shared utilities, DI container and app factory."""
