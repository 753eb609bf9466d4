"""HTTP surface: global router and exception handlers."""
