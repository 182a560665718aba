"""Shared utilities: filesystem helpers and the Gemini image generator."""
