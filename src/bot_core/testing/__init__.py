# src/bot_core/testing/__init__.py
"""In-memory fakes for tests and smoke scripts."""
