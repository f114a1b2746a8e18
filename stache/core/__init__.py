"""Core — Errors, settings, logging and compile orchestration."""
