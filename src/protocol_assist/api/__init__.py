"""FastAPI HTTP adapter over the protocol services."""
