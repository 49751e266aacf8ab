"""Helpers backing the FastAPI routes in ``chatbridge.service.app``."""
