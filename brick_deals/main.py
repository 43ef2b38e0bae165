"""FastAPI application entry point."""

from brick_deals.application import create_app

app = create_app()

__all__ = ["app"]
