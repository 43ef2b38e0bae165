"""API route registration."""

from fastapi import FastAPI

from brick_deals.api.routes import admin, deals, push, system


def include_api_routes(app: FastAPI) -> None:
    """Attach all API routers to the application."""

    app.include_router(system.router)
    app.include_router(push.router)
    app.include_router(admin.router)
    app.include_router(deals.router)
