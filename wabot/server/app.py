"""FastAPI application exposing the automation handler."""

from fastapi import FastAPI
from fastapi.responses import PlainTextResponse

from .handler import router as handler_router


def create_app(context) -> FastAPI:
    """Build the HTTP app bound to ``context``."""
    app = FastAPI(title=f"{context.settings.bot_name} handler")
    app.state.context = context
    app.include_router(handler_router)

    @app.get("/", response_class=PlainTextResponse)
    async def root():
        """Root endpoint for health checks."""
        return "Hello World!"

    context.http_app = app
    return app
