"""
Phone Lookup API

Run:
    export VERIPHONE_API_KEY=...
    uvicorn phone_lookup.api:app --host 0.0.0.0 --port 8000
"""

from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from phone_lookup.bootstrap import initialize
from phone_lookup.config import Settings, settings as default_settings
from phone_lookup.dependencies import close_resolver, init_app
from phone_lookup.exceptions import PostNotFoundError, ProviderError, ValidationError

from .errors import (
    exception_middleware,
    post_not_found_handler,
    provider_error_handler,
    validation_error_handler,
)
from .routes import router


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the HTTP application; clients are created on startup."""
    settings = settings or default_settings
    app = FastAPI(title="Phone Lookup API", version="1.0")
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET"],
        allow_headers=["*"],
    )
    app.include_router(router)

    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(ProviderError, provider_error_handler)
    app.add_exception_handler(PostNotFoundError, post_not_found_handler)
    app.middleware("http")(exception_middleware)

    @app.on_event("startup")
    async def startup_event() -> None:
        initialize(settings)
        if getattr(app.state, "resolver", None) is None:
            init_app(app, settings)

    @app.on_event("shutdown")
    async def shutdown_event() -> None:
        resolver = getattr(app.state, "resolver", None)
        if resolver is not None:
            await close_resolver(resolver)

    return app


app = create_app()

__all__ = ["app", "create_app"]
