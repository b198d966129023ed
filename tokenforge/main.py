from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from .api import fees, health, tokens
from .config import settings
from .context import ForgeContext
from .logging_config import setup_logging
from .middleware import RequestLoggingMiddleware


def create_app(context: Optional[ForgeContext] = None) -> FastAPI:
    """Build the API. ``context`` defaults to one built from the global settings."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging()
        ctx = context or ForgeContext.from_settings(settings)
        await ctx.start()
        app.state.forge = ctx
        try:
            yield
        finally:
            await ctx.close()

    app = FastAPI(
        title="Token Forge API",
        description="Fee estimation and transaction building for ERC-20 tokens on Base",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health.router, tags=["Health"])
    app.include_router(fees.router, tags=["Fees"])
    app.include_router(tokens.router, tags=["Tokens"])

    @app.get("/")
    async def root(request: Request):
        """Root endpoint with basic info"""
        return {
            "name": "Token Forge API",
            "version": "0.1.0",
            "chain_id": request.app.state.forge.settings.chain_id,
            "docs": "/docs",
            "health": "/healthz",
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "tokenforge.main:app",
        host=settings.host,
        port=settings.port,
        reload=True,
        log_level=settings.log_level.lower()
    )
