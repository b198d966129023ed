from fastapi import Request

from ..context import ForgeContext


def get_context(request: Request) -> ForgeContext:
    """The ``ForgeContext`` created by the app lifespan."""
    return request.app.state.forge
