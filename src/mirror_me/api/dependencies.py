"""Request dependencies."""

from fastapi import Request

from ..extraction.config import MirrorMeConfig


def get_app_config(request: Request) -> MirrorMeConfig:
    """Configuration the application was created with."""
    return request.app.state.config
