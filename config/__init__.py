"""Configuration package for the interview practice client."""
from .endpoints import build_url
from .options import RequestOptions, default_options
from .settings import Settings, settings

__all__ = [
    "build_url",
    "RequestOptions",
    "default_options",
    "Settings",
    "settings",
]
