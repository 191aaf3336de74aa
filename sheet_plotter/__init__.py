"""Top-level package for the Sheet Plotter backend."""

from .api.app_factory import create_app
from .pipelines.session import PlotSession

__all__ = ["create_app", "PlotSession"]
