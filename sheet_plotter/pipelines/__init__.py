from .session import PlotSession

__all__ = ["PlotSession"]
