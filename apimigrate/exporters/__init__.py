"""Source platform exporters."""

from .apictl import ApictlClient, check_required_tools, version_ge

__all__ = [
    "ApictlClient",
    "check_required_tools",
    "version_ge",
]
