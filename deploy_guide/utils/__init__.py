"""Utility functions for the deployment guidance engine."""

from deploy_guide.utils.logging import configure_logging, get_logger

__all__ = [
    "configure_logging",
    "get_logger",
]
