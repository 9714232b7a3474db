"""Guided deployment of site-builder projects to hosting platforms."""

__version__ = "0.1.0"
