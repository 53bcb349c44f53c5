"""Demonstration HTTP service for container and orchestration pipelines."""

__version__ = "1.0.0"
