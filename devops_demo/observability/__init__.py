"""Observability for the demo service.

Structured JSON logs through structlog, Prometheus metrics through
prometheus_client, and the ASGI middleware that ties both to each request.
"""
