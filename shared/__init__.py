"""
Shared utilities for the document registry client.

This package aggregates common building blocks consumed by the service:

- config: Settings via pydantic-settings
- logging: Structured logging with submission correlation
- metrics: Prometheus metrics helpers
- errors: Canonical error types

Do not import from service packages into shared/.
"""
