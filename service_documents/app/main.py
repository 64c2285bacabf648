"""
Document submission service wiring.
"""

from typing import Optional

import httpx

from shared.config import SubmitterSettings, get_settings
from shared.logging import configure_logging, get_logger
from shared.metrics import SubmissionMetrics

from .adapters.document_submitter import DocumentSubmitter
from .ratelimit.gate import RateGate, RateLimitConfig


def create_rate_gate(settings: SubmitterSettings, metrics: Optional[SubmissionMetrics] = None) -> RateGate:
    """Build the process-wide gate from settings."""
    config = RateLimitConfig.per(settings.rate_window, settings.rate_max_requests)
    return RateGate(config, metrics=metrics)


def create_submitter(settings: Optional[SubmitterSettings] = None,
                     client: Optional[httpx.AsyncClient] = None,
                     metrics: Optional[SubmissionMetrics] = None,
                     configure_logs: bool = False) -> DocumentSubmitter:
    """Create a submitter with its own rate gate.

    Share the returned submitter between callers: each submitter owns one
    gate, so two submitters mean two independent budgets.
    """
    settings = settings or get_settings()
    if configure_logs:
        configure_logging("documents", settings.log_level)

    gate = create_rate_gate(settings, metrics=metrics)
    submitter = DocumentSubmitter(
        gate,
        variant=settings.endpoint_variant,
        base_url=settings.registry_base_url,
        client=client,
        timeout=settings.request_timeout_seconds,
        metrics=metrics,
    )
    get_logger("documents.main").info(
        "Document submitter created",
        variant=submitter.profile.variant.value,
        base_url=submitter.base_url,
        max_requests=gate.config.max_requests,
        window_seconds=gate.config.window_seconds,
        env=settings.env
    )
    return submitter
