"""
Adapters package for the document service.

Contains the HTTP client wrapper for the remote registry. Adapters
encapsulate:

- Base URLs, endpoint variants and request shapes
- Error handling that maps transport failures to shared errors

Keep adapters thin and side-effect free outside of explicit calls.
"""

from .endpoints import EndpointVariant, EndpointProfile
from .document_submitter import DocumentSubmitter

__all__ = [
    "EndpointVariant",
    "EndpointProfile",
    "DocumentSubmitter",
]
