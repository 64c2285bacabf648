"""
Domain models for document submission: the document payload and the
typed outcome of a submission.
"""

from .models import Document, SubmissionRequest, Accepted, Rejected, SubmissionResult

__all__ = [
    "Document",
    "SubmissionRequest",
    "Accepted",
    "Rejected",
    "SubmissionResult",
]
