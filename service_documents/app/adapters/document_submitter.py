"""
Registry document submitter.
"""

import json
from collections.abc import Mapping
from typing import Any, Optional, Union

import httpx
from pydantic import ValidationError

from shared.errors import InvalidArgument, SerializationError, TransportError
from shared.logging import get_logger, set_submission_id, reset_submission_id, submission_id_var
from shared.metrics import SubmissionMetrics, get_metrics

from ..domain.models import Accepted, Document, Rejected, SubmissionRequest, SubmissionResult
from ..ratelimit.gate import RateGate
from .endpoints import EndpointProfile, EndpointVariant

DEFAULT_BASE_URL = "https://ismp.crpt.ru"
SUCCESS_STATUSES = (200, 201)
NO_DETAILS_MESSAGE = "No error details provided by server."


class DocumentSubmitter:
    """Submits documents to the registry through a shared rate gate.

    One submitter serves any number of concurrent callers; the gate is the
    only point where ``submit`` waits for capacity. Nothing is retried:
    rejections and transport failures go back to the caller.
    """

    def __init__(self,
                 gate: RateGate,
                 variant: Union[EndpointVariant, str] = EndpointVariant.BEARER_TOKEN,
                 base_url: str = DEFAULT_BASE_URL,
                 client: Optional[httpx.AsyncClient] = None,
                 timeout: float = 10.0,
                 metrics: Optional[SubmissionMetrics] = None):
        self.gate = gate
        self.profile = EndpointProfile.for_variant(variant)
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.logger = get_logger("documents.submitter")
        self._client = client
        self._owns_client = client is None
        self._metrics = metrics

    async def __aenter__(self) -> "DocumentSubmitter":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the HTTP client if this submitter created it."""
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    @property
    def url(self) -> str:
        return f"{self.base_url}{self.profile.path}"

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    def _get_metrics(self) -> SubmissionMetrics:
        return self._metrics or get_metrics()

    async def submit_request(self, request: SubmissionRequest) -> SubmissionResult:
        return await self.submit(request.document, request.signature, request.credentials)

    async def submit(self,
                     document: Union[Document, Mapping[str, Any], None],
                     signature: Optional[str] = None,
                     credentials: Optional[str] = None) -> SubmissionResult:
        """Validate, encode and POST one document, waiting for a gate permit first.

        Raises InvalidArgument, SerializationError or TransportError; a
        non-success HTTP status comes back as ``Rejected``.
        """
        variant = self.profile.variant.value
        try:
            document = self._validate(document, signature, credentials)
        except InvalidArgument as e:
            self.logger.warning("Submission rejected locally", error=e.message, variant=variant)
            self._get_metrics().record_submission(variant, "invalid_argument")
            raise

        signature = signature or ""
        token = set_submission_id()
        submission_id = submission_id_var.get()
        try:
            payload = self._serialize(document, signature)

            waited = await self.gate.acquire()
            if waited > 0:
                self.logger.debug("Rate gate delayed submission", waited_seconds=round(waited, 6))

            result = await self._send(document, signature, credentials, payload)
        finally:
            reset_submission_id(token)

        if result.accepted:
            self.logger.info(
                "Document accepted",
                status_code=result.http_status,
                product_group=document.product_group,
                submission_id=submission_id
            )
        else:
            self.logger.warning(
                "Document rejected",
                status_code=result.http_status,
                server_message=result.server_message,
                submission_id=submission_id
            )
        self._get_metrics().record_submission(variant, "accepted" if result.accepted else "rejected")
        return result

    def _validate(self, document: Any, signature: Any, credentials: Any) -> Document:
        if document is None:
            raise InvalidArgument("Document must not be None")

        if isinstance(document, Mapping):
            try:
                document = Document.model_validate(dict(document))
            except ValidationError as e:
                raise InvalidArgument("Document is malformed", details={"errors": str(e)}) from e
        elif not isinstance(document, Document):
            raise InvalidArgument(
                "Document must be a Document or a mapping",
                details={"type": type(document).__name__}
            )

        product_group = document.product_group
        if product_group is None or not product_group.strip():
            raise InvalidArgument("Document product group must not be empty")

        if signature is not None and not isinstance(signature, str):
            raise InvalidArgument("Signature must be a string", details={"type": type(signature).__name__})

        if self.profile.requires_credentials and (credentials is None or not str(credentials).strip()):
            raise InvalidArgument(
                "Credentials are required for this endpoint",
                details={"variant": self.profile.variant.value}
            )

        return document

    def _serialize(self, document: Document, signature: str) -> bytes:
        try:
            body = self.profile.body(document, signature)
            return json.dumps(body, ensure_ascii=False, allow_nan=False).encode("utf-8")
        except (TypeError, ValueError) as e:
            self.logger.error("Document serialization failed", error=str(e))
            self._get_metrics().record_submission(self.profile.variant.value, "serialization_error")
            raise SerializationError(
                "Document cannot be encoded as JSON",
                details={"error": str(e)}
            ) from e

    async def _send(self,
                    document: Document,
                    signature: str,
                    credentials: Optional[str],
                    payload: bytes) -> SubmissionResult:
        variant = self.profile.variant.value
        client = self._get_client()

        try:
            with self._get_metrics().time_submission(variant):
                async with client.stream(
                    "POST",
                    self.url,
                    params=self.profile.params(document),
                    headers=self.profile.headers(signature, credentials),
                    content=payload,
                    timeout=self.timeout
                ) as response:
                    if response.status_code in SUCCESS_STATUSES:
                        return Accepted(http_status=response.status_code)

                    body = await self._read_error_body(response)
                    return Rejected(
                        http_status=response.status_code,
                        server_message=self._error_message(response.status_code, body)
                    )

        except httpx.HTTPError as e:
            self.logger.error("Registry transport error", error=str(e), url=self.url)
            self._get_metrics().record_submission(variant, "transport_error")
            raise TransportError(
                "Registry unavailable",
                details={"error": str(e), "error_type": type(e).__name__, "url": self.url}
            ) from e

    async def _read_error_body(self, response: httpx.Response) -> str:
        """Read a rejection body best-effort; keep whatever arrived before a failure."""
        chunks = []
        try:
            async for chunk in response.aiter_bytes():
                chunks.append(chunk)
        except httpx.HTTPError as e:
            self.logger.warning(
                "Error body could not be read",
                status_code=response.status_code,
                error=str(e),
                error_type=type(e).__name__
            )
        return b"".join(chunks).decode(response.encoding or "utf-8", errors="replace")

    @staticmethod
    def _error_message(status_code: int, body: str) -> str:
        details = "".join(body.splitlines())
        if not details.strip():
            details = NO_DETAILS_MESSAGE
        return f"HTTP {status_code}: {details}"
