"""
Endpoint variants of the registry document-creation API.

The registry exposes two wire shapes for the same operation. A submitter is
configured with exactly one of them; fields of a request that the selected
variant does not use are ignored.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Union

from shared.errors import InvalidArgument

from ..domain.models import Document


class EndpointVariant(str, Enum):
    """Supported endpoint variants."""
    SIGNATURE_HEADER = "signature_header"
    BEARER_TOKEN = "bearer_token"


@dataclass(frozen=True)
class EndpointProfile:
    """Wire shape of one endpoint variant."""

    variant: EndpointVariant
    path: str
    product_group_in_query: bool
    requires_credentials: bool
    content_type: str = "application/json"

    @classmethod
    def for_variant(cls, variant: Union[EndpointVariant, str]) -> "EndpointProfile":
        try:
            variant = EndpointVariant(variant)
        except ValueError as e:
            raise InvalidArgument(
                f"Unknown endpoint variant: {variant}",
                details={"variant": str(variant), "supported": [v.value for v in EndpointVariant]}
            ) from e
        return _PROFILES[variant]

    def params(self, document: Document) -> Dict[str, str]:
        """Query parameters for the request target."""
        if self.product_group_in_query:
            return {"pg": document.product_group}
        return {}

    def headers(self, signature: str, credentials: Optional[str]) -> Dict[str, str]:
        headers = {"Content-Type": self.content_type}
        if self.variant is EndpointVariant.SIGNATURE_HEADER:
            headers["Signature"] = signature
        else:
            headers["Authorization"] = f"Bearer {credentials}"
        return headers

    def body(self, document: Document, signature: str) -> Dict[str, Any]:
        """Request body; the product group only appears here for the signature variant."""
        if self.variant is EndpointVariant.SIGNATURE_HEADER:
            return {"pg": document.product_group}

        body = document.body_fields()
        body["signature"] = signature or document.signature or ""
        return body


_PROFILES = {
    EndpointVariant.SIGNATURE_HEADER: EndpointProfile(
        variant=EndpointVariant.SIGNATURE_HEADER,
        path="/lk/documents/create",
        product_group_in_query=False,
        requires_credentials=False,
    ),
    EndpointVariant.BEARER_TOKEN: EndpointProfile(
        variant=EndpointVariant.BEARER_TOKEN,
        path="/api/v3/lk/documents/create",
        product_group_in_query=True,
        requires_credentials=True,
    ),
}
