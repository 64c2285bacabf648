"""
Document and submission result models.
"""

from typing import Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from shared.errors import SubmissionRejected


class Document(BaseModel):
    """Document to register.

    ``product_group`` never goes into the request body; it is routed into
    the request target instead. Any extra caller-owned fields are kept and
    serialized alongside the known ones.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    product_group: Optional[str] = Field(default=None, alias="productGroup")
    document_format: Optional[str] = None
    product_document: Optional[str] = None
    signature: Optional[str] = None
    type: Optional[str] = None

    def body_fields(self) -> Dict[str, Any]:
        """Fields that belong in the request body."""
        return self.model_dump(exclude={"product_group"})


class SubmissionRequest(BaseModel):
    """One submission: the document plus the caller's signature and credentials."""

    model_config = ConfigDict(frozen=True)

    document: Document
    signature: Optional[str] = None
    credentials: Optional[str] = None


class Accepted(BaseModel):
    """Registry accepted the document."""

    model_config = ConfigDict(frozen=True)

    http_status: Literal[200, 201]

    @property
    def accepted(self) -> bool:
        return True

    def raise_for_status(self) -> "Accepted":
        return self


class Rejected(BaseModel):
    """Registry answered with a non-success status."""

    model_config = ConfigDict(frozen=True)

    http_status: int
    server_message: str = ""

    @property
    def accepted(self) -> bool:
        return False

    def raise_for_status(self) -> None:
        """Raise ``SubmissionRejected`` carrying the status and server message."""
        raise SubmissionRejected(self.http_status, self.server_message)


SubmissionResult = Union[Accepted, Rejected]
