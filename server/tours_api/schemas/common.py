"""Common Pydantic schemas."""

from typing import Any, List, Optional

from pydantic import BaseModel, Field


class Violation(BaseModel):
    """Validation error violation."""

    path: str = Field(..., description="Dotted path to the invalid field")
    message: str = Field(..., description="Validation error message")


class Problem(BaseModel):
    """RFC 9457 Problem Details response."""

    type: Optional[str] = Field(None, description="Problem type URI")
    title: str = Field(..., description="Short human-readable summary")
    status: int = Field(..., description="HTTP status code")
    detail: Optional[str] = Field(None, description="Human-readable explanation")
    instance: Optional[str] = Field(None, description="URI reference for this occurrence")
    violations: Optional[List[Violation]] = Field(None, description="Validation errors")


class DocumentData(BaseModel):
    data: Any = Field(None, description="Document or list of documents")


class DocumentResponse(BaseModel):
    """Envelope returned by the CRUD endpoints."""

    status: str = Field("success", description="Always 'success' for 2xx responses")
    results: Optional[int] = Field(None, description="Number of documents, list endpoints only")
    data: DocumentData
