from pydantic import BaseModel, Field
from typing import Optional, Dict, Any, List

from remote_execution import OperationResult


class InvokeRequest(BaseModel):
    """Request to invoke an operation."""
    parameters: Dict[str, Any] = {}
    token: Optional[str] = None
    timeout_seconds: Optional[float] = Field(default=None, gt=0)


class InvokeResponse(BaseModel):
    """Result of an operation plus its rendered text."""
    result: OperationResult
    text: str


class SetTokenRequest(BaseModel):
    """Request to set the session token."""
    token: str = Field(min_length=1)


class SetTokenResponse(BaseModel):
    """Confirmation of a session token update."""
    message: str


class OperationSummary(BaseModel):
    """Operation as offered to the assistant."""
    name: str
    description: str
    backend: str
    parameters: Dict[str, Any]


class OperationList(BaseModel):
    """All registered operations."""
    operations: List[OperationSummary]
