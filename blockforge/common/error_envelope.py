"""Canonical error envelope for blockforge responses.

Standardized structure:
{
  "error": {
    "code": "string",
    "message": "string",
    "http_status": 404,
    "asset_id": "string | null",
    "stage": "pack | model | geometry | texture | composite | animation | null",
    "details": {}
  }
}
"""
from __future__ import annotations

from typing import Any, Dict, Optional, Literal
from fastapi import HTTPException
from pydantic import BaseModel, Field


StageType = Literal["pack", "model", "geometry", "texture", "composite", "animation", None]


class ErrorDetail(BaseModel):
    """Canonical error detail structure."""
    code: str
    message: str
    http_status: int
    asset_id: Optional[str] = None
    stage: Optional[StageType] = None
    details: Dict[str, Any] = Field(default_factory=dict)


class ErrorEnvelope(BaseModel):
    """Top-level error envelope returned by the preview surface."""
    error: ErrorDetail


def build_error_envelope(
    code: str,
    message: str,
    status_code: int = 400,
    asset_id: Optional[str] = None,
    stage: Optional[StageType] = None,
    details: Optional[Dict[str, Any]] = None,
) -> ErrorEnvelope:
    """Construct an ErrorEnvelope (without raising).

    Args mirror error_response; http_status mirrors status_code.
    """
    error_detail = ErrorDetail(
        code=code,
        message=message,
        http_status=status_code,
        asset_id=asset_id,
        stage=stage,
        details=details or {},
    )
    return ErrorEnvelope(error=error_detail)


def error_response(
    code: str,
    message: str,
    status_code: int = 400,
    asset_id: Optional[str] = None,
    stage: Optional[StageType] = None,
    details: Optional[Dict[str, Any]] = None,
) -> None:
    """Raise HTTPException with the canonical envelope as detail."""
    envelope = build_error_envelope(
        code=code,
        message=message,
        status_code=status_code,
        asset_id=asset_id,
        stage=stage,
        details=details,
    )
    raise HTTPException(status_code=status_code, detail=envelope.model_dump())
