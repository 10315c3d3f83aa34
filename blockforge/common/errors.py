"""Error taxonomy shared by every kernel."""
from __future__ import annotations

from typing import Any, Dict, Optional

from blockforge.common.error_envelope import ErrorEnvelope, StageType, build_error_envelope


class BlockforgeError(Exception):
    """Base error. Subclasses pin the code and status; the stage can be overridden per raise."""

    code = "blockforge.error"
    http_status = 500
    stage: StageType = None

    def __init__(
        self,
        message: str,
        asset_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        stage: StageType = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.asset_id = asset_id
        self.details = details or {}
        if stage is not None:
            self.stage = stage

    def to_envelope(self) -> ErrorEnvelope:
        return build_error_envelope(
            code=self.code,
            message=self.message,
            status_code=self.http_status,
            asset_id=self.asset_id,
            stage=self.stage,
            details=self.details,
        )


class NotFound(BlockforgeError):
    """Asset id absent from every pack (or no variant matched)."""

    code = "asset.not_found"
    http_status = 404
    stage = "pack"


class CircularReference(BlockforgeError):
    """A model parent chain revisits an id or exceeds the depth guard."""

    code = "model.circular_reference"
    http_status = 422
    stage = "model"


class UnresolvedTextureVariable(BlockforgeError):
    code = "model.unresolved_texture_variable"
    http_status = 422
    stage = "model"


class MalformedDefinition(BlockforgeError):
    """Element, face or state data that does not fit the schema."""

    code = "definition.malformed"
    http_status = 422
    stage = "geometry"


class ComputeTimeout(BlockforgeError):
    code = "geometry.compute_timeout"
    http_status = 504
    stage = "geometry"
