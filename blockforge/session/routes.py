"""Preview HTTP Routes.

Endpoints:
- POST /preview/block -> resolve a block state and compute its geometry summary
- GET /preview/entity/{asset_id} -> entity composite schema, or {"composite": null}
- POST /preview/blockstate/schema -> editable property surface of a block
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from blockforge.common.error_envelope import error_response
from blockforge.common.errors import BlockforgeError
from blockforge.geometry_kernel.service import summarize
from blockforge.model_resolver.schemas import BlockStateSchema
from blockforge.session.service import PreviewSession

router = APIRouter(prefix="/preview", tags=["preview"])

_session: Optional[PreviewSession] = None


def set_preview_session(session: Optional[PreviewSession]) -> None:
    global _session
    _session = session


def get_preview_session() -> PreviewSession:
    if _session is None:
        error_response(
            code="session.not_configured",
            message="No preview session is open",
            status_code=503,
        )
    return _session


def _raise_envelope(exc: BlockforgeError) -> None:
    error_response(
        code=exc.code,
        message=exc.message,
        status_code=exc.http_status,
        asset_id=exc.asset_id,
        stage=exc.stage,
        details=exc.details,
    )


# Request/Response Models
class BlockPreviewRequest(BaseModel):
    block_id: str = Field(..., description="Namespaced block id, e.g. minecraft:oak_stairs")
    properties: Dict[str, Any] = Field(default_factory=dict)
    seed: Optional[int] = Field(None, description="Variant seed; None uses the session seed")
    tint: Optional[List[int]] = Field(None, description="RGB override for tinted faces")


class BlockPreviewResponse(BaseModel):
    request_id: str
    block_id: str
    properties: Dict[str, str]
    seed: Optional[int] = None
    tint: Optional[List[int]] = None
    is_placeholder: bool = False
    diagnostics: List[str] = Field(default_factory=list)
    texture_ids: List[str] = Field(default_factory=list)
    geometry: Optional[Dict[str, Any]] = None
    stale: bool = False


class BlockStateSchemaRequest(BaseModel):
    block_id: str


# Endpoints

@router.post("/block", response_model=BlockPreviewResponse)
async def preview_block(
    payload: BlockPreviewRequest,
    session: PreviewSession = Depends(get_preview_session),
) -> BlockPreviewResponse:
    """Model failures come back as a placeholder preview with diagnostics, not as errors."""
    try:
        preview = await session.preview_block(payload.block_id, payload.properties, payload.seed, payload.tint)
    except BlockforgeError as exc:
        _raise_envelope(exc)
    except ValueError as exc:
        error_response(code="request.invalid", message=str(exc), status_code=400, asset_id=payload.block_id)

    return BlockPreviewResponse(
        request_id=preview.request_id,
        block_id=preview.block_id,
        properties=preview.properties,
        seed=preview.seed,
        tint=preview.tint,
        is_placeholder=preview.is_placeholder,
        diagnostics=preview.diagnostics,
        texture_ids=preview.texture_ids,
        geometry=summarize(preview.buffers) if preview.buffers is not None else None,
        stale=preview.buffers is None,
    )


@router.get("/entity/{asset_id:path}")
async def entity_composite(
    asset_id: str,
    session: PreviewSession = Depends(get_preview_session),
) -> Dict[str, Any]:
    """Composite schema plus the layer stack for the default control state."""
    schema = session.entity_composite(asset_id)
    if schema is None:
        return {"composite": None}
    return {
        "composite": schema.model_dump(mode="json"),
        "layers": [layer.model_dump(mode="json") for layer in schema.get_active_layers()],
        "base_texture_asset_id": schema.get_base_texture_asset_id(),
    }


@router.post("/blockstate/schema", response_model=BlockStateSchema)
async def block_state_schema(
    payload: BlockStateSchemaRequest,
    session: PreviewSession = Depends(get_preview_session),
) -> BlockStateSchema:
    try:
        return session.block_state_schema(payload.block_id)
    except BlockforgeError as exc:
        _raise_envelope(exc)
