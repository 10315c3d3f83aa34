"""Preview Session: owns per-preview caches and wires resolve -> geometry -> textures."""
from __future__ import annotations

import itertools
import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

from pydantic import BaseModel, Field

from blockforge.animation_kernel.service import AnimationStateEngine
from blockforge.common.asset_ids import normalize_asset_id, split_asset_id
from blockforge.entity_composite.schemas import ControlState, EntityCompositeSchema, LayerBlend, LayerKind
from blockforge.entity_composite.service import resolve_composite
from blockforge.geometry_kernel.cache import GeometryCache, GeometryKey
from blockforge.geometry_kernel.compute_boundary import GeometryComputeBoundary
from blockforge.geometry_kernel.ops.tint_ops import default_tint_for_block, normalize_tint
from blockforge.geometry_kernel.schemas import GeometryBuffers
from blockforge.geometry_kernel.service import compute_model_geometry
from blockforge.model_resolver.schemas import BlockStateSchema, ResolvedModel
from blockforge.model_resolver.service import ModelResolverService
from blockforge.pack_resolver.schemas import AssetCatalog, AssetKind
from blockforge.pack_resolver.service import PackResolver
from blockforge.texture_core.backend import flatten_layers
from blockforge.texture_core.models import TextureInfo, TextureLayer
from blockforge.texture_core.service import TextureLoader

logger = logging.getLogger(__name__)


class BlockPreview(BaseModel):
    """Resolved model plus its geometry; buffers is None when the request went stale."""
    request_id: str
    block_id: str
    properties: Dict[str, str] = Field(default_factory=dict)
    seed: Optional[int] = None
    tint: Optional[List[int]] = None
    is_placeholder: bool = False
    diagnostics: List[str] = Field(default_factory=list)
    texture_ids: List[str] = Field(default_factory=list)
    buffers: Optional[GeometryBuffers] = None


class PreviewSession:
    """
    One live preview. Caches are owned here and invalidated through the
    on_* hooks; nothing is shared between sessions.
    """

    def __init__(
        self,
        catalog: AssetCatalog,
        pack_order: Sequence[str],
        seed: Optional[int] = None,
        boundary: Optional[GeometryComputeBoundary] = None,
    ):
        self.catalog = catalog
        self.seed = seed
        self.packs = PackResolver(catalog, pack_order)
        self.models = ModelResolverService(self.packs)
        self.cache = GeometryCache()
        self.boundary = boundary or GeometryComputeBoundary()
        self.textures = TextureLoader(self.packs)
        self.animation = AnimationStateEngine()
        self.current_model: Optional[ResolvedModel] = None
        self._request_ids = itertools.count(1)

    @property
    def pack_order(self) -> List[str]:
        return list(self.packs.enabled_pack_order)

    # --- Invalidation hooks ---

    def on_pack_order_changed(self, pack_order: Sequence[str]) -> None:
        self.packs = PackResolver(self.catalog, pack_order)
        self.models = ModelResolverService(self.packs)
        self.textures.rebind(self.packs)
        dropped = self.cache.invalidate()
        logger.info("Pack order changed to %s; dropped %d geometries", list(pack_order), dropped)

    def on_asset_changed(self, asset_id: str, kind: AssetKind = AssetKind.BLOCKSTATE) -> None:
        """A catalog payload changed in place. Blockstate edits drop that block; anything else drops all."""
        self.packs = PackResolver(self.catalog, self.packs.enabled_pack_order)
        self.models = ModelResolverService(self.packs)
        self.textures.rebind(self.packs)
        if kind == AssetKind.BLOCKSTATE:
            self.cache.invalidate(asset_id)
        else:
            self.cache.invalidate()
        logger.info("Asset %s (%s) changed", normalize_asset_id(asset_id), kind.value)

    def on_seed_changed(self, seed: Optional[int]) -> None:
        self.seed = seed
        self.cache.invalidate()
        logger.info("Variant seed changed to %s", seed)

    # --- Blocks ---

    def block_state_schema(self, block_id: str) -> BlockStateSchema:
        return self.models.block_state_schema(block_id)

    def resolve(
        self, block_id: str, properties: Optional[Mapping[str, Any]] = None, seed: Optional[int] = None,
    ) -> ResolvedModel:
        """Resolve with schema defaults filled in; failures degrade to the placeholder cube."""
        state: Dict[str, Any] = dict(self.block_state_schema(block_id).default_state)
        state.update(properties or {})
        model = self.models.resolve_or_placeholder(block_id, state, self.seed if seed is None else seed)
        self.current_model = model
        return model

    def _tint_for(self, model: ResolvedModel, tint: Optional[Sequence[int]]) -> Optional[List[int]]:
        if tint is not None:
            return normalize_tint(tint)
        return default_tint_for_block(split_asset_id(model.block_id)[1], model.properties)

    def _preview(self, request_id: str, model: ResolvedModel, tint: Optional[List[int]]) -> BlockPreview:
        return BlockPreview(
            request_id=request_id,
            block_id=model.block_id,
            properties=model.properties,
            seed=model.seed,
            tint=tint,
            is_placeholder=model.is_placeholder,
            diagnostics=list(model.diagnostics),
            texture_ids=model.texture_ids,
        )

    async def preview_block(
        self,
        block_id: str,
        properties: Optional[Mapping[str, Any]] = None,
        seed: Optional[int] = None,
        tint: Optional[Sequence[int]] = None,
    ) -> BlockPreview:
        model = self.resolve(block_id, properties, seed)
        resolved_tint = self._tint_for(model, tint)
        request_id = f"geometry-{next(self._request_ids)}"
        key = GeometryKey.of(model.block_id, model.properties, model.seed, resolved_tint)
        self.cache.set_active_key(key)

        async def factory() -> GeometryBuffers:
            result = await self.boundary.compute(request_id, model, resolved_tint)
            return result.buffers

        preview = self._preview(request_id, model, resolved_tint)
        preview.buffers = await self.cache.get_or_compute(key, factory)
        if preview.buffers is None:
            logger.debug("Preview %s for %s was superseded", request_id, model.block_id)
        return preview

    def preview_block_sync(
        self,
        block_id: str,
        properties: Optional[Mapping[str, Any]] = None,
        seed: Optional[int] = None,
        tint: Optional[Sequence[int]] = None,
    ) -> BlockPreview:
        """Inline path; same output as preview_block, may stall on large models."""
        model = self.resolve(block_id, properties, seed)
        resolved_tint = self._tint_for(model, tint)
        preview = self._preview(f"geometry-{next(self._request_ids)}", model, resolved_tint)
        preview.buffers = compute_model_geometry(model, resolved_tint)
        return preview

    # --- Textures ---

    async def load_texture(self, texture_id: str) -> Optional[TextureInfo]:
        return await self.textures.load(texture_id)

    def cancel_texture(self, texture_id: str) -> bool:
        return self.textures.cancel(texture_id)

    # --- Entities ---

    def entity_composite(self, asset_id: str) -> Optional[EntityCompositeSchema]:
        return resolve_composite(asset_id, self.packs)

    def entity_texture(self, asset_id: str, state: Optional[ControlState] = None) -> bytes:
        """
        Flattened PNG of the base texture with every clone_texture layer painted
        on top (cem_model layers need geometry and are left to the renderer).
        """
        schema = self.entity_composite(asset_id)
        if schema is None:
            return self.textures.load_sync(asset_id).png
        base = self.textures.load_sync(schema.get_base_texture_asset_id(state))
        layers: List[TextureLayer] = []
        for layer in schema.get_active_layers(state):
            if layer.kind != LayerKind.CLONE_TEXTURE:
                continue
            mode = layer.material_mode
            tint = None
            if mode.kind == "tint" and mode.color is not None:
                tint = [int(round(channel * 255)) for channel in (mode.color.r, mode.color.g, mode.color.b)]
            layers.append(TextureLayer(
                texture_id=layer.texture_asset_id,
                png=self.textures.load_sync(layer.texture_asset_id).png,
                blend="additive" if layer.blend == LayerBlend.ADDITIVE else "normal",
                opacity=layer.opacity,
                tint=tint,
                emissive=(mode.intensity or 0.0) if mode.kind == "emissive" else 0.0,
            ))
        return flatten_layers(base.png, layers)

    def apply_entity_controls(self, schema: EntityCompositeSchema, state: Optional[ControlState] = None) -> None:
        """Push a composite's control-driven channel values into the animation state."""
        self.animation.apply_overrides(schema.get_entity_state_overrides(state))

    def close(self) -> None:
        self.textures.cancel_all()
        self.boundary.close()
