"""Model Resolver Service: blockstate -> resolved model parts."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional

from blockforge.common.asset_ids import PLACEHOLDER_MODEL_ID, PLACEHOLDER_TEXTURE_ID, normalize_asset_id
from blockforge.common.errors import BlockforgeError, MalformedDefinition, NotFound, UnresolvedTextureVariable
from blockforge.config.runtime_config import get_max_parent_depth, get_max_texture_indirection
from blockforge.model_resolver.ops.inheritance_ops import merge_model_chain
from blockforge.model_resolver.ops.multipart_ops import select_multipart
from blockforge.model_resolver.ops.schema_ops import build_block_state_schema
from blockforge.model_resolver.ops.texture_ops import resolve_face_texture, resolve_texture_variables
from blockforge.model_resolver.ops.variant_ops import (
    make_variant_key, normalize_candidates, pick_weighted, select_variant, stringify_value,
)
from blockforge.model_resolver.schemas import (
    BlockStateSchema, ResolvedModel, ResolvedModelPart, VariantModelRef,
)
from blockforge.pack_resolver.service import PackResolver

logger = logging.getLogger(__name__)

_PLACEHOLDER_FACES = ("north", "south", "east", "west", "up", "down")


def _unresolved_face_refs(elements: List[Any], textures: Dict[str, str]) -> List[str]:
    missing = []
    for element in elements:
        faces = element.get("faces") if isinstance(element, dict) else None
        if not isinstance(faces, dict):
            continue
        for face in faces.values():
            ref = face.get("texture") if isinstance(face, dict) else None
            if not isinstance(ref, str) or not ref.startswith("#"):
                continue
            try:
                resolve_face_texture(ref, textures)
            except UnresolvedTextureVariable:
                missing.append(ref[1:])
    return missing


def placeholder_part() -> ResolvedModelPart:
    """Full unit cube textured with the checkerboard placeholder."""
    faces = {direction: {"texture": "#missing"} for direction in _PLACEHOLDER_FACES}
    return ResolvedModelPart(
        model_id=PLACEHOLDER_MODEL_ID,
        elements=[{"from": [0, 0, 0], "to": [16, 16, 16], "faces": faces}],
        textures={"missing": PLACEHOLDER_TEXTURE_ID, "particle": PLACEHOLDER_TEXTURE_ID},
        parent_chain=[PLACEHOLDER_MODEL_ID],
    )


def placeholder_model(block_id: str, reason: str, properties: Optional[Mapping[str, Any]] = None) -> ResolvedModel:
    return ResolvedModel(
        block_id=block_id,
        properties={k: stringify_value(v) for k, v in (properties or {}).items()},
        parts=[placeholder_part()],
        is_placeholder=True,
        diagnostics=[reason],
    )


class ModelResolverService:
    """
    Stateless resolution over a PackResolver.
    Raises the error taxonomy; callers that want a preview use resolve_or_placeholder.
    """

    def __init__(self, packs: PackResolver):
        self.packs = packs

    # --- Public API ---

    def resolve_block_state(
        self,
        block_id: str,
        properties: Optional[Mapping[str, Any]] = None,
        seed: Optional[int] = None,
    ) -> ResolvedModel:
        block_id = normalize_asset_id(block_id)
        blockstate = self.packs.lookup_blockstate(block_id)
        state = {name: stringify_value(value) for name, value in (properties or {}).items()}

        refs: List[VariantModelRef]
        variant_key: Optional[str] = None
        if isinstance(blockstate.get("variants"), dict):
            variant_key, entry = select_variant(blockstate["variants"], state, block_id)
            refs = [pick_weighted(normalize_candidates(entry, block_id), seed)]
        elif isinstance(blockstate.get("multipart"), list):
            refs = select_multipart(blockstate["multipart"], state, seed, block_id)
        else:
            raise MalformedDefinition("Blockstate has neither variants nor multipart", asset_id=block_id)

        logger.debug(
            "Resolved %s [%s] seed=%s -> %s", block_id, make_variant_key(state), seed, [ref.model for ref in refs],
        )
        parts = [self.resolve_model_ref(ref) for ref in refs]
        model = ResolvedModel(block_id=block_id, properties=state, seed=seed, parts=parts, variant_key=variant_key)
        for part in parts:
            for name in part.unresolved_textures:
                model.diagnostics.append(f"{part.model_id}: unresolved texture variable #{name}")
        return model

    def resolve_model_ref(self, ref: VariantModelRef) -> ResolvedModelPart:
        merged = merge_model_chain(ref.model, self.packs.lookup_model, max_depth=get_max_parent_depth())
        textures, unresolved = resolve_texture_variables(merged.textures, get_max_texture_indirection())
        unresolved = sorted(set(unresolved) | set(_unresolved_face_refs(merged.elements, textures)))
        return ResolvedModelPart(
            model_id=merged.model_id,
            x=ref.x,
            y=ref.y,
            z=ref.z,
            uvlock=ref.uvlock,
            elements=merged.elements,
            textures=textures,
            unresolved_textures=unresolved,
            ambientocclusion=merged.ambientocclusion,
            parent_chain=merged.parent_chain,
        )

    def resolve_model(self, model_id: str) -> ResolvedModelPart:
        """Resolve a bare model id (item previews, direct model inspection)."""
        return self.resolve_model_ref(VariantModelRef(model=model_id))

    def resolve_or_placeholder(
        self,
        block_id: str,
        properties: Optional[Mapping[str, Any]] = None,
        seed: Optional[int] = None,
    ) -> ResolvedModel:
        """Degrading variant of resolve_block_state: failures become the placeholder cube."""
        try:
            return self.resolve_block_state(block_id, properties, seed)
        except BlockforgeError as exc:
            logger.warning("Falling back to placeholder for %s: %s (%s)", block_id, exc.message, exc.code)
            return placeholder_model(normalize_asset_id(block_id), f"{exc.code}: {exc.message}", properties)

    def block_state_schema(self, block_id: str) -> BlockStateSchema:
        block_id = normalize_asset_id(block_id)
        try:
            blockstate: Dict[str, Any] = self.packs.lookup_blockstate(block_id)
        except NotFound:
            blockstate = {}
        return build_block_state_schema(blockstate, block_id)
