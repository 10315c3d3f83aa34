"""Geometry Compute: resolved elements -> render buffers.

One algorithm, shared by the inline path and the async compute boundary.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

from pydantic import ValidationError

from blockforge.common.errors import MalformedDefinition, UnresolvedTextureVariable
from blockforge.config.runtime_config import get_max_texture_indirection
from blockforge.geometry_kernel.ops.face_ops import (
    FACE_NORMALS, QUAD_INDICES, element_center, element_size, face_vertices,
)
from blockforge.geometry_kernel.ops.tint_ops import normalize_tint
from blockforge.geometry_kernel.ops.uv_ops import face_uvs
from blockforge.geometry_kernel.schemas import (
    FACE_ORDER, MINECRAFT_UNIT, ElementFailure, ElementTransform, GeometryBuffers,
    MaterialGroup, ModelElement, SkippedFace,
)
from blockforge.model_resolver.ops.texture_ops import resolve_face_texture
from blockforge.model_resolver.schemas import ResolvedModel

logger = logging.getLogger(__name__)


def _parse_element(raw: Any, element_index: int) -> ModelElement:
    if isinstance(raw, ModelElement):
        return raw
    if not isinstance(raw, dict):
        raise MalformedDefinition(f"Element {element_index} is not an object", details={"element": element_index})
    try:
        element = ModelElement(**raw)
    except (ValidationError, TypeError) as exc:
        raise MalformedDefinition(
            f"Element {element_index} is malformed: {exc}", details={"element": element_index},
        ) from exc
    return element


def _transform_for(element: ModelElement, element_index: int, part_index: int) -> ElementTransform:
    transform = ElementTransform(
        part_index=part_index,
        element_index=element_index,
        center=element_center(element.from_, element.to),
        size=element_size(element.from_, element.to),
        shade=element.shade,
    )
    if element.rotation is not None:
        transform.rotation_origin = [c / MINECRAFT_UNIT - 0.5 for c in element.rotation.origin]
        transform.rotation_axis = element.rotation.axis
        transform.rotation_angle = element.rotation.angle
        transform.rescale = element.rotation.rescale
    return transform


def compute_geometry(
    elements: Sequence[Any],
    textures: Mapping[str, str],
    tint: Optional[Sequence[int]] = None,
    part_index: int = 0,
    model_rotation: Optional[Sequence[int]] = None,
    uvlock: bool = False,
) -> GeometryBuffers:
    """
    Pure transform of one model's elements.
    Malformed elements are recorded in `failures` and skipped; faces whose
    texture variable does not resolve are recorded in `skipped_faces`.
    """
    tint_color = normalize_tint(tint)
    out = GeometryBuffers(
        model_rotations=[list(model_rotation or [0, 0, 0])],
        uvlock=[bool(uvlock)],
    )
    texture_map = dict(textures)
    max_hops = get_max_texture_indirection()

    for element_index, raw in enumerate(elements):
        try:
            element = _parse_element(raw, element_index)
        except MalformedDefinition as exc:
            logger.warning("Skipping element %d of part %d: %s", element_index, part_index, exc.message)
            out.failures.append(ElementFailure(
                part_index=part_index, element_index=element_index, code=exc.code, message=exc.message,
            ))
            continue

        transform = _transform_for(element, element_index, part_index)
        out.element_transforms.append(transform)

        for material_index, direction in enumerate(FACE_ORDER):
            face = element.faces.get(direction)
            if face is None:
                continue
            try:
                texture_id = resolve_face_texture(face.texture, texture_map, max_hops)
            except UnresolvedTextureVariable:
                out.skipped_faces.append(SkippedFace(
                    part_index=part_index, element_index=element_index, face=direction,
                    reason=f"unresolved texture {face.texture}",
                ))
                continue

            base = len(out.positions) // 3
            start = len(out.indices)
            normal = FACE_NORMALS[direction]
            corners = face_vertices(direction, transform.center, transform.size)
            uv_pairs = face_uvs(direction, face.uv, face.rotation, element.from_, element.to)
            for vertex, (u, v) in zip(corners, uv_pairs):
                out.positions.extend(vertex)
                out.normals.extend(normal)
                out.uvs.extend((u, v))
            out.indices.extend(base + i for i in QUAD_INDICES)

            tinted = face.tintindex is not None and face.tintindex >= 0
            out.material_groups.append(MaterialGroup(
                start=start,
                count=len(QUAD_INDICES),
                texture_id=texture_id,
                tint_index=face.tintindex,
                tint_color=list(tint_color) if tinted and tint_color is not None else None,
                face=direction,
                material_index=material_index,
                element_index=element_index,
                part_index=part_index,
            ))

    return out


def merge_buffers(parts: List[GeometryBuffers]) -> GeometryBuffers:
    """Concatenate per-part buffers, rebasing indices and group ranges."""
    merged = GeometryBuffers()
    for part in parts:
        vertex_base = len(merged.positions) // 3
        index_base = len(merged.indices)
        merged.positions.extend(part.positions)
        merged.normals.extend(part.normals)
        merged.uvs.extend(part.uvs)
        merged.indices.extend(i + vertex_base for i in part.indices)
        for group in part.material_groups:
            merged.material_groups.append(group.model_copy(update={"start": group.start + index_base}))
        merged.element_transforms.extend(part.element_transforms)
        merged.failures.extend(part.failures)
        merged.skipped_faces.extend(part.skipped_faces)
        merged.model_rotations.extend(part.model_rotations)
        merged.uvlock.extend(part.uvlock)
    return merged


def compute_model_geometry(model: ResolvedModel, tint: Optional[Sequence[int]] = None) -> GeometryBuffers:
    """All parts of a resolved model (multipart blocks contribute several)."""
    parts = [
        compute_geometry(
            part.elements,
            part.textures,
            tint=tint,
            part_index=index,
            model_rotation=part.rotation,
            uvlock=part.uvlock,
        )
        for index, part in enumerate(model.parts)
    ]
    buffers = merge_buffers(parts)
    logger.debug(
        "Geometry for %s: %d vertices, %d groups, %d failures",
        model.block_id, buffers.vertex_count, len(buffers.material_groups), len(buffers.failures),
    )
    return buffers


def summarize(buffers: GeometryBuffers) -> Dict[str, Any]:
    """Compact description for logs and the HTTP surface."""
    return {
        "vertex_count": buffers.vertex_count,
        "index_count": len(buffers.indices),
        "material_groups": len(buffers.material_groups),
        "textures": sorted({group.texture_id for group in buffers.material_groups}),
        "failures": [failure.model_dump(mode="json") for failure in buffers.failures],
        "skipped_faces": len(buffers.skipped_faces),
        "digest": buffers.digest(),
    }
