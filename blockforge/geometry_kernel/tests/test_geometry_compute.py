"""Tests for Geometry Compute (buffers, UVs, failures, tint)."""
import pytest

from blockforge.geometry_kernel.ops.tint_ops import default_tint_for_block, redstone_power_tint
from blockforge.geometry_kernel.ops.uv_ops import generate_auto_uv, normalize_uv_rect, rotate_uv_corners
from blockforge.geometry_kernel.schemas import FACE_ORDER, FaceDirection
from blockforge.geometry_kernel.service import compute_geometry, compute_model_geometry, summarize
from blockforge.model_resolver.schemas import ResolvedModel, ResolvedModelPart

ALL_FACES = ("down", "up", "north", "south", "east", "west")
STONE = "minecraft:block/stone"


def _cube(frm=(0, 0, 0), to=(16, 16, 16), **face_extra):
    return {"from": list(frm), "to": list(to), "faces": {d: {"texture": "#all", **face_extra} for d in ALL_FACES}}


def _sub(a, b):
    return [a[0] - b[0], a[1] - b[1], a[2] - b[2]]


def _cross(a, b):
    return [a[1] * b[2] - a[2] * b[1], a[2] * b[0] - a[0] * b[2], a[0] * b[1] - a[1] * b[0]]


def _vertex(buffers, i):
    return buffers.positions[i * 3:i * 3 + 3]


class TestCubeBuffers:
    """Full-block cube output."""

    def test_counts_and_face_order(self):
        out = compute_geometry([_cube()], {"all": STONE})
        assert out.vertex_count == 24
        assert len(out.indices) == 36
        assert [g.face for g in out.material_groups] == FACE_ORDER
        assert [g.material_index for g in out.material_groups] == [0, 1, 2, 3, 4, 5]
        assert [g.start for g in out.material_groups] == [0, 6, 12, 18, 24, 30]
        assert all(g.count == 6 and g.texture_id == STONE for g in out.material_groups)

    def test_quad_indices_pattern(self):
        out = compute_geometry([_cube()], {"all": STONE})
        assert out.indices[:12] == [0, 1, 2, 0, 2, 3, 4, 5, 6, 4, 6, 7]

    def test_positions_centered_on_block(self):
        out = compute_geometry([_cube()], {"all": STONE})
        assert min(out.positions) == -0.5
        assert max(out.positions) == 0.5

    def test_winding_is_outward(self):
        out = compute_geometry([_cube()], {"all": STONE})
        for group in out.material_groups:
            a, b, c = (_vertex(out, out.indices[group.start + k]) for k in range(3))
            normal = out.normals[out.indices[group.start] * 3:out.indices[group.start] * 3 + 3]
            face_normal = _cross(_sub(b, a), _sub(c, a))
            assert sum(x * y for x, y in zip(face_normal, normal)) > 0, group.face

    def test_half_slab_scales_and_offsets(self):
        out = compute_geometry([_cube(to=(16, 8, 16))], {"all": STONE})
        ys = out.positions[1::3]
        assert min(ys) == -0.5
        assert max(ys) == 0.0
        assert out.element_transforms[0].center == [0.0, -0.25, 0.0]
        assert out.element_transforms[0].size == [1.0, 0.5, 1.0]


class TestUVMapping:
    """UV unwrap and rotation."""

    def test_auto_uv_projection(self):
        frm, to = (2, 0, 4), (14, 8, 12)
        assert generate_auto_uv(FaceDirection.UP, frm, to) == [2, 4, 14, 12]
        assert generate_auto_uv(FaceDirection.DOWN, frm, to) == [2, 4, 14, 12]
        assert generate_auto_uv(FaceDirection.NORTH, frm, to) == [2, 8, 14, 16]
        assert generate_auto_uv(FaceDirection.SOUTH, frm, to) == [2, 8, 14, 16]
        assert generate_auto_uv(FaceDirection.EAST, frm, to) == [4, 8, 12, 16]
        assert generate_auto_uv(FaceDirection.WEST, frm, to) == [4, 8, 12, 16]

    def test_normalize_flips_vertically(self):
        assert normalize_uv_rect([0, 0, 16, 16]) == [(0.0, 0.0), (1.0, 0.0), (1.0, 1.0), (0.0, 1.0)]
        assert normalize_uv_rect([0, 8, 16, 16])[3] == (0.0, 0.5)

    def test_four_quarter_turns_is_identity(self):
        corners = normalize_uv_rect([1, 2, 9, 14])
        turned = corners
        for _ in range(4):
            turned = rotate_uv_corners(turned, 90)
        assert turned == corners
        assert rotate_uv_corners(corners, 90) != corners
        assert rotate_uv_corners(corners, 180) == rotate_uv_corners(rotate_uv_corners(corners, 90), 90)

    def test_slab_side_uses_projected_rect(self):
        out = compute_geometry([_cube(to=(16, 8, 16))], {"all": STONE})
        south = next(g for g in out.material_groups if g.face == FaceDirection.SOUTH)
        first_vertex = out.indices[south.start]
        uvs = out.uvs[first_vertex * 2:first_vertex * 2 + 8]
        assert uvs == [0.0, 0.0, 1.0, 0.0, 1.0, 0.5, 0.0, 0.5]


class TestFailureIsolation:
    """Per-face and per-element degradation."""

    def test_unresolved_face_keeps_other_faces(self):
        element = _cube()
        element["faces"]["north"] = {"texture": "#missing"}
        out = compute_geometry([element], {"all": STONE})
        assert len(out.material_groups) == 5
        assert FaceDirection.NORTH not in [g.face for g in out.material_groups]
        assert out.skipped_faces[0].face == FaceDirection.NORTH

    def test_malformed_elements_do_not_abort_siblings(self):
        elements = [
            {"from": [0, 0, 0]},
            _cube(),
            {"from": [0, 0, 0], "to": [16, 16, 16], "rotation": {"axis": "x", "angle": 30}, "faces": {}},
            "not-an-element",
        ]
        out = compute_geometry(elements, {"all": STONE})
        assert [f.element_index for f in out.failures] == [0, 2, 3]
        assert all(f.code == "definition.malformed" for f in out.failures)
        assert {g.element_index for g in out.material_groups} == {1}

    def test_bad_face_rotation_is_malformed(self):
        out = compute_geometry([_cube(rotation=45)], {"all": STONE})
        assert len(out.failures) == 1
        assert out.vertex_count == 0


class TestTransformsAndTint:
    """Metadata that is carried rather than baked."""

    def test_element_rotation_is_metadata_only(self):
        plain = _cube(frm=(4, 0, 4), to=(12, 16, 12))
        rotated = dict(plain, rotation={"origin": [8, 8, 8], "axis": "y", "angle": 22.5, "rescale": True})
        a = compute_geometry([plain], {"all": STONE})
        b = compute_geometry([rotated], {"all": STONE})
        assert a.positions == b.positions
        transform = b.element_transforms[0]
        assert transform.rotation_origin == [0.0, 0.0, 0.0]
        assert (transform.rotation_axis, transform.rotation_angle, transform.rescale) == ("y", 22.5, True)

    def test_model_rotation_and_uvlock_pass_through(self):
        out = compute_geometry([_cube()], {"all": STONE}, model_rotation=[90, 180, 0], uvlock=True)
        assert out.model_rotations == [[90, 180, 0]]
        assert out.uvlock == [True]

    def test_tint_applies_to_tinted_faces_only(self):
        element = _cube()
        element["faces"]["up"]["tintindex"] = 0
        out = compute_geometry([element], {"all": STONE}, tint=[10, 20, 30])
        tinted = [g for g in out.material_groups if g.tint_color is not None]
        assert [g.face for g in tinted] == [FaceDirection.UP]
        assert tinted[0].tint_color == [10, 20, 30]
        assert tinted[0].tint_index == 0

    @pytest.mark.parametrize("power,expected", [(15, [255, 51, 0]), (0, [76, 0, 0])])
    def test_redstone_signal_tint(self, power, expected):
        assert redstone_power_tint(power) == expected

    def test_redstone_tint_end_to_end(self):
        element = {"from": [0, 0, 0], "to": [16, 0.25, 16], "faces": {"up": {"texture": "#line", "tintindex": 0}}}
        tint = default_tint_for_block("redstone_wire", {"power": "15"})
        out = compute_geometry([element], {"line": "minecraft:block/redstone_dust_line0"}, tint=tint)
        assert out.material_groups[0].tint_color == [255, 51, 0]


def test_multipart_parts_are_rebased():
    part = ResolvedModelPart(model_id="minecraft:block/p", elements=[_cube()], textures={"all": STONE}, y=90)
    model = ResolvedModel(block_id="minecraft:fence", parts=[part, part.model_copy(update={"y": 180})])
    out = compute_model_geometry(model)
    assert out.vertex_count == 48
    assert out.material_groups[6].start == 36
    assert out.material_groups[6].part_index == 1
    assert min(out.indices[36:]) == 24
    assert out.model_rotations == [[0, 90, 0], [0, 180, 0]]
    assert summarize(out)["textures"] == [STONE]
