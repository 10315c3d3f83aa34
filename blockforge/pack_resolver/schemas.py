"""Pack Resolver Schemas."""
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field

from blockforge.config.runtime_config import get_default_pack_id


class AssetKind(str, Enum):
    TEXTURE = "texture"
    BLOCKSTATE = "blockstate"
    MODEL = "model"


class PackDescriptor(BaseModel):
    """Identity of a data source. Ordering comes from the enabled list, not from here."""
    id: str
    name: str = ""
    description: str = ""
    is_default: bool = False


class PackContents(BaseModel):
    """Raw payloads a single pack provides, keyed by namespaced asset id."""
    descriptor: PackDescriptor
    textures: Dict[str, bytes] = Field(default_factory=dict)
    blockstates: Dict[str, Dict[str, Any]] = Field(default_factory=dict)
    models: Dict[str, Dict[str, Any]] = Field(default_factory=dict)

    def assets(self, kind: AssetKind) -> Dict[str, Any]:
        if kind == AssetKind.TEXTURE:
            return self.textures
        if kind == AssetKind.BLOCKSTATE:
            return self.blockstates
        return self.models


class AssetCatalog(BaseModel):
    """Flat catalog handed over by the storage layer."""
    packs: Dict[str, PackContents] = Field(default_factory=dict)
    default_pack_id: str = Field(default_factory=get_default_pack_id)

    def add_pack(self, contents: PackContents) -> None:
        self.packs[contents.descriptor.id] = contents

    @property
    def default_pack(self) -> Optional[PackContents]:
        return self.packs.get(self.default_pack_id)

    def asset_ids(self, kind: AssetKind) -> List[str]:
        ids = set()
        for pack in self.packs.values():
            ids.update(pack.assets(kind).keys())
        return sorted(ids)


class WinnerMap(BaseModel):
    """Owning pack per asset id, split by asset kind (ids overlap across kinds)."""
    textures: Dict[str, str] = Field(default_factory=dict)
    blockstates: Dict[str, str] = Field(default_factory=dict)
    models: Dict[str, str] = Field(default_factory=dict)
    pack_order: List[str] = Field(default_factory=list)

    def for_kind(self, kind: AssetKind) -> Dict[str, str]:
        if kind == AssetKind.TEXTURE:
            return self.textures
        if kind == AssetKind.BLOCKSTATE:
            return self.blockstates
        return self.models

    def owner(self, kind: AssetKind, asset_id: str) -> Optional[str]:
        return self.for_kind(kind).get(asset_id)
