"""
Asset digests and the manifest that pins one version of each asset kind.

`AssetDigest.digest` is the payload digest of the asset it describes (a
`*SetPayload` self-digest); `prev_digest` names the payload it replaced.
`AssetManifest.manifest_digest` is the manifest's own self-digest.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import ClassVar, Optional

from ..schema.message import Kind, Message, pb
from .common import Digest32, Ref


class AssetKind(IntEnum):
    ASSET_KIND_UNSPECIFIED = 0
    ASSET_KIND_MORPHOLOGY_SET = 1
    ASSET_KIND_CHANNEL_PARAMS_SET = 2
    ASSET_KIND_SYNAPSE_PARAMS_SET = 3
    ASSET_KIND_CONNECTIVITY_GRAPH = 4


@dataclass
class AssetDigest(Message):
    SCHEMA_ID: ClassVar[str] = "ucf.v1.AssetDigest"
    kind: int = pb(1, Kind.ENUM, enum=AssetKind)
    version: int = pb(2, Kind.UINT32)
    digest: Optional[Digest32] = pb(3, Kind.MESSAGE, message=Digest32)
    created_at_ms: int = pb(4, Kind.UINT64)
    prev_digest: Optional[Digest32] = pb(5, Kind.MESSAGE, message=Digest32)
    proof_receipt_ref: Optional[Ref] = pb(6, Kind.MESSAGE, message=Ref)


@dataclass
class AssetManifest(Message):
    SCHEMA_ID: ClassVar[str] = "ucf.v1.AssetManifest"
    manifest_version: int = pb(1, Kind.UINT32)
    manifest_digest: Optional[Digest32] = pb(2, Kind.MESSAGE, message=Digest32)
    morphology: Optional[AssetDigest] = pb(3, Kind.MESSAGE, message=AssetDigest)
    channel_params: Optional[AssetDigest] = pb(4, Kind.MESSAGE, message=AssetDigest)
    synapse_params: Optional[AssetDigest] = pb(5, Kind.MESSAGE, message=AssetDigest)
    connectivity: Optional[AssetDigest] = pb(6, Kind.MESSAGE, message=AssetDigest)
    created_at_ms: int = pb(7, Kind.UINT64)
    proof_receipt_ref: Optional[Ref] = pb(8, Kind.MESSAGE, message=Ref)
