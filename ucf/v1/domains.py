"""
Digest domains.

Each schema is permanently bound to exactly one of these; moving a schema to
a new domain is a breaking change. The shared core domain covers protocol
messages; dedicated domains isolate asset payloads and evidence records.
"""

from __future__ import annotations

CORE = "ucf-core"

ASSET_MORPH = "UCF:ASSET:MORPH"
ASSET_CHANNEL_PARAMS = "UCF:ASSET:CHANNEL_PARAMS"
ASSET_SYN_PARAMS = "UCF:ASSET:SYN_PARAMS"
ASSET_CONNECTIVITY = "UCF:ASSET:CONNECTIVITY"
ASSET_MANIFEST = "UCF:ASSET:MANIFEST"

MC_CONFIG = "UCF:HASH:MC_CONFIG"

# Evidence domains with no schema in this profile yet.
PROPOSAL_EVIDENCE = "UCF:PROPOSAL_EVIDENCE"
PROPOSAL_PAYLOAD = "UCF:PROPOSAL_PAYLOAD"
ACTIVATION_EVIDENCE = "UCF:ACTIVATION_EVIDENCE"
TRACE_RUN_EVIDENCE = "UCF:TRACE_RUN_EVIDENCE"

ALL_DOMAINS = frozenset(
    {
        CORE,
        ASSET_MORPH,
        ASSET_CHANNEL_PARAMS,
        ASSET_SYN_PARAMS,
        ASSET_CONNECTIVITY,
        ASSET_MANIFEST,
        MC_CONFIG,
        PROPOSAL_EVIDENCE,
        PROPOSAL_PAYLOAD,
        ACTIVATION_EVIDENCE,
        TRACE_RUN_EVIDENCE,
    }
)
