"""
UCF — ucf.v1
------------

Built-in `ucf.v1` schemas and the registry entries binding each to its
digest domain and normalization policy.

Set-like fields are sorted before encoding; ordered fields keep authored
order. Self-digest fields are zeroed for hashing. Entries are listed in the
order they were introduced; `SchemaRegistry.entries()` sorts by key.
"""

from __future__ import annotations

from typing import Tuple

from ..schema.policy import NormalizationPolicy, SetField
from ..schema.registry import SchemaEntry
from . import domains
from .assets import AssetDigest, AssetKind, AssetManifest
from .biophys import (
    ChannelParams,
    ChannelParamsSetPayload,
    Compartment,
    CompartmentKind,
    ConnEdge,
    ConnectivityGraphPayload,
    LabelKv,
    MorphNeuron,
    ModChannel,
    MorphologySetPayload,
    SynapseParams,
    SynapseParamsSetPayload,
    SynKind,
    SynType,
)
from .common import Digest32, ReasonCodes, Ref, Signature
from .envelope import MsgType, UcfEnvelope
from .intent import CanonicalIntent, Channel, DataClass, QueryParams, RiskLevel
from .microcircuit import MicrocircuitConfigEvidence, MicroModule
from .policy import ConstraintsDelta, DecisionForm, PolicyDecision
from .pvgs import PvgsReceipt, ReceiptStatus
from .sep import CompletenessReport, CompletenessStatus, SepEvent, SepEventType, SessionSeal

SCHEMA_VERSION = 1

_PAYLOAD_DIGEST = "payload_digest.value"

SCHEMAS: Tuple[SchemaEntry, ...] = (
    SchemaEntry(
        domains.CORE,
        "ucf.v1.ReasonCodes",
        SCHEMA_VERSION,
        ReasonCodes,
        NormalizationPolicy(set_fields=(SetField("codes"),)),
    ),
    SchemaEntry(domains.CORE, "ucf.v1.UcfEnvelope", SCHEMA_VERSION, UcfEnvelope),
    SchemaEntry(
        domains.CORE,
        "ucf.v1.PolicyDecision",
        SCHEMA_VERSION,
        PolicyDecision,
        NormalizationPolicy(
            set_fields=(
                SetField("reason_codes.codes"),
                SetField("constraints.constraints_added"),
                SetField("constraints.constraints_removed"),
            )
        ),
    ),
    SchemaEntry(domains.CORE, "ucf.v1.PVGSReceipt", SCHEMA_VERSION, PvgsReceipt),
    SchemaEntry(
        domains.CORE,
        "ucf.v1.CanonicalIntent",
        SCHEMA_VERSION,
        CanonicalIntent,
        NormalizationPolicy(
            set_fields=(SetField("reason_codes.codes"),),
            # selectors are evaluated in order
            ordered_fields=("query.selectors",),
        ),
    ),
    SchemaEntry(domains.ASSET_MORPH, "ucf.v1.AssetDigest", SCHEMA_VERSION, AssetDigest),
    SchemaEntry(
        domains.ASSET_MANIFEST,
        "ucf.v1.AssetManifest",
        SCHEMA_VERSION,
        AssetManifest,
        NormalizationPolicy(self_digest="manifest_digest.value"),
    ),
    SchemaEntry(
        domains.ASSET_MORPH,
        "ucf.v1.MorphologySetPayload",
        SCHEMA_VERSION,
        MorphologySetPayload,
        NormalizationPolicy(
            set_fields=(
                SetField("neurons", key=("neuron_id",)),
                SetField("neurons.compartments", key=("comp_id",)),
                SetField("neurons.labels", key=("k",)),
            ),
            self_digest=_PAYLOAD_DIGEST,
        ),
    ),
    SchemaEntry(
        domains.ASSET_CHANNEL_PARAMS,
        "ucf.v1.ChannelParamsSetPayload",
        SCHEMA_VERSION,
        ChannelParamsSetPayload,
        NormalizationPolicy(
            set_fields=(SetField("params", key=("neuron_id", "comp_id")),),
            self_digest=_PAYLOAD_DIGEST,
        ),
    ),
    SchemaEntry(
        domains.ASSET_SYN_PARAMS,
        "ucf.v1.SynapseParamsSetPayload",
        SCHEMA_VERSION,
        SynapseParamsSetPayload,
        NormalizationPolicy(
            set_fields=(SetField("params", key=("syn_param_id",)),),
            self_digest=_PAYLOAD_DIGEST,
        ),
    ),
    SchemaEntry(
        domains.ASSET_CONNECTIVITY,
        "ucf.v1.ConnectivityGraphPayload",
        SCHEMA_VERSION,
        ConnectivityGraphPayload,
        NormalizationPolicy(
            set_fields=(
                SetField(
                    "edges",
                    key=("pre", "post", "post_compartment", "syn_param_id", "delay_steps"),
                ),
            ),
            self_digest=_PAYLOAD_DIGEST,
        ),
    ),
    SchemaEntry(
        domains.CORE,
        "ucf.v1.SepEvent",
        SCHEMA_VERSION,
        SepEvent,
        NormalizationPolicy(
            set_fields=(SetField("reason_codes.codes"),),
            self_digest="event_digest.value",
            prev_digest="prev_event_digest.value",
        ),
    ),
    SchemaEntry(
        domains.CORE,
        "ucf.v1.SessionSeal",
        SCHEMA_VERSION,
        SessionSeal,
        NormalizationPolicy(self_digest="seal_digest.value"),
    ),
    SchemaEntry(
        domains.CORE,
        "ucf.v1.CompletenessReport",
        SCHEMA_VERSION,
        CompletenessReport,
        NormalizationPolicy(
            set_fields=(
                SetField("missing_nodes", key=("uri",)),
                SetField("reason_codes.codes"),
            ),
            # edges are listed in the order the gaps were found
            ordered_fields=("missing_edges",),
            self_digest="report_digest.value",
        ),
    ),
    SchemaEntry(
        domains.MC_CONFIG,
        "ucf.v1.MicrocircuitConfigEvidence",
        SCHEMA_VERSION,
        MicrocircuitConfigEvidence,
    ),
)

__all__ = [
    "SCHEMAS",
    "SCHEMA_VERSION",
    "domains",
    # common
    "Digest32",
    "Ref",
    "ReasonCodes",
    "Signature",
    # envelope / policy / pvgs / intent
    "MsgType",
    "UcfEnvelope",
    "DecisionForm",
    "ConstraintsDelta",
    "PolicyDecision",
    "ReceiptStatus",
    "PvgsReceipt",
    "Channel",
    "RiskLevel",
    "DataClass",
    "QueryParams",
    "CanonicalIntent",
    # assets / biophys
    "AssetKind",
    "AssetDigest",
    "AssetManifest",
    "CompartmentKind",
    "SynType",
    "SynKind",
    "ModChannel",
    "LabelKv",
    "Compartment",
    "MorphNeuron",
    "MorphologySetPayload",
    "ChannelParams",
    "ChannelParamsSetPayload",
    "SynapseParams",
    "SynapseParamsSetPayload",
    "ConnEdge",
    "ConnectivityGraphPayload",
    # sep / microcircuit
    "SepEventType",
    "CompletenessStatus",
    "SepEvent",
    "SessionSeal",
    "CompletenessReport",
    "MicroModule",
    "MicrocircuitConfigEvidence",
]
