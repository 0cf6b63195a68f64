"""
Built-in sample cases behind the golden vectors in `ucf/testvectors/`.

Each case builds the message a producer would author, with the values the
UCF reference fixtures use. Self-digest fields hold whatever the producer
last wrote there; canonical bytes zero them, so the goldens pin that too.
The SEP chain is the exception to taking values as authored: each event's
`prev_event_digest` and the seal's `final_event_digest` are computed live, so
the shipped chain verifies link by link.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from ..digest.engine import message_digest
from ..schema.message import Message
from ..schema.registry import SchemaEntry, SchemaRegistry, default_registry
from ..utils.hash import ZERO32
from ..v1 import (
    AssetDigest,
    AssetKind,
    AssetManifest,
    CanonicalIntent,
    Channel,
    ChannelParams,
    ChannelParamsSetPayload,
    Compartment,
    CompartmentKind,
    CompletenessReport,
    CompletenessStatus,
    ConnEdge,
    ConnectivityGraphPayload,
    ConstraintsDelta,
    DataClass,
    DecisionForm,
    Digest32,
    LabelKv,
    MicrocircuitConfigEvidence,
    MicroModule,
    ModChannel,
    MorphNeuron,
    MorphologySetPayload,
    MsgType,
    PolicyDecision,
    PvgsReceipt,
    QueryParams,
    ReasonCodes,
    ReceiptStatus,
    Ref,
    RiskLevel,
    SepEvent,
    SepEventType,
    SessionSeal,
    Signature,
    SynapseParams,
    SynapseParamsSetPayload,
    SynKind,
    SynType,
    UcfEnvelope,
)

SEP_CHAIN = "sep-session-9000"
SESSION_ID = "session-9000"


def _fill(byte: int, n: int = 32) -> Digest32:
    return Digest32(value=bytes([byte]) * n)


def _digest_of(build: Callable[[], Message]) -> bytes:
    msg = build()
    return message_digest(msg, default_registry().for_type(type(msg)))


def _ed25519(signer: bytes, signature: bytes) -> Signature:
    return Signature(algorithm="ed25519", signer=signer, signature=signature)


# ---------------------------------------------------------------------------
# Core protocol messages
# ---------------------------------------------------------------------------


def reason_codes_basic() -> ReasonCodes:
    return ReasonCodes(codes=["deterministic", "coverage"])


def ucf_envelope_policy_decision() -> UcfEnvelope:
    return UcfEnvelope(
        epoch_id="epoch-1",
        nonce=bytes([0x01, 0x02, 0x03, 0x04]),
        signature=_ed25519(bytes([0xAA, 0xBB, 0xCC]), bytes([0x11, 0x22, 0x33, 0x44])),
        payload_digest=_fill(0x10),
        msg_type=MsgType.MSG_TYPE_POLICY_DECISION,
        payload=bytes.fromhex("deadbeef"),
    )


def canonical_intent_query() -> CanonicalIntent:
    return CanonicalIntent(
        intent_id="intent-123",
        channel=Channel.CHANNEL_REALTIME,
        risk_level=RiskLevel.RISK_LEVEL_LOW,
        data_class=DataClass.DATA_CLASS_PUBLIC,
        subject=Ref(uri="did:example:subject", label="primary"),
        reason_codes=ReasonCodes(codes=["baseline", "query"]),
        query=QueryParams(query="select * from controls", selectors=["bar", "foo"]),
    )


def policy_decision() -> PolicyDecision:
    return PolicyDecision(
        decision=DecisionForm.DECISION_FORM_REQUIRE_APPROVAL,
        reason_codes=ReasonCodes(codes=["missing-proof", "scope-limited"]),
        constraints=ConstraintsDelta(
            constraints_added=["geo-fence", "mfa-required"],
            constraints_removed=["legacy-exception"],
        ),
    )


def pvgs_receipt() -> PvgsReceipt:
    return PvgsReceipt(
        status=ReceiptStatus.RECEIPT_STATUS_ACCEPTED,
        program_digest=Digest32(value=bytes(range(32))),
        proof_digest=_fill(0xAA),
        signer=_ed25519(bytes([0x01, 0x02, 0x03, 0x04]), bytes([0x05, 0x06, 0x07, 0x08])),
    )


# ---------------------------------------------------------------------------
# Asset records and biophysical payloads
# ---------------------------------------------------------------------------


def asset_digest_morphology_v1() -> AssetDigest:
    return AssetDigest(
        kind=AssetKind.ASSET_KIND_MORPHOLOGY_SET,
        version=1,
        digest=_fill(0x10),
        created_at_ms=1_700_100_123,
        prev_digest=_fill(0x20),
        proof_receipt_ref=Ref(uri="proof://assets/morphology/receipt-1", label="morphology-proof"),
    )


def asset_manifest_v1() -> AssetManifest:
    return AssetManifest(
        manifest_version=1,
        manifest_digest=_fill(0x99),
        morphology=AssetDigest(
            kind=AssetKind.ASSET_KIND_MORPHOLOGY_SET,
            version=1,
            digest=_fill(0x01),
            created_at_ms=1_700_100_500,
        ),
        channel_params=AssetDigest(
            kind=AssetKind.ASSET_KIND_CHANNEL_PARAMS_SET,
            version=2,
            digest=_fill(0x02),
            created_at_ms=1_700_100_600,
            prev_digest=_fill(0x12),
        ),
        synapse_params=AssetDigest(
            kind=AssetKind.ASSET_KIND_SYNAPSE_PARAMS_SET,
            version=3,
            digest=_fill(0x03),
            created_at_ms=1_700_100_700,
            proof_receipt_ref=Ref(uri="proof://assets/synapse/receipt-9", label="synapse-proof"),
        ),
        connectivity=AssetDigest(
            kind=AssetKind.ASSET_KIND_CONNECTIVITY_GRAPH,
            version=4,
            digest=_fill(0x04),
            created_at_ms=1_700_100_800,
            prev_digest=_fill(0x14),
        ),
        created_at_ms=1_700_100_900,
        proof_receipt_ref=Ref(uri="proof://assets/manifest/receipt-1", label="manifest-proof"),
    )


def biophys_morphology_set_v1() -> MorphologySetPayload:
    soma, dendrite, axon = (
        CompartmentKind.COMPARTMENT_KIND_SOMA,
        CompartmentKind.COMPARTMENT_KIND_DENDRITE,
        CompartmentKind.COMPARTMENT_KIND_AXON,
    )
    return MorphologySetPayload(
        version=1,
        neurons=[
            MorphNeuron(
                neuron_id=1,
                compartments=[
                    Compartment(comp_id=1, kind=soma, length_um=20, diameter_um=15),
                    Compartment(comp_id=2, parent_comp_id=1, kind=dendrite, length_um=120, diameter_um=4),
                ],
                labels=[LabelKv(k="pool", v="alpha"), LabelKv(k="type", v="pyramidal")],
            ),
            MorphNeuron(
                neuron_id=2,
                compartments=[
                    Compartment(comp_id=1, kind=soma, length_um=18, diameter_um=12),
                    Compartment(comp_id=3, parent_comp_id=1, kind=axon, length_um=200, diameter_um=2),
                ],
                labels=[LabelKv(k="pool", v="beta")],
            ),
        ],
        payload_digest=_fill(0xAB),
    )


def biophys_channel_params_set_v1() -> ChannelParamsSetPayload:
    return ChannelParamsSetPayload(
        version=1,
        params=[
            ChannelParams(neuron_id=1, comp_id=1, leak_g=1000, na_g=2000, k_g=1500, ca_g=800, e_rev_leak=-65),
            ChannelParams(neuron_id=2, comp_id=1, leak_g=900, na_g=1800, k_g=1400),
        ],
        payload_digest=_fill(0xBC),
    )


def biophys_synapse_params_set_v1() -> SynapseParamsSetPayload:
    return SynapseParamsSetPayload(
        version=1,
        params=[
            SynapseParams(
                syn_param_id=10,
                syn_type=SynType.SYN_TYPE_EXC,
                syn_kind=SynKind.SYN_KIND_AMPA,
                g_max_q=65_536,
                e_rev_mv=0,
                tau_decay_steps=50,
                stp_u_q=32_768,
                tau_rec_steps=200,
                tau_fac_steps=100,
                mod_channel=ModChannel.MOD_CHANNEL_NA,
            ),
            SynapseParams(
                syn_param_id=11,
                syn_type=SynType.SYN_TYPE_INH,
                syn_kind=SynKind.SYN_KIND_GABA,
                g_max_q=32_768,
                e_rev_mv=-70,
                tau_decay_steps=60,
                stp_u_q=16_384,
                tau_rec_steps=150,
                tau_fac_steps=80,
                mod_channel=ModChannel.MOD_CHANNEL_NONE,
            ),
        ],
        payload_digest=_fill(0xCD),
    )


def biophys_connectivity_graph_v1() -> ConnectivityGraphPayload:
    return ConnectivityGraphPayload(
        version=1,
        edges=[
            ConnEdge(pre=1, post=2, post_compartment=1, syn_param_id=10, delay_steps=2),
            ConnEdge(pre=1, post=3, post_compartment=1, syn_param_id=11, delay_steps=3),
        ],
        payload_digest=_fill(0xDE),
    )


# ---------------------------------------------------------------------------
# SEP event chain and session records
# ---------------------------------------------------------------------------


def sep_event_chain_1() -> SepEvent:
    return SepEvent(
        event_id="evt-1",
        session_id=SESSION_ID,
        event_type=SepEventType.SEP_EVENT_TYPE_INTENT,
        object_ref=Ref(uri="intent://primary/42", label="intent"),
        reason_codes=ReasonCodes(codes=["init"]),
        timestamp_ms=1_700_002_000,
        prev_event_digest=Digest32(value=ZERO32),
        event_digest=_fill(0x10),
        attestation_sig=_ed25519(b"\x01", b"\x02"),
        epoch_id=100,
    )


def sep_event_chain_2() -> SepEvent:
    return SepEvent(
        event_id="evt-2",
        session_id=SESSION_ID,
        event_type=SepEventType.SEP_EVENT_TYPE_DECISION,
        object_ref=Ref(uri="decision://approval", label="decision"),
        reason_codes=ReasonCodes(codes=["policy"]),
        timestamp_ms=1_700_002_500,
        prev_event_digest=Digest32(value=_digest_of(sep_event_chain_1)),
        event_digest=_fill(0x20),
        attestation_sig=_ed25519(b"\x03", b"\x04"),
        epoch_id=100,
    )


def sep_event_chain_3() -> SepEvent:
    return SepEvent(
        event_id="evt-3",
        session_id=SESSION_ID,
        event_type=SepEventType.SEP_EVENT_TYPE_OUTCOME,
        object_ref=Ref(uri="outcome://result", label="outcome"),
        reason_codes=ReasonCodes(codes=["success"]),
        timestamp_ms=1_700_003_000,
        prev_event_digest=Digest32(value=_digest_of(sep_event_chain_2)),
        event_digest=_fill(0x30),
        attestation_sig=_ed25519(b"\x05", b"\x06"),
        epoch_id=101,
    )


def session_seal() -> SessionSeal:
    return SessionSeal(
        seal_id="seal-9000",
        seal_digest=_fill(0xAB),
        session_id=SESSION_ID,
        final_event_digest=Digest32(value=_digest_of(sep_event_chain_3)),
        final_record_digest=_fill(0xCD),
        proof_receipt_ref=Ref(uri="proof://session/receipt", label="proof"),
        created_at_ms=1_700_003_500,
    )


def completeness_report() -> CompletenessReport:
    return CompletenessReport(
        report_id="comp-01",
        report_digest=_fill(0xEF),
        session_id=SESSION_ID,
        status=CompletenessStatus.COMPLETENESS_STATUS_FAIL,
        missing_nodes=[Ref(uri="sep://evt/missing", label="missing")],
        missing_edges=["evt-2->evt-4", "evt-1->evt-3"],
        reason_codes=ReasonCodes(codes=["missing-node", "edge-gap"]),
        proof_receipt_ref=Ref(uri="proof://completeness/receipt", label="proof"),
    )


# ---------------------------------------------------------------------------
# Microcircuit configuration evidence
# ---------------------------------------------------------------------------


def microcircuit_config_lc_v1() -> MicrocircuitConfigEvidence:
    return MicrocircuitConfigEvidence(
        module=MicroModule.MICRO_MODULE_LC,
        config_version=1,
        config_digest=_fill(0x10),
        created_at_ms=1_700_123_456,
        proof_receipt_ref=Ref(uri="proof://microcircuit/config/receipt-1", label="receipt"),
        attestation_sig=_ed25519(bytes([0x01, 0x02, 0x03, 0x04]), bytes([0x05, 0x06, 0x07, 0x08])),
        attestation_key_id="attest-key-1",
    )


def microcircuit_config_sn_v1() -> MicrocircuitConfigEvidence:
    return MicrocircuitConfigEvidence(
        module=MicroModule.MICRO_MODULE_SN,
        config_version=1,
        config_digest=_fill(0x22),
        created_at_ms=1_700_123_999,
        prev_config_digest=_fill(0x11),
    )


def microcircuit_config_hpa_v1() -> MicrocircuitConfigEvidence:
    return MicrocircuitConfigEvidence(
        module=MicroModule.MICRO_MODULE_HPA,
        config_version=1,
        config_digest=_fill(0x33),
        created_at_ms=1_700_124_111,
        prev_config_digest=_fill(0x22),
        proof_receipt_ref=Ref(uri="proof://microcircuit/config/receipt-hpa-1", label="receipt"),
        attestation_key_id="attest-key-hpa-1",
    )


def mc_cfg_hpa() -> MicrocircuitConfigEvidence:
    return MicrocircuitConfigEvidence(
        module=MicroModule.MICRO_MODULE_HPA,
        config_version=1,
        config_digest=_fill(0x44),
        created_at_ms=1_700_125_000,
    )


# ---------------------------------------------------------------------------
# Case table
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SampleCase:
    name: str
    build: Callable[[], Message]
    fmt: str = "hex"
    chain: Optional[str] = None
    seq: Optional[int] = None

    def entry(self, registry: Optional[SchemaRegistry] = None) -> SchemaEntry:
        return (registry or default_registry()).for_type(type(self.build()))


def _case(build: Callable[[], Message], **kw) -> SampleCase:
    return SampleCase(name=build.__name__, build=build, **kw)


SAMPLE_CASES: List[SampleCase] = sorted(
    [
        _case(asset_digest_morphology_v1),
        _case(asset_manifest_v1),
        _case(biophys_channel_params_set_v1),
        _case(biophys_connectivity_graph_v1),
        _case(biophys_morphology_set_v1),
        _case(biophys_synapse_params_set_v1),
        _case(canonical_intent_query),
        _case(completeness_report),
        _case(mc_cfg_hpa, fmt="bin"),
        _case(microcircuit_config_hpa_v1),
        _case(microcircuit_config_lc_v1),
        _case(microcircuit_config_sn_v1),
        _case(policy_decision),
        _case(pvgs_receipt),
        _case(reason_codes_basic),
        _case(sep_event_chain_1, chain=SEP_CHAIN, seq=1),
        _case(sep_event_chain_2, chain=SEP_CHAIN, seq=2),
        _case(sep_event_chain_3, chain=SEP_CHAIN, seq=3),
        _case(session_seal),
        _case(ucf_envelope_policy_decision),
    ],
    key=lambda c: c.name,
)

SAMPLES_BY_NAME: Dict[str, SampleCase] = {c.name: c for c in SAMPLE_CASES}


__all__ = ["SampleCase", "SAMPLE_CASES", "SAMPLES_BY_NAME", "SEP_CHAIN"]
