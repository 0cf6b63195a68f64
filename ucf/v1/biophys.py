"""
Biophysical asset payloads: morphology, channel parameters, synapse
parameters, connectivity. Every payload carries its own `payload_digest`
(self-digest) and lists its records as set-like repeated fields, so two
producers holding the same records in different order agree on the digest.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import ClassVar, List, Optional

from ..schema.message import Kind, Message, pb
from .common import Digest32


class CompartmentKind(IntEnum):
    COMPARTMENT_KIND_UNSPECIFIED = 0
    COMPARTMENT_KIND_SOMA = 1
    COMPARTMENT_KIND_DENDRITE = 2
    COMPARTMENT_KIND_AXON = 3


class SynType(IntEnum):
    SYN_TYPE_UNSPECIFIED = 0
    SYN_TYPE_EXC = 1
    SYN_TYPE_INH = 2


class SynKind(IntEnum):
    SYN_KIND_UNSPECIFIED = 0
    SYN_KIND_AMPA = 1
    SYN_KIND_NMDA = 2
    SYN_KIND_GABA = 3


class ModChannel(IntEnum):
    MOD_CHANNEL_NONE = 0
    MOD_CHANNEL_NA = 1


@dataclass
class LabelKv(Message):
    SCHEMA_ID: ClassVar[str] = "ucf.v1.LabelKv"
    k: str = pb(1, Kind.STRING)
    v: str = pb(2, Kind.STRING)


@dataclass
class Compartment(Message):
    SCHEMA_ID: ClassVar[str] = "ucf.v1.Compartment"
    comp_id: int = pb(1, Kind.UINT32)
    # unset for the root compartment; 0 is a valid parent id
    parent_comp_id: Optional[int] = pb(2, Kind.UINT32, optional=True)
    kind: int = pb(3, Kind.ENUM, enum=CompartmentKind)
    length_um: int = pb(4, Kind.UINT32)
    diameter_um: int = pb(5, Kind.UINT32)


@dataclass
class MorphNeuron(Message):
    SCHEMA_ID: ClassVar[str] = "ucf.v1.MorphNeuron"
    neuron_id: int = pb(1, Kind.UINT32)
    compartments: List[Compartment] = pb(2, Kind.MESSAGE, repeated=True, message=Compartment)
    labels: List[LabelKv] = pb(3, Kind.MESSAGE, repeated=True, message=LabelKv)


@dataclass
class MorphologySetPayload(Message):
    SCHEMA_ID: ClassVar[str] = "ucf.v1.MorphologySetPayload"
    version: int = pb(1, Kind.UINT32)
    neurons: List[MorphNeuron] = pb(2, Kind.MESSAGE, repeated=True, message=MorphNeuron)
    payload_digest: Optional[Digest32] = pb(3, Kind.MESSAGE, message=Digest32)


@dataclass
class ChannelParams(Message):
    SCHEMA_ID: ClassVar[str] = "ucf.v1.ChannelParams"
    neuron_id: int = pb(1, Kind.UINT32)
    comp_id: int = pb(2, Kind.UINT32)
    leak_g: int = pb(3, Kind.UINT32)
    na_g: int = pb(4, Kind.UINT32)
    k_g: int = pb(5, Kind.UINT32)
    ca_g: Optional[int] = pb(6, Kind.UINT32, optional=True)
    e_rev_leak: Optional[int] = pb(7, Kind.INT32, optional=True)


@dataclass
class ChannelParamsSetPayload(Message):
    SCHEMA_ID: ClassVar[str] = "ucf.v1.ChannelParamsSetPayload"
    version: int = pb(1, Kind.UINT32)
    params: List[ChannelParams] = pb(2, Kind.MESSAGE, repeated=True, message=ChannelParams)
    payload_digest: Optional[Digest32] = pb(3, Kind.MESSAGE, message=Digest32)


@dataclass
class SynapseParams(Message):
    SCHEMA_ID: ClassVar[str] = "ucf.v1.SynapseParams"
    syn_param_id: int = pb(1, Kind.UINT32)
    syn_type: int = pb(2, Kind.ENUM, enum=SynType)
    syn_kind: int = pb(3, Kind.ENUM, enum=SynKind)
    # Q16.16 fixed point
    g_max_q: int = pb(4, Kind.UINT32)
    e_rev_mv: int = pb(5, Kind.INT32)
    tau_decay_steps: int = pb(6, Kind.UINT32)
    stp_u_q: int = pb(7, Kind.UINT32)
    tau_rec_steps: int = pb(8, Kind.UINT32)
    tau_fac_steps: int = pb(9, Kind.UINT32)
    mod_channel: int = pb(10, Kind.ENUM, enum=ModChannel)


@dataclass
class SynapseParamsSetPayload(Message):
    SCHEMA_ID: ClassVar[str] = "ucf.v1.SynapseParamsSetPayload"
    version: int = pb(1, Kind.UINT32)
    params: List[SynapseParams] = pb(2, Kind.MESSAGE, repeated=True, message=SynapseParams)
    payload_digest: Optional[Digest32] = pb(3, Kind.MESSAGE, message=Digest32)


@dataclass
class ConnEdge(Message):
    SCHEMA_ID: ClassVar[str] = "ucf.v1.ConnEdge"
    pre: int = pb(1, Kind.UINT32)
    post: int = pb(2, Kind.UINT32)
    post_compartment: int = pb(3, Kind.UINT32)
    syn_param_id: int = pb(4, Kind.UINT32)
    delay_steps: int = pb(5, Kind.UINT32)


@dataclass
class ConnectivityGraphPayload(Message):
    SCHEMA_ID: ClassVar[str] = "ucf.v1.ConnectivityGraphPayload"
    version: int = pb(1, Kind.UINT32)
    edges: List[ConnEdge] = pb(2, Kind.MESSAGE, repeated=True, message=ConnEdge)
    payload_digest: Optional[Digest32] = pb(3, Kind.MESSAGE, message=Digest32)
