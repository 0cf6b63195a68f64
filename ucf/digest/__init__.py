"""
UCF — ucf.digest
----------------

- engine : digest32, message/instance/self digests, seal/verify_seal
- chain  : previous-digest link checks, ChainTracker
"""

from __future__ import annotations

from .chain import ChainTracker, check_link, check_pair, prev_digest, verify_chain
from .engine import (
    digest32,
    digest_prefix,
    instance_digest,
    message_digest,
    seal,
    self_digest,
    stored_self_digest,
    verify_seal,
)

__all__ = [
    "digest32",
    "digest_prefix",
    "message_digest",
    "instance_digest",
    "self_digest",
    "seal",
    "stored_self_digest",
    "verify_seal",
    "prev_digest",
    "check_link",
    "check_pair",
    "verify_chain",
    "ChainTracker",
]
