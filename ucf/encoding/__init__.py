"""
UCF — ucf.encoding
------------------

- wire      : deterministic protobuf wire codec (the serialization primitive)
- canonical : canonical_bytes / transport_bytes (normalizer + wire)
"""

__all__ = ["wire", "canonical"]
