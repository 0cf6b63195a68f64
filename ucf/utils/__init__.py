"""
UCF — ucf.utils
---------------

Small byte/hash helpers.

- `bytes` : hex helpers, canonical fixture-hex check, first-difference lookup
- `hash`  : BLAKE3-256 wrapper, ZERO32, streaming hasher

Names like `bytes` and `hash` shadow builtins if imported directly; prefer
module-qualified imports (`from ucf.utils.hash import blake3_256`).
"""
