"""
Hypothesis profiles for the property suite.

The active profile comes from HYPOTHESIS_PROFILE, otherwise "ci" when a CI
env var is truthy and "dev" locally:

- dev:    100 examples, random
- ci:     200 examples, derandomized so failures reproduce
- fast:   25 examples, for quick local loops
- stress: 1000 examples
"""
from __future__ import annotations

import os
from typing import Final

from hypothesis import HealthCheck, Verbosity, settings

_SUPPRESS = (HealthCheck.too_slow, HealthCheck.filter_too_much)

settings.register_profile(
    "dev",
    settings(max_examples=100, deadline=None, suppress_health_check=_SUPPRESS),
)
settings.register_profile(
    "ci",
    settings(
        max_examples=200,
        deadline=None,
        suppress_health_check=_SUPPRESS,
        verbosity=Verbosity.verbose,
        derandomize=True,
    ),
)
settings.register_profile(
    "fast",
    settings(max_examples=25, deadline=None, suppress_health_check=(HealthCheck.too_slow,)),
)
settings.register_profile(
    "stress",
    settings(
        max_examples=1000,
        deadline=None,
        suppress_health_check=_SUPPRESS + (HealthCheck.data_too_large,),
        derandomize=True,
    ),
)


def _env_truthy(name: str) -> bool:
    return (os.getenv(name) or "").lower() not in ("", "0", "false", "no", "off")


_active: Final[str] = os.getenv("HYPOTHESIS_PROFILE") or ("ci" if _env_truthy("CI") else "dev")
settings.load_profile(_active)
