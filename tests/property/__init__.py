"""
Hypothesis profiles for the property tests.

HYPOTHESIS_PROFILE=dev|ci picks one explicitly; otherwise "ci" is used when
the CI variable is truthy and "dev" locally. Proof checks hash every node on
the path, so deadlines are off in both.
"""
from __future__ import annotations

import os

from hypothesis import HealthCheck, settings

settings.register_profile(
    "dev",
    settings(max_examples=100, deadline=None, suppress_health_check=(HealthCheck.too_slow,)),
)
settings.register_profile(
    "ci",
    settings(
        max_examples=300,
        deadline=None,
        derandomize=True,
        suppress_health_check=(HealthCheck.too_slow, HealthCheck.filter_too_much),
    ),
)


def _ci() -> bool:
    return os.getenv("CI", "").lower() not in ("", "0", "false", "no", "off")


settings.load_profile(os.getenv("HYPOTHESIS_PROFILE") or ("ci" if _ci() else "dev"))
