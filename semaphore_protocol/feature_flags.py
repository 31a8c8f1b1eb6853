"""
Proving-backend selection for Semaphore signals.

A backend name is resolved, highest precedence first, from:

1. the ``prefer`` argument of ``get_backend_type``
2. the in-process override set with ``set_backend_type`` (tests, CLI)
3. the ``SEMAPHORE_BACKEND`` environment variable
4. ``reference``, the pure-Python backend shipped with the package

Names are checked against ``factory.BACKEND_REGISTRY``, so a prover added
with ``factory.register_backend`` is selectable here without further changes.

WARNING: ``reference`` checks constraints but its proofs can be forged from
public data. Select a registered native prover for anything beyond testing.
"""

from __future__ import annotations

import os
from typing import Final

ENV_VAR: Final[str] = "SEMAPHORE_BACKEND"
DEFAULT_BACKEND: Final[str] = "reference"

_override: str | None = None


def known_backends() -> tuple[str, ...]:
    """Names currently registered with the backend factory."""
    from .factory import BACKEND_REGISTRY

    return tuple(sorted(BACKEND_REGISTRY))


def check_backend_name(value: object, origin: str) -> str | None:
    """
    Validate a backend name coming from ``origin``.

    Returns:
        The name, or None when ``value`` is None or empty (meaning unset)

    Raises:
        ValueError: If the name is not registered
    """
    if value is None or value == "":
        return None
    names = known_backends()
    if not isinstance(value, str) or value not in names:
        raise ValueError(
            f"Unknown proving backend {value!r} from {origin}; "
            f"registered: {', '.join(names)}"
        )
    return value


def get_backend_type(prefer: str | None = None) -> str:
    """
    Name of the proving backend ``SignalProtocol()`` should use.

    Raises:
        ValueError: If ``prefer`` or the environment names an unknown backend
    """
    preferred = check_backend_name(prefer, "prefer")
    if preferred is not None:
        return preferred
    if _override is not None:
        return _override
    from_env = check_backend_name(os.getenv(ENV_VAR), ENV_VAR)
    return from_env if from_env is not None else DEFAULT_BACKEND


def set_backend_type(value: str | None) -> None:
    """Force a backend for this process; None or "" clears the override."""
    global _override
    _override = check_backend_name(value, "override")
