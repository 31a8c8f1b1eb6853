"""
Registry and loader for Semaphore proving backends.

``BACKEND_REGISTRY`` maps a backend name to the import path of a
``ProvingBackend`` subclass. A module is imported only when its backend is
requested, so bindings to an optional native prover cost nothing until
selected.

The only built-in entry is ``reference``: a pure-Python backend that checks
every circuit constraint and emits a transcript tag. It runs the protocol end
to end but is not a proof system. A native prover is added with::

    from semaphore_protocol.factory import register_backend

    register_backend("plonky2", "my_bindings.semaphore.Plonky2Backend")

after which ``SEMAPHORE_BACKEND=plonky2`` or
``get_proving_backend(prefer="plonky2")`` selects it.
"""

from __future__ import annotations

import importlib
import logging
from typing import Dict

from .feature_flags import check_backend_name, get_backend_type
from .interfaces import ProvingBackend

log = logging.getLogger(__name__)

BACKEND_REGISTRY: Dict[str, str] = {
    "reference": "semaphore_protocol.reference.backend.ReferenceBackend",
}


def register_backend(name: str, import_path: str) -> None:
    """
    Make a ``ProvingBackend`` subclass selectable under ``name``.

    The class is not imported here; a bad path surfaces on first use.

    Raises:
        ValueError: If the name is taken or the path is not "module.Class"
    """
    if not isinstance(name, str) or not name:
        raise ValueError("backend name must be a non-empty string")
    if name in BACKEND_REGISTRY:
        raise ValueError(f"proving backend {name!r} is already registered")
    module_path, _, class_name = str(import_path).rpartition(".")
    if not module_path or not class_name:
        raise ValueError(f"backend import path must be 'module.Class': {import_path!r}")
    BACKEND_REGISTRY[name] = import_path
    log.debug("registered proving backend %s -> %s", name, import_path)


def _load_backend_class(name: str) -> type:
    module_path, _, class_name = BACKEND_REGISTRY[name].rpartition(".")
    try:
        module = importlib.import_module(module_path)
    except ModuleNotFoundError as exc:
        raise ImportError(
            f"proving backend {name!r}: cannot import {module_path!r}"
        ) from exc

    backend_cls = getattr(module, class_name, None)
    if backend_cls is None:
        raise ImportError(
            f"proving backend {name!r}: {module_path!r} has no {class_name!r}"
        )
    if not isinstance(backend_cls, type) or not issubclass(
        backend_cls, ProvingBackend
    ):
        raise TypeError(
            f"proving backend {name!r}: {class_name!r} is not a ProvingBackend"
        )
    return backend_cls


def get_proving_backend(
    *, prefer: str | None = None, override: str | None = None
) -> ProvingBackend:
    """
    Instantiate a proving backend.

    Args:
        prefer: Backend name hint, used before the feature flags
        override: Backend name that wins over everything (testing only)

    Returns:
        A new backend instance on every call

    Raises:
        ValueError: If a backend name is not registered
        ImportError: If the backend module or class cannot be found
        TypeError: If the registered class is not a ProvingBackend
    """
    name = check_backend_name(override, "override") or get_backend_type(prefer)
    backend = _load_backend_class(name)()
    log.debug("using proving backend %s", name)
    return backend
