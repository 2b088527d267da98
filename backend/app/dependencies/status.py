"""Dependency providing the status recompute procedure.

Override with ``app.dependency_overrides[get_status_recomputer]`` to plug in
a different derivation (a database procedure, a remote service, a test fake).
"""

from backend.app.services.status_recompute import StatusRecomputer, default_recomputer


def get_status_recomputer() -> StatusRecomputer:
    return default_recomputer
