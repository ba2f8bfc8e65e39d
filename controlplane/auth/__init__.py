"""Request gating: HTTP Basic authentication and the store health gate."""

from controlplane.auth.dependencies import enforce_gates, require_credentials, require_healthy_store

__all__ = ["enforce_gates", "require_credentials", "require_healthy_store"]
