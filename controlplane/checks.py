"""
Static check definitions.

Checks are configuration, not runtime state: they are read once from a JSON
file shaped ``{"checks": {"<name>": {...definition...}}}`` and never mutated
through the API.
"""

import json
from pathlib import Path
from typing import Any, Optional

from controlplane.utils.logging import get_logger

logger = get_logger(__name__)


class CheckRegistry:
    """Read-only view over configured check definitions."""

    def __init__(self, checks: Optional[dict[str, dict[str, Any]]] = None):
        self._checks = dict(checks or {})

    @classmethod
    def from_file(cls, path: str) -> "CheckRegistry":
        """
        Load definitions from a JSON file.

        A missing file yields an empty registry; a malformed one raises.

        Args:
            path: Path to the checks file

        Returns:
            Populated registry
        """
        file_path = Path(path)
        if not file_path.exists():
            logger.warning("checks_file_missing", path=str(file_path))
            return cls()
        with file_path.open(encoding="utf-8") as fh:
            document = json.load(fh)
        checks = document.get("checks", {})
        logger.info("checks_loaded", path=str(file_path), count=len(checks))
        return cls(checks)

    def exists(self, name: str) -> bool:
        return name in self._checks

    def get(self, name: str) -> Optional[dict[str, Any]]:
        """Definition merged with its name, or None when unknown."""
        definition = self._checks.get(name)
        if definition is None:
            return None
        return {**definition, "name": name}

    def all(self) -> list[dict[str, Any]]:
        return [{**definition, "name": name} for name, definition in self._checks.items()]
