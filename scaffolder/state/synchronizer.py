"""Applied-configuration state, persisted next to the project.

The state file maps a category (``dependency``, ``jdbc``, ``plugin``) to the
values already applied to the project, so repeated runs do not add the same
pom entry or declare the same datasource twice.

The file is not locked: two concurrent runs against one project race and the
last writer wins.
"""
import json
import logging
from pathlib import Path
from typing import Dict, Set
from scaffolder.core.errors import StateFileError

log = logging.getLogger(__name__)

DEPENDENCY = "dependency"
JDBC = "jdbc"
PLUGIN = "plugin"


class ConfigSynchronizer:
    def __init__(self, state_path: Path):
        self.state_path = Path(state_path)
        self._applied: Dict[str, Set[str]] = {}
        self._loaded = False

    def load(self) -> "ConfigSynchronizer":
        """
        Read the state file.

        A missing or blank file means nothing was applied yet.

        Raises:
            StateFileError: the file is not a JSON object of string lists
        """
        self._applied = {}
        self._loaded = True
        if not self.state_path.exists():
            return self
        text = self.state_path.read_text(encoding="utf-8")
        if not text.strip():
            return self
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise StateFileError(f"Malformed state file {self.state_path}: {e}") from e
        if not isinstance(data, dict):
            raise StateFileError(f"State file {self.state_path} must hold a JSON object")
        for category, values in data.items():
            if not isinstance(values, list) or not all(isinstance(v, str) for v in values):
                raise StateFileError(f"State file {self.state_path}: '{category}' must be a list of strings")
            self._applied[category] = set(values)
        return self

    def _ensure_loaded(self) -> None:
        if not self._loaded:
            self.load()

    def was_applied(self, category: str, value: str) -> bool:
        self._ensure_loaded()
        return value in self._applied.get(category, set())

    def record_applied(self, category: str, value: str) -> bool:
        """Mark ``value`` as applied; returns False when it already was."""
        self._ensure_loaded()
        values = self._applied.setdefault(category, set())
        if value in values:
            return False
        values.add(value)
        return True

    def save(self) -> None:
        self._ensure_loaded()
        data = {category: sorted(values) for category, values in sorted(self._applied.items())}
        self.state_path.parent.mkdir(parents=True, exist_ok=True)
        self.state_path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
        log.debug("Saved state to %s", self.state_path)
