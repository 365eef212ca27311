"""StageRegistry — loads the stage catalog from YAML into typed models.

This is the single source of truth for stage checklists at runtime.  The
registry is loaded once at startup and provides lookup by status.

Usage::

    registry = StageRegistry()      # defaults to the bundled data/stages.yaml
    registry.load()

    definition = registry.get(MockExamStatus.SCHEDULED)
    for stage in registry.ordered():
        ...
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Iterator

import yaml

from mockexam_lifecycle.constants import STATUS_ORDER
from mockexam_lifecycle.models.enums import MockExamStatus
from mockexam_lifecycle.models.stage import StageDefinition

logger = logging.getLogger(__name__)

# Bundled catalog, shipped as package data.
DEFAULT_DATA_DIR = Path(__file__).resolve().parent / "data"
STAGES_FILE = "stages.yaml"


def load_yaml(path: Path | str) -> Any:
    """Load a single YAML file and return the parsed contents."""
    if isinstance(path, str):
        path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Missing YAML file: {path}")
    with path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f)


class StageRegistry:
    """Loads ``stages.yaml`` and provides typed lookup by status.

    Attributes populated after :meth:`load`:

        stages — dict[MockExamStatus, StageDefinition]
    """

    def __init__(self, data_dir: str | Path | None = None) -> None:
        self._base = Path(data_dir) if data_dir is not None else DEFAULT_DATA_DIR
        self.stages: dict[MockExamStatus, StageDefinition] = {}

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(self) -> None:
        """Parse the stage catalog.

        Raises ``FileNotFoundError`` if the YAML file is missing and
        ``ValueError`` for duplicated or unknown stages.
        """
        raw_list = load_yaml(self._base / STAGES_FILE) or []
        stages: dict[MockExamStatus, StageDefinition] = {}
        for raw in raw_list:
            definition = StageDefinition(**raw)
            if definition.status in stages:
                raise ValueError(
                    f"Duplicate stage definition '{definition.status.value}'"
                )
            stages[definition.status] = definition

        self.stages = stages
        missing = [s.value for s in MockExamStatus if s not in stages]
        if missing:
            # Stages without a definition can still be reached; they simply
            # have no checklist and cannot build a payload.
            logger.warning("Stages without a definition: %s", ", ".join(missing))
        logger.info("StageRegistry loaded: %d stages", len(self.stages))

    # ------------------------------------------------------------------
    # Lookup helpers
    # ------------------------------------------------------------------

    def get(self, status: MockExamStatus | str) -> StageDefinition | None:
        """Return the definition for *status*, or None if there is none."""
        return self.stages.get(MockExamStatus(status))

    def require(self, status: MockExamStatus | str) -> StageDefinition:
        """Return the definition for *status*.

        Raises:
            KeyError: if the stage has no definition.
        """
        return self.stages[MockExamStatus(status)]

    def ordered(self) -> list[StageDefinition]:
        """All definitions sorted by stage rank."""
        return sorted(self.stages.values(), key=lambda d: STATUS_ORDER[d.status])

    def label_for(self, status: MockExamStatus | str) -> str:
        """Human label for *status*, falling back to the raw value."""
        definition = self.get(status)
        return definition.label if definition else MockExamStatus(status).value

    def __contains__(self, status: object) -> bool:
        try:
            return MockExamStatus(status) in self.stages
        except ValueError:
            return False

    def __len__(self) -> int:
        return len(self.stages)

    def __iter__(self) -> Iterator[StageDefinition]:
        return iter(self.ordered())


_default: StageRegistry | None = None


def default_registry() -> StageRegistry:
    """Return (and lazily load) the registry backed by the bundled catalog."""
    global _default
    if _default is None:
        registry = StageRegistry()
        registry.load()
        _default = registry
    return _default
