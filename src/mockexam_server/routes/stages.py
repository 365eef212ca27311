"""Stage catalog endpoints — the stage checklists and the transition graph.

These are reference data: they need no database and no caller identity.
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from mockexam_lifecycle.models.enums import MockExamStatus
from mockexam_lifecycle.models.stage import StageDefinition
from mockexam_lifecycle.policy import allowed_stages, is_terminal
from mockexam_lifecycle.registry import StageRegistry

from mockexam_server.dependencies import get_registry

router = APIRouter(tags=["stages"])


class StageCatalogEntry(BaseModel):
    """A stage definition plus the stages reachable from it."""

    definition: StageDefinition
    allowed_next: list[MockExamStatus]
    terminal: bool


def _ordered(statuses) -> list[MockExamStatus]:
    order = list(MockExamStatus)
    return sorted(statuses, key=order.index)


@router.get("/stages")
async def list_stages(
    registry: StageRegistry = Depends(get_registry),
) -> list[StageCatalogEntry]:
    """Every stage in rank order with its checklist and outgoing edges."""
    return [
        StageCatalogEntry(
            definition=definition,
            allowed_next=_ordered(
                s for s in allowed_stages(definition.status) if s is not definition.status
            ),
            terminal=is_terminal(definition.status),
        )
        for definition in registry.ordered()
    ]


@router.get("/stages/{status}/allowed")
async def get_allowed_stages(status: MockExamStatus) -> list[MockExamStatus]:
    """Stages selectable from *status*, including *status* itself."""
    return _ordered(allowed_stages(status))
