"""Exam lifecycle endpoints — load the wizard context and submit transitions.

The POST endpoint re-checks everything the client-side wizard checked
before persisting: the payload's exam id, the transition graph and the
target stage's checklist.  The repository then verifies that the status
the client saw is still the persisted one.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from mockexam_db.repository import SqlWizardRepository
from mockexam_lifecycle.models.context import WizardContext
from mockexam_lifecycle.models.enums import MockExamStatus
from mockexam_lifecycle.models.payload import TransitionPayload
from mockexam_lifecycle.policy import classify_move, require_transition
from mockexam_lifecycle.registry import StageRegistry
from mockexam_lifecycle.validation import INCOMPLETE_STAGE_NOTICE, validate_stage_data

from mockexam_server.dependencies import get_registry, get_wizard_repository

logger = logging.getLogger(__name__)

router = APIRouter(tags=["exams"])


class TransitionResponse(BaseModel):
    exam_id: str
    previous_status: MockExamStatus
    status: MockExamStatus
    direction: str
    message: str


@router.get("/exams/{exam_id}/wizard")
async def get_wizard_context(
    exam_id: str,
    repository: SqlWizardRepository = Depends(get_wizard_repository),
) -> WizardContext:
    """Everything the status wizard needs to render for one exam."""
    context = await repository.load_wizard_context(exam_id)
    if context is None:
        raise ValueError(f"Exam not found: {exam_id}")
    return context


@router.post("/exams/{exam_id}/transitions")
async def submit_transition(
    exam_id: str,
    payload: TransitionPayload,
    repository: SqlWizardRepository = Depends(get_wizard_repository),
    registry: StageRegistry = Depends(get_registry),
) -> TransitionResponse:
    """Validate and persist a stage change.

    Responses:
      - 400 when the body's exam id differs from the path or the edge is
        not in the transition graph
      - 404 when the exam (or a referenced row) does not exist
      - 409 when the exam's status changed since the client loaded it
      - 422 when the target stage's checklist is incomplete, with the
        field-level errors in ``detail.errors``
    """
    if payload.exam_id != exam_id:
        raise HTTPException(status_code=400, detail="Exam id does not match the URL")

    require_transition(payload.current_status, payload.target_status)

    definition = registry.get(payload.target_status)
    if definition is None:
        raise KeyError(payload.target_status.value)

    result = validate_stage_data(definition, payload.stage_data)
    if not result.valid:
        logger.info(
            "Transition rejected: exam=%s target=%s errors=%s",
            exam_id, payload.target_status.value, sorted(result.errors),
        )
        raise HTTPException(
            status_code=422,
            detail={"message": INCOMPLETE_STAGE_NOTICE, "errors": result.errors},
        )

    await repository.submit_transition(payload)

    return TransitionResponse(
        exam_id=exam_id,
        previous_status=payload.current_status,
        status=payload.target_status,
        direction=classify_move(payload.current_status, payload.target_status).value,
        message=f"Status updated to {definition.label}",
    )
