"""Abstract interfaces for the services the status wizard depends on.

These ABCs define the contract that external implementations must fulfil.
The wizard never talks to a database or a network directly; it is handed
a ``WizardRepository`` (``mockexam_db.SqlWizardRepository`` in production,
an in-memory fake in tests).

Random question selection and calendar conflict detection are owned by
other services.  The SDK ships no concrete implementations of
``QuestionSampler`` or ``ConflictDetector``.

Typical integration flow::

    repository: WizardRepository = SqlWizardRepository(db, user_id)
    wizard = StatusTransitionWizard(repository, registry, sampler=my_sampler)
    await wizard.open(exam_id, current_status)
    # ... dispatch editing actions ...
    outcome = await wizard.submit()
"""

from abc import ABC, abstractmethod

from mockexam_lifecycle.models.context import WizardContext
from mockexam_lifecycle.models.payload import TransitionPayload
from mockexam_lifecycle.models.services import (
    ConflictCheckRequest,
    ConflictReport,
    RandomSelectionRequest,
    RandomSelectionResult,
)


class WizardRepository(ABC):
    """Persistence contract for the status wizard."""

    @abstractmethod
    async def load_wizard_context(self, exam_id: str) -> WizardContext | None:
        """Fetch everything the wizard needs for one exam.

        Returns
        -------
        WizardContext | None
            The context, or None when the exam does not exist.
        """
        ...

    @abstractmethod
    async def submit_transition(self, payload: TransitionPayload) -> None:
        """Persist a stage change and its stage data.

        Implementations apply, in order: stage-progress upsert, instruction
        deletions, instruction upserts, selection deletions, selection
        upserts, the status change itself, and the history reason.  Any
        failure is raised; the caller classifies it for the user.
        """
        ...


class QuestionSampler(ABC):
    """Interface for random question selection from the bank.

    The SDK imposes no constraints on *how* questions are drawn; only the
    input/output contract is specified here.
    """

    @abstractmethod
    async def sample(self, request: RandomSelectionRequest) -> RandomSelectionResult:
        """Draw up to ``request.total_questions`` bank questions."""
        ...


class ConflictDetector(ABC):
    """Interface for scheduling-conflict detection."""

    @abstractmethod
    async def detect(self, request: ConflictCheckRequest) -> ConflictReport:
        """Check a proposed exam slot for clashes and soft warnings."""
        ...
