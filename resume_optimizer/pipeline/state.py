# resume_optimizer/pipeline/state.py
import copy
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from resume_optimizer.models import ResumeDocument
from resume_optimizer.pipeline.steps import PipelineStep, StepStatus, STEP_NAMES


@dataclass(frozen=True)
class PipelineSnapshot:
    """
    Immutable version of the resume after a step.

    The stored document is a private deep copy and is only reachable
    through ``restore``, which hands out another copy.
    """
    version: int
    step: PipelineStep
    _resume: ResumeDocument = field(repr=False, compare=False)
    changes: Tuple[str, ...] = ()
    created_at: datetime = field(default_factory=datetime.now)

    def restore(self) -> ResumeDocument:
        return self._resume.copy()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'version': self.version,
            'step': int(self.step),
            'step_name': STEP_NAMES[self.step],
            'resume': self._resume.to_dict(),
            'changes': list(self.changes),
            'created_at': self.created_at.isoformat(),
        }


class SnapshotHistory:
    """Append-only list of snapshots"""

    def __init__(self):
        self._snapshots: List[PipelineSnapshot] = []

    def append(self, resume: ResumeDocument, step: PipelineStep, changes: Optional[List[str]] = None) -> PipelineSnapshot:
        snapshot = PipelineSnapshot(
            version=len(self._snapshots) + 1,
            step=step,
            _resume=resume.copy(),
            changes=tuple(changes or []),
        )
        self._snapshots.append(snapshot)
        return snapshot

    @property
    def latest(self) -> Optional[PipelineSnapshot]:
        return self._snapshots[-1] if self._snapshots else None

    @property
    def first(self) -> Optional[PipelineSnapshot]:
        return self._snapshots[0] if self._snapshots else None

    def get(self, version: int) -> Optional[PipelineSnapshot]:
        if 1 <= version <= len(self._snapshots):
            return self._snapshots[version - 1]
        return None

    def all(self) -> Tuple[PipelineSnapshot, ...]:
        return tuple(self._snapshots)

    def __len__(self):
        return len(self._snapshots)


@dataclass
class StepExecution:
    """One attempt at running a step"""
    step: PipelineStep
    status: StepStatus = StepStatus.PENDING
    started_at: datetime = field(default_factory=datetime.now)
    ended_at: Optional[datetime] = None
    error: Optional[str] = None
    retry_count: int = 0

    def finish(self, status: StepStatus, error: Optional[str] = None):
        self.status = status
        self.error = error
        self.ended_at = datetime.now()

    @property
    def duration(self) -> Optional[float]:
        if self.ended_at is None:
            return None
        return (self.ended_at - self.started_at).total_seconds()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'step': int(self.step),
            'status': self.status.value,
            'started_at': self.started_at.isoformat(),
            'ended_at': self.ended_at.isoformat() if self.ended_at else None,
            'error': self.error,
            'retry_count': self.retry_count,
        }


@dataclass
class UserInputRecord:
    step: PipelineStep
    input_type: str
    data: Any
    timestamp: datetime = field(default_factory=datetime.now)

    def __post_init__(self):
        self.data = copy.deepcopy(self.data)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'step': int(self.step),
            'input_type': self.input_type,
            'data': self.data,
            'timestamp': self.timestamp.isoformat(),
        }


@dataclass
class ErrorRecord:
    step: PipelineStep
    error: str
    retry_attempt: int = 0
    stack_trace: Optional[str] = None
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'step': int(self.step),
            'error': self.error,
            'retry_attempt': self.retry_attempt,
            'timestamp': self.timestamp.isoformat(),
        }


@dataclass
class PipelineState:
    """Read-only view of a session handed to state listeners"""
    session_id: str
    current_step: PipelineStep
    completed_steps: List[PipelineStep]
    failed_steps: List[PipelineStep]
    user_input_required: bool
    error_messages: List[str]
    progress_percentage: int
    snapshot_count: int
    aborted: bool
    started_at: datetime
    last_updated: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'session_id': self.session_id,
            'current_step': int(self.current_step),
            'completed_steps': [int(s) for s in self.completed_steps],
            'failed_steps': [int(s) for s in self.failed_steps],
            'user_input_required': self.user_input_required,
            'error_messages': list(self.error_messages),
            'progress_percentage': self.progress_percentage,
            'snapshot_count': self.snapshot_count,
            'aborted': self.aborted,
            'started_at': self.started_at.isoformat(),
            'last_updated': self.last_updated.isoformat(),
        }


@dataclass
class ProgressIndicator:
    current_step: PipelineStep
    total_steps: int
    step_name: str
    step_description: str
    percentage_complete: int
    user_action_required: bool
    action_description: Optional[str] = None
    estimated_time_remaining: Optional[int] = None  # seconds

    def to_dict(self) -> Dict[str, Any]:
        return {
            'current_step': int(self.current_step),
            'total_steps': self.total_steps,
            'step_name': self.step_name,
            'step_description': self.step_description,
            'percentage_complete': self.percentage_complete,
            'user_action_required': self.user_action_required,
            'action_description': self.action_description,
            'estimated_time_remaining': self.estimated_time_remaining,
        }


@dataclass
class PipelineStepResult:
    """Outcome of ``PipelineController.execute_step``"""
    success: bool
    data: Dict[str, Any] = field(default_factory=dict)
    error: Optional[str] = None
    user_input_required: bool = False
    next_step: Optional[PipelineStep] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'success': self.success,
            'data': self.data,
            'error': self.error,
            'user_input_required': self.user_input_required,
            'next_step': int(self.next_step) if self.next_step is not None else None,
        }
