# resume_optimizer/errors.py
"""
Error and warning types raised or reported by the engine
"""
from dataclasses import dataclass, asdict
from typing import List, Dict, Any, Optional, Sequence


@dataclass
class FieldError:
    """Single failing field in a step input"""
    field: str
    message: str
    remedy: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class ResumeEngineError(Exception):
    """Base class for engine errors"""


class ValidationError(ResumeEngineError):
    """Malformed step input. Never changes workflow state."""

    def __init__(self, errors: Sequence[FieldError], message: str = "validation failed"):
        super().__init__(message)
        self.errors = list(errors)

    def to_list(self) -> List[Dict[str, Any]]:
        return [e.to_dict() for e in self.errors]


class ExternalServiceError(ResumeEngineError):
    """Generative-text provider failed, timed out or returned unusable output"""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class ParseAmbiguityWarning(UserWarning):
    """A resume section could not be segmented with confidence"""

    def __init__(self, section: str, confidence: float, message: str = ""):
        super().__init__(message or f"Could not confidently segment '{section}' section")
        self.section = section
        self.confidence = confidence

    def to_dict(self) -> Dict[str, Any]:
        return {'section': self.section, 'confidence': self.confidence, 'message': str(self)}


class ConvergenceIncomplete(UserWarning):
    """Iteration cap reached with parameters still under threshold"""

    def __init__(self, failing: Sequence[int], labels: Sequence[str] = ()):
        names = ", ".join(labels) if labels else ", ".join(str(p) for p in failing)
        super().__init__(f"Parameters still below threshold: {names}")
        self.failing = list(failing)
        self.labels = list(labels)

    def to_dict(self) -> Dict[str, Any]:
        return {'failing': self.failing, 'labels': self.labels, 'message': str(self)}
