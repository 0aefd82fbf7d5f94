# resume_optimizer/diagnostics.py
import logging
from dataclasses import dataclass, field
from typing import List, Dict, Any, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DiagnosticEntry:
    stage: str
    message: str
    data: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {'stage': self.stage, 'message': self.message, 'data': dict(self.data)}


class Diagnostics:
    """
    Ordered trace of what the engine did, returned with results.

    Entries are mirrored to the module logger at DEBUG level but the
    list itself is independent of any logging handler.
    """

    def __init__(self, entries: Optional[List[DiagnosticEntry]] = None):
        self.entries: List[DiagnosticEntry] = list(entries or [])

    def record(self, stage: str, message: str, **data) -> DiagnosticEntry:
        entry = DiagnosticEntry(stage=stage, message=message, data=data)
        self.entries.append(entry)
        logger.debug(f"[{stage}] {message}")
        return entry

    def extend(self, other: 'Diagnostics'):
        self.entries.extend(other.entries)

    def for_stage(self, stage: str) -> List[DiagnosticEntry]:
        return [e for e in self.entries if e.stage == stage]

    def to_list(self) -> List[Dict[str, Any]]:
        return [e.to_dict() for e in self.entries]

    def __len__(self):
        return len(self.entries)

    def __iter__(self):
        return iter(self.entries)
