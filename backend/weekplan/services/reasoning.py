"""Append-only audit trail of the planner's understand/propose/execute/observe/update phases."""
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from weekplan.api.schemas.agent_log import ReasoningPhase, ReasoningStep
from weekplan.services.identifiers import IdFactory, new_id, utc_now


class ReasoningTrail:
    """Collects ReasoningStep entries. A disabled trail accepts calls and records nothing."""

    def __init__(
        self,
        *,
        enabled: bool = True,
        now: Optional[datetime] = None,
        id_factory: IdFactory = new_id,
    ) -> None:
        self.enabled = enabled
        self._now = now
        self._id_factory = id_factory
        self._steps: List[ReasoningStep] = []

    def record(
        self,
        phase: ReasoningPhase,
        title: str,
        description: str,
        data: Optional[Dict[str, Any]] = None,
    ) -> Optional[ReasoningStep]:
        if not self.enabled:
            return None
        step = ReasoningStep(
            id=self._id_factory("reason"),
            phase=phase,
            title=title,
            description=description,
            timestamp=self._now or utc_now(),
            data=data or {},
        )
        self._steps.append(step)
        return step

    @property
    def steps(self) -> List[ReasoningStep]:
        return list(self._steps)

    def __len__(self) -> int:
        return len(self._steps)
