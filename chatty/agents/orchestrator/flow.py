"""
Flow tracking - named, timed steps describing how one request was processed.

Steps are mutated in place as a phase moves from ``active`` to a terminal
status; every transition is also recorded as an immutable snapshot in
``FlowTracker.events``. Streaming publishes that log through
``take_events`` so listeners see each transition exactly once, in order.
"""

import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from chatty.config.constants import ERRORS, FLOW_STEPS, STATUS
from chatty.utils.clock import utc_now_iso


FINISHED_STATUSES = {STATUS.COMPLETED, STATUS.ERROR, STATUS.SKIPPED}


@dataclass
class FlowStep:
    """A single pipeline phase as shown to the UI"""
    id: str
    name: str
    description: str
    status: str
    timestamp: str
    duration: Optional[int] = None
    data: Dict[str, Any] = field(default_factory=dict)
    started_at: float = field(default_factory=time.monotonic, repr=False, compare=False)

    @property
    def finished(self) -> bool:
        return self.status in FINISHED_STATUSES

    def to_dict(self) -> Dict[str, Any]:
        payload = {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "status": self.status,
            "timestamp": self.timestamp,
            "data": dict(self.data),
        }
        if self.duration is not None:
            payload["duration"] = self.duration
        return payload


class FlowTracker:
    """Ordered flow trace owned by a single request."""

    def __init__(self):
        self.steps: List[FlowStep] = []
        self.events: List[Dict[str, Any]] = []
        self._published = 0

    def start_step(
        self,
        step_id: str,
        name: str,
        description: str,
        data: Optional[Dict[str, Any]] = None
    ) -> FlowStep:
        step = FlowStep(
            id=step_id,
            name=name,
            description=description,
            status=STATUS.ACTIVE,
            timestamp=utc_now_iso(),
            data=dict(data or {}),
        )
        self.steps.append(step)
        self._record(step)
        return step

    def complete_step(self, step: FlowStep, extra_data: Optional[Dict[str, Any]] = None) -> FlowStep:
        return self._finish(step, STATUS.COMPLETED, extra_data)

    def error_step(
        self,
        step: FlowStep,
        error: Union[BaseException, str],
        extra_data: Optional[Dict[str, Any]] = None
    ) -> FlowStep:
        data = dict(extra_data or {})
        data["error"] = str(error) or error.__class__.__name__
        return self._finish(step, STATUS.ERROR, data)

    def skip_step(
        self,
        step: FlowStep,
        reason: str,
        extra_data: Optional[Dict[str, Any]] = None
    ) -> FlowStep:
        data = dict(extra_data or {})
        data["reason"] = reason
        return self._finish(step, STATUS.SKIPPED, data)

    def fail_active_step(self, error: Union[BaseException, str]) -> Optional[FlowStep]:
        """Mark the most recent unfinished step as failed, if any."""
        for step in reversed(self.steps):
            if not step.finished:
                return self.error_step(step, error)
        return None

    def take_events(self) -> List[Dict[str, Any]]:
        """Snapshots recorded since the previous call, oldest first."""
        pending = self.events[self._published:]
        self._published = len(self.events)
        return pending

    @staticmethod
    def empty_message_trace() -> Dict[str, Any]:
        """Trace returned when the request carried no message at all."""
        definition = FLOW_STEPS["backend"]
        step = FlowStep(
            id=definition["step_id"],
            name=definition["name"],
            description=definition["description"],
            status=STATUS.ERROR,
            timestamp=utc_now_iso(),
            data={"error": ERRORS.NO_MESSAGE_PROVIDED},
        )
        return {"steps": [step.to_dict()], "totalDuration": 0}

    def max_step_duration(self) -> int:
        return max((step.duration or 0 for step in self.steps), default=0)

    def build_trace(
        self,
        total_duration: int,
        rag_used: bool = False,
        web_search_used: bool = False,
        model: Optional[str] = None,
        error: Optional[str] = None
    ) -> Dict[str, Any]:
        trace: Dict[str, Any] = {
            "steps": [step.to_dict() for step in self.steps],
            # Phases run back to back, so the total spans every step
            "totalDuration": max(int(total_duration), self.max_step_duration()),
            "ragUsed": rag_used,
            "webSearchUsed": web_search_used,
            "model": model,
        }
        if error is not None:
            trace["error"] = error
        return trace

    def _finish(self, step: FlowStep, status: str, extra_data: Optional[Dict[str, Any]]) -> FlowStep:
        if step.finished:
            return step
        duration = max(0, int(round((time.monotonic() - step.started_at) * 1000)))
        step.status = status
        step.duration = duration
        step.data = {**step.data, **(extra_data or {}), "processingTime": duration}
        self._record(step)
        return step

    def _record(self, step: FlowStep) -> None:
        self.events.append(step.to_dict())
