"""Per-instantiation state for bundle lifecycle operations.

Stages:
    idle -> namespace_ensuring -> manifest_loading
         -> resource_creating(type, file_index) ... -> completed
    any non-terminal stage -> failed

There is no resumption: a failed instantiation is started over with a new
state.
"""

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

logger = logging.getLogger(__name__)


class Stage(str, Enum):
    IDLE = 'idle'
    NAMESPACE_ENSURING = 'namespace_ensuring'
    MANIFEST_LOADING = 'manifest_loading'
    RESOURCE_CREATING = 'resource_creating'
    COMPLETED = 'completed'
    FAILED = 'failed'


_TRANSITIONS: dict[Stage, set[Stage]] = {
    Stage.IDLE: {Stage.NAMESPACE_ENSURING},
    Stage.NAMESPACE_ENSURING: {Stage.MANIFEST_LOADING},
    Stage.MANIFEST_LOADING: {Stage.RESOURCE_CREATING, Stage.COMPLETED},
    Stage.RESOURCE_CREATING: {Stage.RESOURCE_CREATING, Stage.COMPLETED},
    Stage.COMPLETED: set(),
    Stage.FAILED: set(),
}


class StateTransitionError(Exception):
    """Invalid stage transition."""


@dataclass
class InstantiationState:
    """Tracks one bundle instantiation.

    Attributes:
        bundle_id: Bundle being instantiated
        cloud_region_id: Target cloud region
        namespace: Target namespace
        stage: Current stage
        external_id: Random external VNF ID once generated
        internal_id: Derived internal VNF ID once generated
        resource_type: Type being created (resource_creating only)
        file_index: Index of the file being created within its type
        resources: Resource type -> created names so far
        started_at: Timestamp when the namespace ensure started
        completed_at: Timestamp when completed or failed
        error: Error message if failed
    """
    bundle_id: str
    cloud_region_id: str
    namespace: str
    stage: Stage = Stage.IDLE
    external_id: Optional[str] = None
    internal_id: Optional[str] = None
    resource_type: Optional[str] = None
    file_index: Optional[int] = None
    resources: dict[str, list[str]] = field(default_factory=dict)
    started_at: Optional[float] = None
    completed_at: Optional[float] = None
    error: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.stage in (Stage.COMPLETED, Stage.FAILED)

    def advance(self, stage: Stage, resource_type: Optional[str] = None,
                file_index: Optional[int] = None) -> None:
        """Move to the next stage.

        Raises:
            StateTransitionError: If the transition is not allowed
        """
        if stage == Stage.FAILED:
            raise StateTransitionError("Use fail() to enter the failed stage")
        if stage not in _TRANSITIONS[self.stage]:
            raise StateTransitionError(f"Cannot move from {self.stage.value} to {stage.value}")
        if stage == Stage.NAMESPACE_ENSURING:
            self.started_at = time.time()
        self.stage = stage
        if stage == Stage.RESOURCE_CREATING:
            self.resource_type = resource_type
            self.file_index = file_index
        else:
            self.resource_type = None
            self.file_index = None
        if stage == Stage.COMPLETED:
            self.completed_at = time.time()
        logger.debug(f"Instantiation of {self.bundle_id}: {self.describe()}")

    def record(self, resource_type: str, name: str) -> None:
        """Append a created resource name."""
        self.resources.setdefault(resource_type, []).append(name)

    def fail(self, error: str) -> None:
        if self.is_terminal:
            raise StateTransitionError(f"Cannot fail from {self.stage.value}")
        self.stage = Stage.FAILED
        self.completed_at = time.time()
        self.error = error

    def describe(self) -> str:
        if self.stage == Stage.RESOURCE_CREATING:
            return f"{self.stage.value}({self.resource_type}, {self.file_index})"
        return self.stage.value

    @property
    def duration(self) -> Optional[float]:
        if self.started_at and self.completed_at:
            return self.completed_at - self.started_at
        return None

    def to_dict(self) -> dict:
        d: dict[str, Any] = {
            'bundle_id': self.bundle_id,
            'cloud_region_id': self.cloud_region_id,
            'namespace': self.namespace,
            'stage': self.stage.value,
            'resources': {k: list(v) for k, v in self.resources.items()},
        }
        for name in ('external_id', 'internal_id', 'resource_type', 'file_index',
                     'started_at', 'completed_at', 'error'):
            value = getattr(self, name)
            if value is not None:
                d[name] = value
        return d

    @classmethod
    def from_dict(cls, data: dict) -> 'InstantiationState':
        return cls(
            bundle_id=data['bundle_id'],
            cloud_region_id=data['cloud_region_id'],
            namespace=data['namespace'],
            stage=Stage(data.get('stage', Stage.IDLE.value)),
            external_id=data.get('external_id'),
            internal_id=data.get('internal_id'),
            resource_type=data.get('resource_type'),
            file_index=data.get('file_index'),
            resources={k: list(v) for k, v in data.get('resources', {}).items()},
            started_at=data.get('started_at'),
            completed_at=data.get('completed_at'),
            error=data.get('error'),
        )
