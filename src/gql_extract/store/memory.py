from dataclasses import dataclass
from datetime import datetime, timezone

from gql_extract.models import FeatureFlags


@dataclass(frozen=True)
class ComponentEvent:
    component_path: str
    event: str
    timestamp: datetime
    error: str | None = None


@dataclass(frozen=True)
class ComponentRecord:
    component_path: str
    features: FeatureFlags
    extraction_state: str | None
    updated: datetime


class InMemoryComponentStore:
    """Keeps the latest features and extraction state per component.

    Implements the ``ComponentSink`` protocol.
    """

    def __init__(self) -> None:
        self.components: dict[str, ComponentRecord] = {}
        self.events: list[ComponentEvent] = []

    async def set_component_features(self, component_path: str, features: FeatureFlags) -> None:
        previous = self.components.get(component_path)
        self.components[component_path] = ComponentRecord(
            component_path=component_path,
            features=features,
            extraction_state=previous.extraction_state if previous else None,
            updated=datetime.now(timezone.utc),
        )
        self._record(component_path, "features")

    async def extraction_succeeded(self, component_path: str) -> None:
        self._set_state(component_path, "success")
        self._record(component_path, "success")

    async def extraction_failed(self, component_path: str, error: BaseException | None = None) -> None:
        self._set_state(component_path, "failed")
        self._record(component_path, "failed", str(error) if error is not None else None)

    def features_for(self, component_path: str) -> FeatureFlags | None:
        record = self.components.get(component_path)
        return record.features if record else None

    def state_for(self, component_path: str) -> str | None:
        record = self.components.get(component_path)
        return record.extraction_state if record else None

    def events_for(self, component_path: str) -> list[str]:
        return [e.event for e in self.events if e.component_path == component_path]

    def _set_state(self, component_path: str, state: str) -> None:
        previous = self.components.get(component_path)
        self.components[component_path] = ComponentRecord(
            component_path=component_path,
            features=previous.features if previous else FeatureFlags(),
            extraction_state=state,
            updated=datetime.now(timezone.utc),
        )

    def _record(self, component_path: str, event: str, error: str | None = None) -> None:
        self.events.append(
            ComponentEvent(
                component_path=component_path,
                event=event,
                timestamp=datetime.now(timezone.utc),
                error=error,
            )
        )
