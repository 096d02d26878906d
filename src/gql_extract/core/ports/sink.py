from typing import Protocol

from gql_extract.models import FeatureFlags


class ComponentSink(Protocol):
    async def set_component_features(self, component_path: str, features: FeatureFlags) -> None: ...

    async def extraction_succeeded(self, component_path: str) -> None: ...

    async def extraction_failed(self, component_path: str, error: BaseException | None = None) -> None: ...
