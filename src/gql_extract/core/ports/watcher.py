from typing import Protocol


class FileWatcherPort(Protocol):
    """Source of component-file change notifications for re-extraction."""

    @property
    def running(self) -> bool: ...

    async def start(self) -> None: ...

    async def stop(self) -> None: ...
