"""In-process connectivity source.

The host shell (or the REST surface) pushes transitions with publish();
subscribers receive every published value synchronously.
"""

from collections.abc import Callable


class ConnectivityFeed:
    def __init__(self) -> None:
        self._callbacks: list[Callable[[bool], None]] = []
        self.last_published: bool | None = None

    def subscribe(self, callback: Callable[[bool], None]) -> Callable[[], None]:
        self._callbacks.append(callback)
        if self.last_published is not None:
            callback(self.last_published)

        def unsubscribe() -> None:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

        return unsubscribe

    def publish(self, online: bool) -> None:
        self.last_published = online
        for callback in list(self._callbacks):
            callback(online)
