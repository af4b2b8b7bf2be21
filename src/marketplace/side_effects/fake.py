"""Recording side-effect handler for tests and local runs."""

from marketplace.errors import NotificationDispatchError
from marketplace.side_effects.port import SideEffectPort


class FakeSideEffectHandler(SideEffectPort):
    """Records every call and answers with a configured result or failure."""

    def __init__(self):
        self.reset()

    def reset(self):
        self.calls: list[tuple[str, dict]] = []
        self._results: dict[str, dict] = {}
        self._failures: dict[str, str] = {}

    def configure(self, function: str, result: dict | None = None, fail_with: str | None = None):
        if fail_with is not None:
            self._failures[function] = fail_with
            self._results.pop(function, None)
        else:
            self._results[function] = result or {"success": True}
            self._failures.pop(function, None)

    def invoke(self, function: str, payload: dict) -> dict:
        self.calls.append((function, dict(payload)))
        if function in self._failures:
            raise NotificationDispatchError(self._failures[function], function=function)
        return self._results.get(function, {"success": True})

    def calls_to(self, function: str) -> list[dict]:
        return [payload for name, payload in self.calls if name == function]
