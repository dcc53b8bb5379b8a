# backend/core/hooks.py
"""
Named extension points and the registry the host dispatches through.

Extensions never call each other. The host invokes the registry at fixed
lifecycle points; every callback registered against a point runs in
ascending priority order (ties keep registration order).

Three kinds of point:

* ``filter``  - each callback receives the current value (plus extra
  arguments) and returns the value handed to the next callback.
* ``action``  - callbacks run for their side effects; return values are ignored.
* ``render``  - callbacks return markup; the registry joins it in order.
"""
import inspect
import logging
from collections import defaultdict
from enum import Enum
from typing import Any, Callable, Dict, List, Tuple

from markupsafe import Markup

logger = logging.getLogger(__name__)


class HookKind(str, Enum):
    FILTER = "filter"
    ACTION = "action"
    RENDER = "render"


class ExtensionPoint(Enum):
    """Lifecycle points exposed by the affiliate host"""
    REGISTRATION_VALIDATE = ("registration_validate", HookKind.FILTER)
    REGISTRATION_FORM = ("registration_form", HookKind.RENDER)
    REGISTRATION_FIELDS = ("registration_fields", HookKind.FILTER)
    AFFILIATE_INSERT = ("affiliate_insert", HookKind.ACTION)
    AFFILIATE_UPDATE = ("affiliate_update", HookKind.ACTION)
    ACCOUNT_TOP = ("account_top", HookKind.RENDER)
    ADMIN_AFTER_STATUS = ("admin_after_status", HookKind.RENDER)
    LIST_COLUMNS = ("list_columns", HookKind.FILTER)
    LIST_COLUMN_VALUE = ("list_column_value", HookKind.FILTER)

    def __init__(self, point_name: str, kind: HookKind):
        self.point_name = point_name
        self.kind = kind


DEFAULT_PRIORITY = 10


class HookRegistry:
    def __init__(self):
        self._callbacks: Dict[ExtensionPoint, List[Tuple[int, int, Callable]]] = defaultdict(list)
        self._sequence = 0

    def add(self, point: ExtensionPoint, callback: Callable, priority: int = DEFAULT_PRIORITY) -> None:
        self._sequence += 1
        self._callbacks[point].append((priority, self._sequence, callback))
        self._callbacks[point].sort(key=lambda entry: (entry[0], entry[1]))
        logger.debug(f"Registered {getattr(callback, '__qualname__', callback)} on {point.point_name} (priority {priority})")

    def callbacks(self, point: ExtensionPoint) -> List[Callable]:
        return [callback for _, _, callback in self._callbacks.get(point, [])]

    def has(self, point: ExtensionPoint) -> bool:
        return bool(self._callbacks.get(point))

    @staticmethod
    def _require(point: ExtensionPoint, kind: HookKind) -> None:
        if point.kind is not kind:
            raise ValueError(f"{point.point_name} is a {point.kind.value} point, not a {kind.value} point")

    @staticmethod
    async def _call(callback: Callable, *args) -> Any:
        result = callback(*args)
        if inspect.isawaitable(result):
            result = await result
        return result

    async def apply_filters(self, point: ExtensionPoint, value: Any, *args) -> Any:
        self._require(point, HookKind.FILTER)
        for callback in self.callbacks(point):
            value = await self._call(callback, value, *args)
        return value

    async def do_action(self, point: ExtensionPoint, *args) -> None:
        self._require(point, HookKind.ACTION)
        for callback in self.callbacks(point):
            await self._call(callback, *args)

    async def render(self, point: ExtensionPoint, *args) -> Markup:
        self._require(point, HookKind.RENDER)
        fragments = []
        for callback in self.callbacks(point):
            fragment = await self._call(callback, *args)
            if fragment:
                fragments.append(Markup(fragment))
        return Markup("").join(fragments)
