"""
Variable trace: live display of a sorter's scratch variables.

A sorter gets a fresh ``VariableTrace`` per run and mirrors its loop indices,
pivots and temp arrays into it with ``set_var`` / ``get_var`` /
``delete_var``. Each call pushes the change to a ``TraceRenderer`` so the UI
can show the variables next to the bars. None of this affects the sort.
"""
from __future__ import annotations

import logging
import numbers
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Protocol

from observasort.cancel import CancelToken

if TYPE_CHECKING:
    from observasort.engine import ObservableArray
    from observasort.stats import Stats

logger = logging.getLogger(__name__)


class TraceRenderer(Protocol):
    def show_var(self, name: str, value) -> None: ...
    def remove_var(self, name: str) -> None: ...
    def clear_vars(self) -> None: ...


class NullTraceRenderer:
    def show_var(self, name, value):
        pass

    def remove_var(self, name):
        pass

    def clear_vars(self):
        pass


def _is_number(value) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def format_value(value) -> str:
    """Render a traced value as it appears in the variables panel."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return f'"{value}"'
    if _is_number(value):
        return str(value)
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(format_value(v) for v in value) + "]"
    raise TypeError(f"Unknown value type: {type(value).__name__}")


class VariableTrace:
    """Ordered name -> value bag; every access re-renders that variable."""

    def __init__(self, renderer: TraceRenderer | None = None):
        self._vars: dict = {}
        self._renderer = renderer if renderer is not None else NullTraceRenderer()

    @staticmethod
    def _accept(value):
        if isinstance(value, (bool, str)) or _is_number(value):
            return value
        if isinstance(value, (list, tuple)):
            if not all(_is_number(v) for v in value):
                raise TypeError("Traced sequences may only hold numbers")
            return list(value)
        raise TypeError(f"Cannot trace value of type {type(value).__name__}")

    def set_var(self, name: str, value):
        value = self._accept(value)
        self._vars[name] = value
        self._renderer.show_var(name, value)
        return value

    def get_var(self, name: str):
        value = self._vars[name]
        self._renderer.show_var(name, value)
        return value

    def delete_var(self, name: str) -> bool:
        if name not in self._vars:
            return False
        del self._vars[name]
        self._renderer.remove_var(name)
        return True

    def discard(self):
        """Drop every variable and its rendering."""
        logger.debug("Discarding %d traced variables", len(self._vars))
        for name in list(self._vars):
            del self._vars[name]
            self._renderer.remove_var(name)
        self._renderer.clear_vars()

    def names(self) -> list[str]:
        return list(self._vars)

    def __contains__(self, name):
        return name in self._vars

    def __len__(self):
        return len(self._vars)


class ObservableArraySorterBase(ABC):
    """
    Base for every sorter.

    ``sort`` wraps the algorithm in a fresh ``VariableTrace`` and discards it
    at the end, whether the run completed, was cancelled or raised.
    ``SortCancelled`` and any other exception propagate unchanged.
    """
    name: str = ""

    async def sort(self, array: ObservableArray, token: CancelToken | None = None) -> Stats:
        if token is None:
            token = array.cancel_token
        trace = VariableTrace(array.tracer)
        try:
            with array.bind_token(token):
                await self._sort(array, trace, token)
        finally:
            trace.discard()
        return array.stats

    @abstractmethod
    async def _sort(self, array: ObservableArray, vars: VariableTrace, token: CancelToken):
        ...

    def __repr__(self):
        return f"{type(self).__name__}()"
