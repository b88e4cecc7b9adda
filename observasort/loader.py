"""
Custom sorter plug-ins.

A plug-in is a ``.py`` file that defines either

  SORTER = MySorter()            # an ObservableArraySorterBase (instance or class)

or

  async def sort(array, token):  # drives the engine's operations
      ...

plus an optional ``NAME`` used as the display name. A SortPack is a zip of
such files.
"""
import importlib.util
import inspect
import logging
import os
import tempfile
import zipfile

from observasort.trace import ObservableArraySorterBase

logger = logging.getLogger(__name__)


class FunctionSorter(ObservableArraySorterBase):
    """Adapts a plug-in's bare ``sort(array, token)`` coroutine."""

    def __init__(self, fn, name=""):
        self._fn  = fn
        self.name = name or fn.__name__

    async def _sort(self, array, vars, token):
        await self._fn(array, token)


def load_custom_sorter(filepath: str, registry: dict):
    """
    Load a .py file as a custom sorter and add it to ``registry``.

    Returns (name, None) on success, (None, error_str) on failure.
    """
    filepath = os.path.abspath(filepath)
    default_name = os.path.splitext(os.path.basename(filepath))[0]
    try:
        spec   = importlib.util.spec_from_file_location(f"_observasort_plugin_{default_name}", filepath)
        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)
    except Exception as e:
        logger.warning("Could not import %s: %s", filepath, e)
        return None, str(e)

    name = getattr(module, "NAME", default_name)
    sorter = getattr(module, "SORTER", None)
    if inspect.isclass(sorter) and issubclass(sorter, ObservableArraySorterBase):
        sorter = sorter()
    if sorter is None and inspect.iscoroutinefunction(getattr(module, "sort", None)):
        sorter = FunctionSorter(module.sort, name)
    if not isinstance(sorter, ObservableArraySorterBase):
        return None, "No SORTER or async sort(array, token) found"

    sorter.name = name
    if name in registry:
        logger.info("Custom sorter %r replaces an existing entry", name)
    registry[name] = sorter
    logger.info("Loaded custom sorter %r from %s", name, filepath)
    return name, None


def load_sortpack(zip_path: str, registry: dict) -> list:
    """Load every .py inside a zip archive; returns the names that loaded."""
    loaded = []
    with tempfile.TemporaryDirectory() as tmpdir:
        with zipfile.ZipFile(zip_path, 'r') as zf:
            zf.extractall(tmpdir)
        for root, dirs, files in os.walk(tmpdir):
            for fname in sorted(files):
                if not fname.endswith(".py"):
                    continue
                name, err = load_custom_sorter(os.path.join(root, fname), registry)
                if name:
                    loaded.append(name)
                else:
                    logger.warning("Skipped %s in %s: %s", fname, zip_path, err)
    return loaded


def load_path(path: str, registry: dict) -> list:
    if path.lower().endswith(".zip"):
        return load_sortpack(path, registry)
    name, err = load_custom_sorter(path, registry)
    if err:
        raise ValueError(f"{path}: {err}")
    return [name]
