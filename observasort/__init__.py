"""ObservaSort: sorting algorithms animated through an observable array."""
from observasort.cancel import CancelToken, SortCancelled
from observasort.engine import ObservableArray, OperationContext, StyleKind, Waveform
from observasort.operators import CompareOp, InvalidOperatorError
from observasort.settings import SortConfig
from observasort.sorters import SORTERS, build_registry
from observasort.stats import Stats
from observasort.trace import ObservableArraySorterBase, VariableTrace

__version__ = "0.3.0"
