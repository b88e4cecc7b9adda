# ============================================================
# ObservaSort - Custom Sorter Template
# ============================================================
#
# Rules:
#   1. Define  async def sort(array, token)  or  SORTER = MySorter()
#      (a subclass of observasort.ObservableArraySorterBase).
#   2. Only use the engine's operations: compare, compare_with_val,
#      compare_values, swap, get, set. Never index the array yourself.
#   3. Let SortCancelled propagate; call token.raise_if_cancelled()
#      at the top of recursive helpers.
#   4. Optionally set NAME = "My Algorithm"  (used as display name)
#
# Load it with:  python main.py --load example_custom_sorter.py
# ============================================================

NAME = "Stooge Sort"   # <-- change this to whatever you like


async def sort(array, token):
    """Stooge Sort - O(n^2.7) - famously terrible, famously entertaining."""

    async def stooge(lo, hi):
        token.raise_if_cancelled()
        if await array.compare(lo, ">", hi):
            await array.swap(lo, hi)

        if hi - lo + 1 > 2:
            t = (hi - lo + 1) // 3
            await stooge(lo, hi - t)
            await stooge(lo + t, hi)
            await stooge(lo, hi - t)

    if array.length > 1:
        await stooge(0, array.length - 1)
