"""
Sorting algorithms expressed only through the engine's operations.

None of these index the array directly: every read goes through ``get`` /
``compare`` / ``compare_with_val``, every write through ``set`` / ``swap``,
so every step is counted, sounded, paced and cancellable.
"""
from observasort.cancel import CancelToken
from observasort.engine import ObservableArray
from observasort.trace import ObservableArraySorterBase, VariableTrace

# ============================================================
# ===================== COMPARISON SORTS =====================
# ============================================================


class BubbleSort(ObservableArraySorterBase):
    name = "Bubble Sort"

    async def _sort(self, array: ObservableArray, vars: VariableTrace, token: CancelToken):
        n = array.length
        for i in range(n):
            vars.set_var("i", i)
            for j in range(n - i - 1):
                vars.set_var("j", j)
                if await array.compare(j, ">", j + 1):
                    await array.swap(j, j + 1)
            vars.delete_var("j")
        vars.delete_var("i")


class InsertionSort(ObservableArraySorterBase):
    name = "Insertion Sort"

    async def _sort(self, array: ObservableArray, vars: VariableTrace, token: CancelToken):
        for i in range(array.length):
            vars.set_var("i", i)
            j = vars.set_var("j", i)
            x = vars.set_var("x", await array.get(i))
            # shift the sorted prefix right until x fits
            while j > 0 and await array.compare_with_val(j - 1, ">", x):
                j = vars.set_var("j", j - 1)
                await array.set(j + 1, await array.get(j))
            await array.set(j, x)
            vars.delete_var("x")
            vars.delete_var("j")
        vars.delete_var("i")


class SelectionSort(ObservableArraySorterBase):
    name = "Selection Sort"

    async def _sort(self, array: ObservableArray, vars: VariableTrace, token: CancelToken):
        n = array.length
        for i in range(n - 1):
            vars.set_var("i", i)
            min_index = vars.set_var("minIndex", i)
            for j in range(i + 1, n):
                vars.set_var("j", j)
                if await array.compare(j, "<", min_index):
                    min_index = vars.set_var("minIndex", j)
            vars.delete_var("j")
            await array.swap(i, min_index)
            vars.delete_var("minIndex")
        vars.delete_var("i")


class QuickSort(ObservableArraySorterBase):
    """
    Quick sort with a median-of-three style pivot and a Lomuto partition.

    The pivot choice XORs two orderings per candidate rather than computing a
    true median, so it can pick a non-median; on a three-way tie it picks
    ``high``. Kept as is on purpose.
    """
    name = "Quick Sort"

    async def _sort(self, array: ObservableArray, vars: VariableTrace, token: CancelToken):
        await self._quick_sort(array, vars, token, 0, array.length - 1)
        vars.delete_var("pivotIndex")

    async def _quick_sort(self, array, vars, token, low, high):
        token.raise_if_cancelled()
        if low < high:
            pivot_index = await self.find_pivot(array, low, high, vars)
            split = vars.set_var("pivotIndex",
                                 await self._partition(array, vars, low, high, pivot_index))
            await self._quick_sort(array, vars, token, low, split - 1)
            await self._quick_sort(array, vars, token, split + 1, high)

    async def _partition(self, array, vars, low, high, pivot_index) -> int:
        pivot_value = vars.set_var("pivotValue", await array.get(pivot_index))
        await array.swap(pivot_index, high)
        i = vars.set_var("i", low)

        for j in range(low, high):
            vars.set_var("j", j)
            if await array.compare_with_val(j, "<=", pivot_value):
                await array.swap(i, j)
                i = vars.set_var("i", i + 1)
        vars.delete_var("j")

        await array.swap(i, high)
        vars.delete_var("pivotValue")
        vars.delete_var("i")
        return i

    async def find_pivot(self, array: ObservableArray, low: int, high: int,
                         vars: VariableTrace | None = None) -> int:
        if vars is None:
            vars = VariableTrace()
        mid = vars.set_var("midIndex", (low + high) // 2)

        low_value  = vars.set_var("lowValue",  await array.get(low))
        mid_value  = vars.set_var("midValue",  await array.get(mid))
        high_value = vars.set_var("highValue", await array.get(high))

        if (low_value > mid_value) ^ (low_value > high_value):
            pivot_index = low
        elif (mid_value < low_value) ^ (mid_value < high_value):
            pivot_index = mid
        else:
            pivot_index = high

        for name in ("lowValue", "midValue", "highValue", "midIndex"):
            vars.delete_var(name)
        return pivot_index


class HeapSort(ObservableArraySorterBase):
    name = "Heap Sort"

    async def _sort(self, array: ObservableArray, vars: VariableTrace, token: CancelToken):
        n = array.length
        for i in range(n // 2 - 1, -1, -1):
            await self._heapify(array, token, n, i)

        for i in range(n - 1, 0, -1):
            await array.swap(0, i)
            await self._heapify(array, token, i, 0)

    async def _heapify(self, array, token, n, i):
        token.raise_if_cancelled()
        largest = i
        left, right = 2 * i + 1, 2 * i + 2

        if left < n and await array.compare(left, ">", largest):
            largest = left
        if right < n and await array.compare(right, ">", largest):
            largest = right

        if largest != i:
            await array.swap(i, largest)
            await self._heapify(array, token, n, largest)


class ShellSort(ObservableArraySorterBase):
    name = "Shell Sort"

    async def _sort(self, array: ObservableArray, vars: VariableTrace, token: CancelToken):
        n = array.length
        gap = n // 2
        while gap > 0:
            for i in range(gap, n):
                temp = await array.get(i)
                j = i
                while j >= gap and await array.compare_with_val(j - gap, ">", temp):
                    await array.set(j, await array.get(j - gap))
                    j -= gap
                await array.set(j, temp)
            gap //= 2


class CombSort(ObservableArraySorterBase):
    name = "Comb Sort"
    shrink = 1.3

    async def _sort(self, array: ObservableArray, vars: VariableTrace, token: CancelToken):
        n = array.length
        gap = n
        swapped = True

        while gap != 1 or swapped:
            gap = max(1, int(gap / self.shrink))
            swapped = False
            for i in range(n - gap):
                if await array.compare(i + gap, "<", i):
                    await array.swap(i, i + gap)
                    swapped = True


class MergeSort(ObservableArraySorterBase):
    name = "Merge Sort"

    async def _sort(self, array: ObservableArray, vars: VariableTrace, token: CancelToken):
        await self._merge_sort(array, vars, token, 0, array.length - 1)

    async def _merge_sort(self, array, vars, token, left, right):
        token.raise_if_cancelled()
        if left < right:
            mid = (left + right) // 2
            await self._merge_sort(array, vars, token, left, mid)
            await self._merge_sort(array, vars, token, mid + 1, right)
            await self._merge(array, vars, left, mid, right)

    async def _merge(self, array, vars, left, mid, right):
        n1 = mid - left + 1
        n2 = right - mid

        L = [await array.get(left + i) for i in range(n1)]
        vars.set_var("L", L)
        R = [await array.get(mid + 1 + j) for j in range(n2)]
        vars.set_var("R", R)

        i = j = 0
        k = left
        while i < n1 and j < n2:
            if await array.compare_values(L[i], "<=", R[j]):
                await array.set(k, L[i])
                i += 1
            else:
                await array.set(k, R[j])
                j += 1
            k += 1

        while i < n1:
            await array.set(k, L[i])
            i += 1
            k += 1

        while j < n2:
            await array.set(k, R[j])
            j += 1
            k += 1

        vars.delete_var("L")
        vars.delete_var("R")


# ============================================================
# ====================== BUCKET SORTS ========================
# ============================================================

async def _scan_extreme(array: ObservableArray, op: str):
    """Linear scan for the min ("<") or max (">"); not tallied as comparisons."""
    best = await array.get(0)
    for i in range(1, array.length):
        if await array.compare_with_val(i, op, best, tally=False):
            best = await array.get(i)
    return best


class RadixSort(ObservableArraySorterBase):
    """LSD radix sort, base 10. Values must be non-negative integers."""
    name = "Radix Sort"
    base = 10

    async def _sort(self, array: ObservableArray, vars: VariableTrace, token: CancelToken):
        if array.length == 0:
            return
        max_value = int(await _scan_extreme(array, ">"))
        exp = 1
        while max_value // exp > 0:
            token.raise_if_cancelled()
            await self._count_sort(array, exp)
            exp *= self.base

    async def _count_sort(self, array, exp):
        n = array.length
        output = [0] * n
        count = [0] * self.base

        for i in range(n):
            count[int(await array.get(i)) // exp % self.base] += 1

        for d in range(1, self.base):
            count[d] += count[d - 1]

        # walk backwards so equal digits keep their order
        for i in range(n - 1, -1, -1):
            value = await array.get(i)
            digit = int(value) // exp % self.base
            output[count[digit] - 1] = value
            count[digit] -= 1

        for i in range(n):
            await array.set(i, output[i])


class PigeonholeSort(ObservableArraySorterBase):
    """Pigeonhole sort over integer values."""
    name = "Pigeonhole Sort"

    async def _sort(self, array: ObservableArray, vars: VariableTrace, token: CancelToken):
        n = array.length
        if n == 0:
            return
        lo = int(await _scan_extreme(array, "<"))
        hi = int(await _scan_extreme(array, ">"))

        holes = [0] * (hi - lo + 1)
        for i in range(n):
            holes[int(await array.get(i)) - lo] += 1

        k = 0
        for offset, count in enumerate(holes):
            for _ in range(count):
                await array.set(k, offset + lo)
                k += 1


# ============================================================
# ======================== REGISTRY ==========================
# ============================================================

SORTER_CLASSES = (
    BubbleSort,
    MergeSort,
    InsertionSort,
    SelectionSort,
    QuickSort,
    HeapSort,
    RadixSort,
    ShellSort,
    CombSort,
    PigeonholeSort,
)


def build_registry() -> dict:
    """Fresh display-name -> sorter mapping, in menu order."""
    return {cls.name: cls() for cls in SORTER_CLASSES}


SORTERS = build_registry()
