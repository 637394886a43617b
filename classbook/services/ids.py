import re
from collections.abc import Iterable

from classbook.core.sheets import get_layout
from classbook.services.sheet_store import SheetStore


def highest_suffix(ids: Iterable[str], prefix: str) -> int:
    pattern = re.compile(rf"^{re.escape(prefix)}(\d+)$")
    highest = 0
    for value in ids:
        match = pattern.match(value or "")
        if match:
            highest = max(highest, int(match.group(1)))
    return highest


class IdAllocator:
    """Hands out ``<prefix><n>`` ids above the highest one already in use."""

    def __init__(self, prefix: str, existing_ids: Iterable[str] = ()) -> None:
        self.prefix = prefix
        self._taken = set(existing_ids)
        self._counter = highest_suffix(self._taken, prefix)

    def reserve(self, value: str) -> bool:
        if value in self._taken:
            return False
        self._taken.add(value)
        return True

    def is_taken(self, value: str) -> bool:
        return value in self._taken

    def next(self) -> str:
        while True:
            self._counter += 1
            candidate = f"{self.prefix}{self._counter}"
            if self.reserve(candidate):
                return candidate


def allocator_for(store: SheetStore, sheet: str) -> IdAllocator:
    layout = get_layout(sheet)
    return IdAllocator(layout.id_prefix, (row[0] for row in store.load_list(sheet) if row))
