from __future__ import annotations

from typing import Iterator, List, Optional

from core.visage import Visage


class VisageCollection:
    """
    Z-ordered visages: index 0 is back-most, the last index is front-most.
    Tracks at most one selected visage by index.
    """

    def __init__(self, visages: Optional[List[Visage]] = None):
        self._visages: List[Visage] = list(visages or [])
        self.selected_index: int = 0
        self.has_selection: bool = False

    def __len__(self) -> int:
        return len(self._visages)

    def __iter__(self) -> Iterator[Visage]:
        return iter(self._visages)

    def __getitem__(self, index: int) -> Visage:
        return self._visages[index]

    def __contains__(self, visage: object) -> bool:
        return any(v is visage for v in self._visages)

    @property
    def selected(self) -> Optional[Visage]:
        if not self.has_selection:
            return None
        return self._visages[self.selected_index]

    def select(self, index: int) -> None:
        if not 0 <= index < len(self._visages):
            raise IndexError(f"visage index {index} out of range")
        self.selected_index = index
        self.has_selection = True

    def deselect(self) -> None:
        self.has_selection = False
        self.selected_index = 0

    def insert_front(self, visage: Visage) -> int:
        self._visages.append(visage)
        return len(self._visages) - 1

    def remove_at(self, index: int) -> Visage:
        removed = self._visages.pop(index)
        if not self._visages:
            self.deselect()
        else:
            # Selection snaps to whatever is now front-most.
            self.select(len(self._visages) - 1)
        return removed

    def clear(self) -> None:
        self._visages.clear()
        self.deselect()

    def _respliced(self, index: int, new_index: int) -> int:
        visage = self._visages.pop(index)
        self._visages.insert(new_index, visage)
        if self.has_selection and self.selected_index == index:
            self.selected_index = new_index
        elif self.has_selection:
            # Another element moved past the selection; follow it by identity.
            self.selected_index = self._shifted(index, new_index, self.selected_index)
        return new_index

    @staticmethod
    def _shifted(old: int, new: int, sel: int) -> int:
        if old < sel <= new:
            return sel - 1
        if new <= sel < old:
            return sel + 1
        return sel

    def move_to_front(self, index: int) -> int:
        return self._respliced(index, len(self._visages) - 1)

    def move_to_back(self, index: int) -> int:
        return self._respliced(index, 0)

    def hit_test(self, x: int, y: int) -> Optional[int]:
        for i in range(len(self._visages) - 1, -1, -1):
            if self._visages[i].contains(x, y):
                return i
        return None

    def translate_all(self, dx: int, dy: int) -> None:
        for v in self._visages:
            v.move_by(dx, dy)
