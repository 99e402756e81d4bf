"""Session-scoped sidebar presentation state (collapsed sections, pinned items)."""

from __future__ import annotations


class SectionCollapseStore:
    """
    ``section title -> collapsed`` for the sections the user toggled.

    Untouched sections follow their registry default. The store is reset whenever
    the view moves to another module, so collapse and pin state never leaks from
    one module's sidebar into the next.
    """

    def __init__(self) -> None:
        self._collapsed: dict[str, bool] = {}
        self._pinned: set[str] = set()

    def is_collapsed(self, title: str, default_expanded: bool = False) -> bool:
        if title in self._collapsed:
            return self._collapsed[title]
        return not default_expanded

    def toggle(self, title: str, default_expanded: bool = False) -> bool:
        """Flip the section and return its new collapsed state."""
        collapsed = not self.is_collapsed(title, default_expanded)
        self._collapsed[title] = collapsed
        return collapsed

    def toggle_pin(self, item_path: str) -> bool:
        if item_path in self._pinned:
            self._pinned.discard(item_path)
            return False
        self._pinned.add(item_path)
        return True

    def is_pinned(self, item_path: str) -> bool:
        return item_path in self._pinned

    def pinned(self) -> tuple[str, ...]:
        return tuple(sorted(self._pinned))

    def reset(self) -> None:
        self._collapsed.clear()
        self._pinned.clear()

    def on_module_change(self, old_key: str | None, new_key: str | None) -> None:
        """Listener for ``ViewModeStateMachine.add_listener``."""
        self.reset()
