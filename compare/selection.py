"""
Comparison selection: the ordered set of up to four programs being compared.

A CompareSession is built once per browsing session (Streamlit keeps it in
st.session_state, the API builds one per request) and handed to whatever
needs it. Nothing here is a module-level singleton.
"""

from collections.abc import Iterable, Iterator

from catalog.models import Program

MAX_COMPARE = 4


class CompareSelection:
    """Ordered programs, unique by program_id, at most MAX_COMPARE long."""

    def __init__(self, programs: Iterable[Program] = ()):
        self._programs: list[Program] = list(programs)

    def __len__(self) -> int:
        return len(self._programs)

    def __iter__(self) -> Iterator[Program]:
        return iter(self._programs)

    def __getitem__(self, index: int) -> Program:
        return self._programs[index]

    @property
    def programs(self) -> list[Program]:
        return list(self._programs)

    @property
    def ids(self) -> list[str]:
        return [p.program_id for p in self._programs]

    @property
    def is_full(self) -> bool:
        return len(self._programs) >= MAX_COMPARE

    def contains(self, program_id: str) -> bool:
        return any(p.program_id == program_id for p in self._programs)

    def add(self, program: Program) -> bool:
        """Append program; False (and no change) if present or at capacity."""
        if self.contains(program.program_id) or self.is_full:
            return False
        self._programs.append(program)
        return True

    def remove(self, program_id: str) -> None:
        self._programs = [p for p in self._programs if p.program_id != program_id]

    def clear(self) -> None:
        self._programs = []

    def replace_all(self, programs: Iterable[Program]) -> None:
        """Replace the whole list verbatim (used when hydrating a shared link)."""
        self._programs = list(programs)


class CompareSession:
    """Per-session UI state: the selection, the tray flag and the theme."""

    def __init__(self, selection: CompareSelection | None = None, theme: str = "light"):
        self.selection = selection if selection is not None else CompareSelection()
        self.theme = theme
        self._tray_hidden = False

    @property
    def tray_visible(self) -> bool:
        return len(self.selection) > 0 and not self._tray_hidden

    def show_tray(self) -> None:
        self._tray_hidden = False

    def hide_tray(self) -> None:
        self._tray_hidden = True

    def toggle(self, program: Program) -> bool:
        """Add or remove program; False only when an add was rejected."""
        if self.selection.contains(program.program_id):
            self.selection.remove(program.program_id)
            return True
        return self.selection.add(program)

    def clear(self) -> None:
        self.selection.clear()
        self._tray_hidden = False
