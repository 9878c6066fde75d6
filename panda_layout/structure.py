"""Immutable ordered section-to-items structure rendered by the dashboard."""

from __future__ import annotations

import dataclasses as dc
import typing as typ

from .model import Module, SemanticSection, module_label


@dc.dataclass(frozen=True, slots=True)
class SectionEntry:
    """One populated section and its items in display order."""

    section: SemanticSection
    items: tuple[Module, ...]


@dc.dataclass(frozen=True, slots=True)
class Structure:
    """Ordered sequence of populated sections.

    Construction validates that no section repeats, no section is empty, and
    no module identity appears twice.

    Raises
    ------
    ValueError
        If any of those invariants is violated.
    """

    entries: tuple[SectionEntry, ...] = ()

    def __post_init__(self) -> None:
        seen_sections: set[SemanticSection] = set()
        seen_items: set[Module] = set()
        for entry in self.entries:
            if entry.section in seen_sections:
                msg = f"Section {entry.section.value!r} appears more than once."
                raise ValueError(msg)
            if not entry.items:
                msg = f"Section {entry.section.value!r} has no items."
                raise ValueError(msg)
            seen_sections.add(entry.section)
            for item in entry.items:
                if item in seen_items:
                    msg = f"Item {module_label(item)!r} appears more than once."
                    raise ValueError(msg)
                seen_items.add(item)

    @classmethod
    def from_pairs(
        cls,
        pairs: typ.Iterable[tuple[SemanticSection, typ.Iterable[Module]]],
    ) -> Structure:
        """Build a structure from ``(section, items)`` pairs."""
        return cls(
            tuple(SectionEntry(section, tuple(items)) for section, items in pairs)
        )

    @property
    def sections(self) -> tuple[SemanticSection, ...]:
        return tuple(entry.section for entry in self.entries)

    @property
    def item_count(self) -> int:
        return sum(len(entry.items) for entry in self.entries)

    @property
    def is_empty(self) -> bool:
        return not self.entries

    def items(self, section: SemanticSection) -> tuple[Module, ...]:
        """Return the items of ``section``, or an empty tuple when absent."""
        for entry in self.entries:
            if entry.section is section:
                return entry.items
        return ()

    def section_at(self, index: int) -> SemanticSection | None:
        """Return the section identity at ``index``, or ``None`` if out of range."""
        if 0 <= index < len(self.entries):
            return self.entries[index].section
        return None

    def item_at(self, section_index: int, item_index: int) -> Module | None:
        """Return the module at the given position, or ``None`` if out of range."""
        if not 0 <= section_index < len(self.entries):
            return None
        items = self.entries[section_index].items
        if 0 <= item_index < len(items):
            return items[item_index]
        return None

    def locate(self, module: Module) -> tuple[int, int] | None:
        """Return ``(section_index, item_index)`` of ``module``, if present."""
        for section_index, entry in enumerate(self.entries):
            for item_index, item in enumerate(entry.items):
                if item == module:
                    return section_index, item_index
        return None

    def as_dict(self) -> dict[str, list[str]]:
        """Return a plain mapping of section names to item labels."""
        return {
            entry.section.value: [module_label(item) for item in entry.items]
            for entry in self.entries
        }


EMPTY_STRUCTURE = Structure()


__all__ = ["EMPTY_STRUCTURE", "SectionEntry", "Structure"]
