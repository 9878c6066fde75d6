"""Structural mutations a rendering sink applies to reach a new structure.

Every index in a mutation refers to the sink's state at the moment that
mutation is applied, so a sink applies a :class:`MutationSequence` strictly
in order. :func:`apply_mutations` is the reference implementation of those
semantics; sinks that track their own copy of the structure can use it
directly.

Example
-------
>>> from panda_layout.model import Greeting, SemanticSection
>>> from panda_layout.structure import EMPTY_STRUCTURE
>>> steps = [
...     InsertSection(SemanticSection.HEADER, 0),
...     InsertItem(Greeting(), SemanticSection.HEADER, 0),
... ]
>>> apply_mutations(EMPTY_STRUCTURE, steps).as_dict()
{'header': ['greeting']}
"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

from .model import Module, SemanticSection, module_label
from .structure import Structure

if typ.TYPE_CHECKING:  # pragma: no cover - import for type hints only
    from .anomalies import Anomaly


class MutationError(ValueError):
    """Raised when a mutation does not match the structure it is applied to."""


@dc.dataclass(frozen=True, slots=True)
class InsertSection:
    """Insert an empty ``section`` at ``index``."""

    section: SemanticSection
    index: int

    def describe(self) -> str:
        return f"insert section {self.section.value} at {self.index}"


@dc.dataclass(frozen=True, slots=True)
class DeleteSection:
    """Delete ``section`` at ``index`` together with any items it still holds."""

    section: SemanticSection
    index: int

    def describe(self) -> str:
        return f"delete section {self.section.value} at {self.index}"


@dc.dataclass(frozen=True, slots=True)
class MoveSection:
    """Move ``section`` from ``from_index`` to ``to_index``."""

    section: SemanticSection
    from_index: int
    to_index: int

    def describe(self) -> str:
        return (
            f"move section {self.section.value} "
            f"from {self.from_index} to {self.to_index}"
        )


@dc.dataclass(frozen=True, slots=True)
class InsertItem:
    """Insert ``module`` into ``section`` at ``index``."""

    module: Module
    section: SemanticSection
    index: int

    def describe(self) -> str:
        return (
            f"insert {module_label(self.module)} into "
            f"{self.section.value} at {self.index}"
        )


@dc.dataclass(frozen=True, slots=True)
class DeleteItem:
    """Delete ``module`` found in ``section`` at ``index``."""

    module: Module
    section: SemanticSection
    index: int

    def describe(self) -> str:
        return (
            f"delete {module_label(self.module)} from "
            f"{self.section.value} at {self.index}"
        )


@dc.dataclass(frozen=True, slots=True)
class MoveItem:
    """Move ``module`` between positions, possibly across sections.

    ``to_index`` is measured after the module has been removed from its
    source position.
    """

    module: Module
    from_section: SemanticSection
    from_index: int
    to_section: SemanticSection
    to_index: int

    def describe(self) -> str:
        return (
            f"move {module_label(self.module)} from "
            f"{self.from_section.value}[{self.from_index}] to "
            f"{self.to_section.value}[{self.to_index}]"
        )


Mutation = (
    InsertSection | DeleteSection | MoveSection | InsertItem | DeleteItem | MoveItem
)


@dc.dataclass(frozen=True, slots=True)
class MutationSequence:
    """Ordered mutations plus the anomalies recorded while computing them."""

    mutations: tuple[Mutation, ...] = ()
    anomalies: tuple[Anomaly, ...] = ()

    def __iter__(self) -> typ.Iterator[Mutation]:
        return iter(self.mutations)

    def __len__(self) -> int:
        return len(self.mutations)

    @property
    def is_empty(self) -> bool:
        return not self.mutations


def _section_position(
    working: list[tuple[SemanticSection, list[Module]]],
    section: SemanticSection,
) -> int:
    for index, (candidate, _) in enumerate(working):
        if candidate is section:
            return index
    msg = f"Section {section.value!r} is not present."
    raise MutationError(msg)


def _checked_section(
    working: list[tuple[SemanticSection, list[Module]]],
    section: SemanticSection,
    index: int,
) -> list[Module]:
    if not 0 <= index < len(working) or working[index][0] is not section:
        msg = f"Section {section.value!r} is not at index {index}."
        raise MutationError(msg)
    return working[index][1]


def _pop_item(
    working: list[tuple[SemanticSection, list[Module]]],
    module: Module,
    section: SemanticSection,
    index: int,
) -> None:
    items = working[_section_position(working, section)][1]
    if not 0 <= index < len(items) or items[index] != module:
        msg = f"Item {module_label(module)!r} is not at {section.value}[{index}]."
        raise MutationError(msg)
    del items[index]


def _insert_item(
    working: list[tuple[SemanticSection, list[Module]]],
    module: Module,
    section: SemanticSection,
    index: int,
) -> None:
    items = working[_section_position(working, section)][1]
    if not 0 <= index <= len(items):
        msg = f"Cannot insert {module_label(module)!r} at {section.value}[{index}]."
        raise MutationError(msg)
    items.insert(index, module)


def apply_mutations(
    structure: Structure, mutations: typ.Iterable[Mutation]
) -> Structure:
    """Apply ``mutations`` in order to ``structure`` and return the result.

    Raises
    ------
    MutationError
        If a mutation refers to a section or item that is not where it says.
    ValueError
        If the result violates the structure invariants (for example a
        section left empty).
    """
    working = [(entry.section, list(entry.items)) for entry in structure.entries]
    for mutation in mutations:
        match mutation:
            case InsertSection(section=section, index=index):
                if any(existing is section for existing, _ in working):
                    msg = f"Section {section.value!r} is already present."
                    raise MutationError(msg)
                if not 0 <= index <= len(working):
                    msg = f"Cannot insert section {section.value!r} at {index}."
                    raise MutationError(msg)
                working.insert(index, (section, []))
            case DeleteSection(section=section, index=index):
                _checked_section(working, section, index)
                del working[index]
            case MoveSection(section=section, from_index=source, to_index=target):
                _checked_section(working, section, source)
                entry = working.pop(source)
                if not 0 <= target <= len(working):
                    msg = f"Cannot move section {section.value!r} to {target}."
                    raise MutationError(msg)
                working.insert(target, entry)
            case InsertItem(module=module, section=section, index=index):
                _insert_item(working, module, section, index)
            case DeleteItem(module=module, section=section, index=index):
                _pop_item(working, module, section, index)
            case MoveItem():
                _pop_item(
                    working, mutation.module, mutation.from_section, mutation.from_index
                )
                _insert_item(
                    working, mutation.module, mutation.to_section, mutation.to_index
                )
            case _:
                msg = f"Unknown mutation {mutation!r}"
                raise MutationError(msg)
    return Structure.from_pairs(working)


__all__ = [
    "DeleteItem",
    "DeleteSection",
    "InsertItem",
    "InsertSection",
    "MoveItem",
    "MoveSection",
    "Mutation",
    "MutationError",
    "MutationSequence",
    "apply_mutations",
]
