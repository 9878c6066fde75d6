"""Compute the mutation sequence that turns one structure into another.

The sequence is built in four passes against a working copy of the old
structure, so every emitted index is valid at the moment it is applied:

1. delete items that disappear, inside sections that survive;
2. insert or move sections into the new order;
3. insert or move items into their new positions;
4. delete sections that disappear, along with anything left inside them.

Sections and items on a longest increasing run of old positions stay put;
everything else is moved, which keeps the number of moves minimal.

Item indices during the third pass come from a precomputed slot order per
section and a Fenwick tree over the occupied slots, so the whole diff runs in
``O(n log n)`` for ``n`` items instead of scanning lists for every move.
"""

from __future__ import annotations

import bisect
import dataclasses as dc
import typing as typ

from .mutations import (
    DeleteItem,
    DeleteSection,
    InsertItem,
    InsertSection,
    MoveItem,
    MoveSection,
    Mutation,
)

if typ.TYPE_CHECKING:  # pragma: no cover - import for type hints only
    from .model import Module, SemanticSection
    from .structure import Structure

_T = typ.TypeVar("_T")

_Working = list[tuple["SemanticSection", list["Module"]]]


def _stable_subset(old_order: typ.Sequence[_T], new_order: typ.Sequence[_T]) -> set[_T]:
    """Return the largest set of shared elements whose relative order is kept.

    Elements are unique within each sequence, so the longest common
    subsequence reduces to a longest increasing subsequence of old positions.
    """
    positions = {value: index for index, value in enumerate(old_order)}
    shared = [value for value in new_order if value in positions]
    tails: list[int] = []
    tail_indices: list[int] = []
    parents: list[int] = [-1] * len(shared)
    for index, value in enumerate(shared):
        rank = positions[value]
        slot = bisect.bisect_left(tails, rank)
        if slot == len(tails):
            tails.append(rank)
            tail_indices.append(index)
        else:
            tails[slot] = rank
            tail_indices[slot] = index
        parents[index] = tail_indices[slot - 1] if slot > 0 else -1

    stable: set[_T] = set()
    cursor = tail_indices[-1] if tail_indices else -1
    while cursor != -1:
        stable.add(shared[cursor])
        cursor = parents[cursor]
    return stable


class _Occupancy:
    """Fenwick tree counting occupied slots below a given slot."""

    def __init__(self, size: int) -> None:
        self._tree = [0] * (size + 1)

    def add(self, slot: int, delta: int) -> None:
        slot += 1
        while slot < len(self._tree):
            self._tree[slot] += delta
            slot += slot & -slot

    def index_of(self, slot: int) -> int:
        """Return the number of occupied slots before ``slot``."""
        total = 0
        while slot > 0:
            total += self._tree[slot]
            slot -= slot & -slot
        return total


@dc.dataclass(slots=True)
class _SectionSlots:
    """Slot order of every item that occupies one section during item placement.

    Stable items split the section into gaps. Within a gap, items placed by
    the pass come first (in new order, since each goes right after its
    predecessor), followed by the held items still waiting to leave.
    """

    stable: set[Module]
    held: dict[Module, int]
    placed: dict[Module, int]
    occupancy: _Occupancy


def _section_slots(
    section: SemanticSection,
    held_items: list[Module],
    new_items: tuple[Module, ...],
    targets: dict[Module, SemanticSection],
) -> _SectionSlots:
    kept_here = [item for item in held_items if targets.get(item) is section]
    stable = _stable_subset(kept_here, new_items)

    placed_gaps: list[list[Module]] = [[]]
    for item in new_items:
        if item in stable:
            placed_gaps.append([])
        else:
            placed_gaps[-1].append(item)
    held_gaps: list[list[Module]] = [[]]
    anchors: list[Module] = []
    for item in held_items:
        if item in stable:
            anchors.append(item)
            held_gaps.append([])
        else:
            held_gaps[-1].append(item)

    held: dict[Module, int] = {}
    placed: dict[Module, int] = {}
    slot = 0
    for gap, (incoming, waiting) in enumerate(zip(placed_gaps, held_gaps, strict=True)):
        if gap:
            held[anchors[gap - 1]] = slot
            slot += 1
        for item in incoming:
            placed[item] = slot
            slot += 1
        for item in waiting:
            held[item] = slot
            slot += 1

    occupancy = _Occupancy(slot)
    for held_slot in held.values():
        occupancy.add(held_slot, 1)
    return _SectionSlots(stable, held, placed, occupancy)


def _section_index(working: _Working, section: SemanticSection) -> int:
    for index, (candidate, _) in enumerate(working):
        if candidate is section:
            return index
    return -1


def _delete_vanished_items(
    working: _Working,
    targets: dict[Module, SemanticSection],
    surviving: set[SemanticSection],
    mutations: list[Mutation],
) -> None:
    for position, (section, items) in enumerate(working):
        if section not in surviving:
            continue
        for index in range(len(items) - 1, -1, -1):
            if items[index] not in targets:
                mutations.append(DeleteItem(items[index], section, index))
        working[position] = (section, [item for item in items if item in targets])


def _place_sections(
    working: _Working,
    old: Structure,
    new: Structure,
    mutations: list[Mutation],
) -> None:
    stable = _stable_subset(old.sections, new.sections)
    previous: SemanticSection | None = None
    for section in new.sections:
        if section not in stable:
            source = _section_index(working, section)
            if source == -1:
                entry: tuple[SemanticSection, list[Module]] = (section, [])
            else:
                entry = working.pop(source)
            target = 0 if previous is None else _section_index(working, previous) + 1
            working.insert(target, entry)
            if source == -1:
                mutations.append(InsertSection(section, target))
            else:
                mutations.append(MoveSection(section, source, target))
        previous = section


def _place_items(
    working: _Working,
    new: Structure,
    targets: dict[Module, SemanticSection],
    mutations: list[Mutation],
) -> None:
    """Insert or move every non-stable item into its new section.

    ``working`` is only read; positions are tracked by slot occupancy.
    """
    origin: dict[Module, SemanticSection] = {
        item: section for section, items in working for item in items
    }
    slots = {
        section: _section_slots(section, items, new.items(section), targets)
        for section, items in working
    }
    for entry in new.entries:
        section = entry.section
        here = slots[section]
        for item in entry.items:
            if item in here.stable:
                continue
            source_section = origin.get(item)
            source_index = -1
            if source_section is not None:
                source = slots[source_section]
                held_slot = source.held[item]
                source_index = source.occupancy.index_of(held_slot)
                source.occupancy.add(held_slot, -1)
            placed_slot = here.placed[item]
            target = here.occupancy.index_of(placed_slot)
            here.occupancy.add(placed_slot, 1)
            if source_section is None:
                mutations.append(InsertItem(item, section, target))
            else:
                mutations.append(
                    MoveItem(item, source_section, source_index, section, target)
                )


def _delete_vanished_sections(
    working: _Working, surviving: set[SemanticSection], mutations: list[Mutation]
) -> None:
    for index in range(len(working) - 1, -1, -1):
        section = working[index][0]
        if section not in surviving:
            mutations.append(DeleteSection(section, index))
            del working[index]


def diff_structures(old: Structure, new: Structure) -> tuple[Mutation, ...]:
    """Return the ordered mutations that transform ``old`` into ``new``.

    Parameters
    ----------
    old : Structure
        Structure the rendering sink currently displays.
    new : Structure
        Structure the sink should display afterwards.

    Returns
    -------
    tuple[Mutation, ...]
        Mutations whose indices are relative to the state produced by the
        preceding mutations. The tuple is empty when the structures are equal.
    """
    working: _Working = [(entry.section, list(entry.items)) for entry in old.entries]
    targets = {item: entry.section for entry in new.entries for item in entry.items}
    surviving = set(new.sections)
    mutations: list[Mutation] = []

    _delete_vanished_items(working, targets, surviving, mutations)
    _place_sections(working, old, new, mutations)
    _place_items(working, new, targets, mutations)
    _delete_vanished_sections(working, surviving, mutations)
    return tuple(mutations)


__all__ = ["diff_structures"]
