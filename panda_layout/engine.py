"""Snapshot engine: partition modules into sections and diff against the last state.

The engine holds exactly one current :class:`~panda_layout.structure.Structure`.
:meth:`SnapshotEngine.apply` builds the next structure from a module list and
a context, computes the mutations from the current one, and only then adopts
the new structure, so callers never observe a half-applied update.

Example
-------
>>> from panda_layout.engine import SnapshotEngine
>>> from panda_layout.model import Context, Greeting
>>> engine = SnapshotEngine()
>>> len(engine.apply([Greeting()], Context.compact()))
2
>>> engine.apply([Greeting()], Context.compact()).is_empty
True
"""

from __future__ import annotations

import dataclasses as dc
import logging
import typing as typ

from .anomalies import (
    Anomaly,
    DuplicateModule,
    UnknownModuleVariant,
    UnsupportedSectionLayout,
)
from .diffing import diff_structures
from .model import (
    Context,
    Module,
    SemanticSection,
    UnknownModuleVariantError,
    ensure_module,
)
from .mutations import MutationSequence
from .resolver import ItemPlacement, SectionLayout, SectionResolver
from .structure import EMPTY_STRUCTURE, Structure

logger = logging.getLogger(__name__)


@dc.dataclass(frozen=True, slots=True)
class SectionPlan:
    """Resolved layout for one populated section."""

    section: SemanticSection
    layout: SectionLayout
    items: tuple[tuple[Module, ItemPlacement], ...]


@dc.dataclass(frozen=True, slots=True)
class LayoutPlan:
    """Layout descriptors for a whole structure under one context."""

    context: Context
    sections: tuple[SectionPlan, ...]

    def layout_of(self, section: SemanticSection) -> SectionLayout | None:
        for plan in self.sections:
            if plan.section is section:
                return plan.layout
        return None


class SnapshotEngine:
    """Own the current dashboard structure and produce diffs against it."""

    def __init__(self, resolver: SectionResolver | None = None) -> None:
        self.resolver = resolver or SectionResolver()
        self._current: Structure = EMPTY_STRUCTURE

    def current_structure(self) -> Structure:
        """Return the currently adopted structure."""
        return self._current

    def build_structure(
        self, modules: typ.Iterable[object], context: Context
    ) -> tuple[Structure, tuple[Anomaly, ...]]:
        """Partition ``modules`` into a structure without adopting it.

        Parameters
        ----------
        modules : Iterable[object]
            Module list in display order. Values outside the module variants,
            repeated identities, and modules routed to a section that cannot
            render under ``context`` are left out.
        context : Context
            Viewing context used for section order and routing.

        Returns
        -------
        tuple[Structure, tuple[Anomaly, ...]]
            The draft structure and the anomalies recorded while building it.
        """
        draft: dict[SemanticSection, list[Module]] = {
            section: [] for section in self.resolver.candidate_sections(context)
        }
        anomalies: list[Anomaly] = []
        seen: set[Module] = set()
        for value in modules:
            anomaly = self._route(value, context, draft, seen)
            if anomaly is not None:
                logger.warning("Dashboard anomaly: %s", anomaly.describe())
                anomalies.append(anomaly)
        structure = Structure.from_pairs(
            (section, items) for section, items in draft.items() if items
        )
        return structure, tuple(anomalies)

    def _route(
        self,
        value: object,
        context: Context,
        draft: dict[SemanticSection, list[Module]],
        seen: set[Module],
    ) -> Anomaly | None:
        try:
            module = ensure_module(value)
        except UnknownModuleVariantError:
            return UnknownModuleVariant(value)
        if module in seen:
            return DuplicateModule(module)
        section = self.resolver.preferred_section(module, context)
        if not self.resolver.is_supported(section, context):
            return UnsupportedSectionLayout(module, section, context.width)
        if section not in draft:
            # not in this context's candidate order
            return UnsupportedSectionLayout(module, section, context.width)
        seen.add(module)
        draft[section].append(module)
        return None

    def apply(self, modules: typ.Iterable[object], context: Context) -> MutationSequence:
        """Adopt the structure for ``modules`` and return the mutations to it."""
        structure, anomalies = self.build_structure(modules, context)
        mutations = diff_structures(self._current, structure)
        logger.debug(
            "Applied %d modules under %s width: %d sections, %d mutations",
            structure.item_count,
            context.width.value,
            len(structure.entries),
            len(mutations),
        )
        self._current = structure
        return MutationSequence(mutations=mutations, anomalies=anomalies)

    def reset(self) -> MutationSequence:
        """Return to the empty structure, yielding the deleting mutations."""
        mutations = diff_structures(self._current, EMPTY_STRUCTURE)
        self._current = EMPTY_STRUCTURE
        return MutationSequence(mutations=mutations)

    def section_identifier(self, index: int) -> SemanticSection | None:
        """Return the section displayed at ``index`` in the current structure."""
        return self._current.section_at(index)

    def item_identifier(self, section_index: int, item_index: int) -> Module | None:
        """Return the module displayed at the given position, if any."""
        return self._current.item_at(section_index, item_index)

    def layout_plan(self, context: Context) -> LayoutPlan:
        """Resolve layout descriptors for the current structure under ``context``.

        Membership is untouched; this is what a context change alone refreshes.
        """
        sections = tuple(
            SectionPlan(
                section=entry.section,
                layout=self.resolver.section_layout(entry.section, context),
                items=tuple(
                    (item, self.resolver.item_split_placement(item))
                    for item in entry.items
                ),
            )
            for entry in self._current.entries
        )
        return LayoutPlan(context=context, sections=sections)


__all__ = [
    "LayoutPlan",
    "SectionPlan",
    "SnapshotEngine",
]
