"""Serialize module and context events into engine updates for a rendering sink.

The presenter is the single intake for both inbound sources. Events are queued
and handled strictly in arrival order; an event raised while the sink is still
applying a sequence (for example from inside ``RenderingSink.apply``) waits
until that sequence has been fully handed over, so every diff is computed
against the state the sink actually holds.

If the sink raises while applying a sequence, the engine is reset and the
error propagates. The next delivery is then a non-animated full adoption, and
any events still queued are handled when the next event arrives.

Example
-------
>>> from panda_layout.engine import SnapshotEngine
>>> from panda_layout.model import Context, Greeting
>>> sink = RecordingSink()
>>> presenter = DashboardPresenter(SnapshotEngine(), sink, Context.compact())
>>> presenter.on_modules([Greeting()])
>>> sink.structure.as_dict()
{'header': ['greeting']}
>>> sink.calls[0][1]
False
"""

from __future__ import annotations

import collections
import logging
import typing as typ

from .config.models import ContextChangePolicy, PresenterConfig
from .model import Context
from .mutations import MutationSequence, apply_mutations
from .resolver import ItemPlacement, SectionLayout
from .structure import EMPTY_STRUCTURE, Structure

if typ.TYPE_CHECKING:  # pragma: no cover - import for type hints only
    from .engine import LayoutPlan, SnapshotEngine
    from .feeds import ContextSource, ModuleFeed, Subscription

logger = logging.getLogger(__name__)


class UnsupportedLayoutError(RuntimeError):
    """Raised in strict mode when a populated section has no valid layout."""


class RenderingSink(typ.Protocol):
    """Consumer of mutation sequences, typically a view layer."""

    def apply(self, sequence: MutationSequence, *, animate: bool) -> None:
        """Apply every mutation of ``sequence`` in order.

        A non-animated call is a full adoption: its mutations start from an
        empty display, replacing whatever the sink showed before.
        """
        ...

    def invalidate_layout(self) -> None:
        """Re-query layout descriptors without changing membership."""
        ...


class RecordingSink:
    """Sink that tracks its own structure and records every call."""

    def __init__(self) -> None:
        self.structure: Structure = EMPTY_STRUCTURE
        self.calls: list[tuple[MutationSequence, bool]] = []
        self.invalidations = 0

    def apply(self, sequence: MutationSequence, *, animate: bool) -> None:
        base = self.structure if animate else EMPTY_STRUCTURE
        self.structure = apply_mutations(base, sequence.mutations)
        self.calls.append((sequence, animate))

    def invalidate_layout(self) -> None:
        self.invalidations += 1


class DashboardPresenter:
    """Drive a :class:`SnapshotEngine` from feeds and hand results to a sink."""

    def __init__(
        self,
        engine: SnapshotEngine,
        sink: RenderingSink,
        context: Context,
        *,
        config: PresenterConfig | None = None,
    ) -> None:
        """Initialize the presenter.

        Parameters
        ----------
        engine : SnapshotEngine
            Engine owning the current structure.
        sink : RenderingSink
            Receiver of mutation sequences and layout invalidations.
        context : Context
            Viewing context in effect before the first context notification.
        config : PresenterConfig, optional
            Context-change policy and strict-layout switch. Defaults to
            refreshing layout only and falling back to full width.
        """
        self.engine = engine
        self.sink = sink
        self.context = context
        self.config = config or PresenterConfig()
        self._modules: tuple[object, ...] | None = None
        self._presented = False
        self._pending: collections.deque[Context | tuple[object, ...]] = (
            collections.deque()
        )
        self._draining = False
        self._subscriptions: list[Subscription] = []

    def attach(self, modules: ModuleFeed, contexts: ContextSource) -> None:
        """Subscribe to both inbound sources."""
        self._subscriptions.append(modules.subscribe(self.on_modules))
        self._subscriptions.append(contexts.subscribe(self.on_context))

    def detach(self) -> None:
        """Cancel every subscription made by :meth:`attach`."""
        for subscription in self._subscriptions:
            subscription.cancel()
        self._subscriptions.clear()

    def on_modules(self, modules: typ.Iterable[object]) -> None:
        """Queue a complete module list."""
        self._enqueue(tuple(modules))

    def on_context(self, context: Context) -> None:
        """Queue a viewing-context change."""
        self._enqueue(context)

    def _enqueue(self, event: Context | tuple[object, ...]) -> None:
        self._pending.append(event)
        if self._draining:
            return
        self._draining = True
        try:
            while self._pending:
                event = self._pending.popleft()
                if isinstance(event, Context):
                    self._handle_context(event)
                else:
                    self._handle_modules(event)
        except Exception:
            if self._pending:
                logger.warning(
                    "%d queued event(s) wait for the next event after a failed update",
                    len(self._pending),
                )
            raise
        finally:
            self._draining = False

    def _handle_modules(self, modules: tuple[object, ...]) -> None:
        self._modules = modules
        sequence = self.engine.apply(modules, self.context)
        self._deliver(sequence)

    def _deliver(self, sequence: MutationSequence) -> None:
        animate = self._presented
        if sequence.is_empty and animate:
            logger.debug("No structural changes; nothing delivered")
            return
        try:
            self.sink.apply(sequence, animate=animate)
        except Exception:
            logger.exception("Sink failed to apply %d mutation(s)", len(sequence))
            # The sink state is unknown; rebuild from scratch on the next delivery.
            self.engine.reset()
            self._presented = False
            raise
        self._presented = True

    def _handle_context(self, context: Context) -> None:
        if context == self.context:
            return
        logger.debug(
            "Context changed from %s to %s", self.context.width.value, context.width.value
        )
        self.context = context
        repartition = self.config.context_change is ContextChangePolicy.REPARTITION
        if repartition and self._modules is not None:
            self._deliver(self.engine.apply(self._modules, context))
        self.sink.invalidate_layout()

    def section_layout_at(self, index: int) -> SectionLayout:
        """Return the layout for the section displayed at ``index``.

        Raises
        ------
        UnsupportedLayoutError
            In strict mode, when the populated section cannot render under the
            current context. Otherwise that case falls back to full width.
        """
        section = self.engine.section_identifier(index)
        if section is None:
            return SectionLayout.FULL_WIDTH
        layout = self.engine.resolver.section_layout(section, self.context)
        if layout is not SectionLayout.UNSUPPORTED:
            return layout
        msg = (
            f"Section {section.value} is populated but unsupported for "
            f"{self.context.width.value} width"
        )
        if self.config.strict_layout:
            raise UnsupportedLayoutError(msg)
        logger.warning("%s; falling back to full width", msg)
        return SectionLayout.FULL_WIDTH

    def item_placement_at(self, section_index: int, item_index: int) -> ItemPlacement:
        """Return the effective split placement of the item at a position.

        Placements only apply inside split-eligible sections; everywhere else
        the item spans the full width and ``NONE`` is returned.
        """
        module = self.engine.item_identifier(section_index, item_index)
        if module is None:
            return ItemPlacement.NONE
        if self.section_layout_at(section_index) is not SectionLayout.SPLIT_ELIGIBLE:
            return ItemPlacement.NONE
        return self.engine.resolver.item_split_placement(module)

    def layout_plan(self) -> LayoutPlan:
        """Return layout descriptors for the current structure and context."""
        return self.engine.layout_plan(self.context)


__all__ = [
    "DashboardPresenter",
    "RecordingSink",
    "RenderingSink",
    "UnsupportedLayoutError",
]
