"""Unit tests for the presenter's serialized intake and layout queries."""

from __future__ import annotations

import logging
import typing as typ

import pytest
from conftest import wallet

from panda_layout.anomalies import UnsupportedSectionLayout
from panda_layout.config import ContextChangePolicy, LayoutConfig, PresenterConfig
from panda_layout.engine import SnapshotEngine
from panda_layout.feeds import ContextSource, ModuleFeed
from panda_layout.model import (
    Context,
    Disclosures,
    Greeting,
    ModuleKind,
    SemanticSection,
    Snapshot,
    WidthClass,
)
from panda_layout.mutations import MutationSequence
from panda_layout.presenter import (
    DashboardPresenter,
    RecordingSink,
    UnsupportedLayoutError,
)
from panda_layout.resolver import ItemPlacement, SectionLayout, SectionResolver
from panda_layout.structure import EMPTY_STRUCTURE

if typ.TYPE_CHECKING:
    from pytest_mock import MockerFixture


def _presenter(
    context: Context,
    *,
    policy: ContextChangePolicy = ContextChangePolicy.REFRESH_LAYOUT,
    strict: bool = False,
) -> tuple[DashboardPresenter, RecordingSink]:
    sink = RecordingSink()
    presenter = DashboardPresenter(
        SnapshotEngine(),
        sink,
        context,
        config=PresenterConfig(context_change=policy, strict_layout=strict),
    )
    return presenter, sink


def test_first_delivery_is_not_animated(regular: Context) -> None:
    presenter, sink = _presenter(regular)
    presenter.on_modules([Greeting(), wallet(456)])
    presenter.on_modules([Greeting(), wallet(456), wallet(1)])
    assert [animate for _, animate in sink.calls] == [False, True], (
        "expected a non-animated adoption followed by an animated update"
    )
    assert sink.structure == presenter.engine.current_structure(), (
        "expected the sink to track the engine"
    )


def test_empty_updates_are_not_delivered(regular: Context) -> None:
    presenter, sink = _presenter(regular)
    presenter.on_modules([Greeting()])
    presenter.on_modules([Greeting()])
    assert len(sink.calls) == 1, f"expected one delivery, got {len(sink.calls)}"


def test_empty_first_feed_still_presents(regular: Context) -> None:
    presenter, sink = _presenter(regular)
    presenter.on_modules([])
    assert sink.calls == [(MutationSequence(), False)], (
        "expected an initial non-animated adoption even when empty"
    )


def test_context_change_refreshes_layout_only(
    regular: Context, compact: Context
) -> None:
    presenter, sink = _presenter(regular)
    presenter.on_modules([Greeting(), wallet(456), wallet(1)])
    presenter.on_context(compact)
    assert len(sink.calls) == 1, "expected membership to stay untouched"
    assert sink.invalidations == 1, "expected one layout invalidation"
    assert presenter.section_layout_at(1) is SectionLayout.FULL_WIDTH
    presenter.on_context(compact)
    assert sink.invalidations == 1, "expected repeated contexts to be ignored"


def test_context_change_can_repartition(regular: Context, compact: Context) -> None:
    presenter, sink = _presenter(compact, policy=ContextChangePolicy.REPARTITION)
    presenter.on_modules([Greeting(), Snapshot(), wallet(456)])
    assert presenter.engine.current_structure().sections == (
        SemanticSection.HEADER,
        SemanticSection.MAIN_WALLET_NON_SPLIT,
        SemanticSection.MAIN_WALLET_SPLIT,
    )
    presenter.on_context(regular)
    assert len(sink.calls) == 2, "expected the repartition to be delivered"
    sequence, animate = sink.calls[1]
    assert animate is True, "expected the repartition to animate"
    assert sink.structure.as_dict() == {
        "header": ["greeting"],
        "main_wallet_split": ["wallet-456"],
    }, f"unexpected structure: {sink.structure.as_dict()!r}"
    assert [type(anomaly) for anomaly in sequence.anomalies] == [
        UnsupportedSectionLayout
    ], "expected the snapshot to be dropped on regular width"
    assert sink.invalidations == 1


def test_repartition_honours_routing_overrides(
    regular: Context, compact: Context
) -> None:
    resolver = SectionResolver(
        LayoutConfig(
            routing={
                WidthClass.REGULAR: {
                    ModuleKind.SNAPSHOT: SemanticSection.MAIN_WALLET_SPLIT
                }
            }
        )
    )
    sink = RecordingSink()
    presenter = DashboardPresenter(
        SnapshotEngine(resolver),
        sink,
        compact,
        config=PresenterConfig(context_change=ContextChangePolicy.REPARTITION),
    )
    presenter.on_modules([Greeting(), Snapshot(), wallet(456)])
    presenter.on_context(regular)
    assert sink.structure.as_dict() == {
        "header": ["greeting"],
        "main_wallet_split": ["snapshot", "wallet-456"],
    }, f"unexpected structure: {sink.structure.as_dict()!r}"


def test_unsupported_section_falls_back_to_full_width(
    regular: Context, compact: Context, caplog: pytest.LogCaptureFixture
) -> None:
    presenter, _ = _presenter(compact)
    presenter.on_modules([Greeting(), Snapshot()])
    presenter.on_context(regular)
    with caplog.at_level(logging.WARNING, logger="panda_layout.presenter"):
        layout = presenter.section_layout_at(1)
    assert layout is SectionLayout.FULL_WIDTH, f"expected full width, got {layout!r}"
    assert "falling back to full width" in caplog.text


def test_unsupported_section_raises_in_strict_mode(
    regular: Context, compact: Context
) -> None:
    presenter, _ = _presenter(compact, strict=True)
    presenter.on_modules([Greeting(), Snapshot()])
    presenter.on_context(regular)
    with pytest.raises(UnsupportedLayoutError, match="main_wallet_non_split"):
        presenter.section_layout_at(1)


def test_item_placement_queries(regular: Context, compact: Context) -> None:
    presenter, _ = _presenter(regular)
    presenter.on_modules([Greeting(), wallet(456), wallet(1), Disclosures()])
    assert presenter.item_placement_at(1, 0) is ItemPlacement.RIGHT
    assert presenter.item_placement_at(1, 1) is ItemPlacement.LEFT
    assert presenter.item_placement_at(0, 0) is ItemPlacement.NONE
    assert presenter.item_placement_at(7, 0) is ItemPlacement.NONE
    assert presenter.section_layout_at(7) is SectionLayout.FULL_WIDTH
    presenter.on_context(compact)
    assert presenter.item_placement_at(1, 0) is ItemPlacement.NONE, (
        "expected split placements to be ignored on compact width"
    )


def test_reentrant_updates_wait_for_the_current_sequence(regular: Context) -> None:
    """An update raised from inside the sink runs after the current one."""
    follow_up = [Greeting(), wallet(1)]

    class ReentrantSink(RecordingSink):
        def __init__(self) -> None:
            super().__init__()
            self.presenter: DashboardPresenter | None = None

        def apply(self, sequence: MutationSequence, *, animate: bool) -> None:
            super().apply(sequence, animate=animate)
            if self.presenter is not None and len(self.calls) == 1:
                self.presenter.on_modules(follow_up)
                assert len(self.calls) == 1, "expected the nested update to be queued"

    sink = ReentrantSink()
    presenter = DashboardPresenter(SnapshotEngine(), sink, regular)
    sink.presenter = presenter
    presenter.on_modules([Greeting(), wallet(456)])
    assert len(sink.calls) == 2, "expected both updates to be delivered in order"
    assert sink.structure == presenter.engine.current_structure()
    assert sink.structure.items(SemanticSection.MAIN_WALLET_SPLIT) == (wallet(1),)


def test_attach_and_detach_feeds(regular: Context, mocker: MockerFixture) -> None:
    sink = mocker.Mock(spec=RecordingSink)
    presenter = DashboardPresenter(SnapshotEngine(), sink, regular)
    modules, contexts = ModuleFeed(), ContextSource(regular)
    presenter.attach(modules, contexts)

    modules.publish([Greeting()])
    contexts.update(regular)
    contexts.update(Context.compact())
    sink.apply.assert_called_once()
    assert sink.apply.call_args.kwargs == {"animate": False}
    sink.invalidate_layout.assert_called_once_with()

    presenter.detach()
    modules.publish([Greeting(), Disclosures()])
    sink.apply.assert_called_once()


def test_sink_failure_resets_engine_and_readopts(
    regular: Context, caplog: pytest.LogCaptureFixture
) -> None:
    """A sink error leaves nothing half-adopted; the next update rebuilds."""

    class FlakySink(RecordingSink):
        def __init__(self) -> None:
            super().__init__()
            self.failures = 1

        def apply(self, sequence: MutationSequence, *, animate: bool) -> None:
            if self.calls and self.failures:
                self.failures -= 1
                msg = "view rejected the update"
                raise RuntimeError(msg)
            super().apply(sequence, animate=animate)

    sink = FlakySink()
    presenter = DashboardPresenter(SnapshotEngine(), sink, regular)
    presenter.on_modules([Greeting(), wallet(456)])
    with (
        caplog.at_level(logging.ERROR, logger="panda_layout.presenter"),
        pytest.raises(RuntimeError, match="rejected"),
    ):
        presenter.on_modules([Greeting(), wallet(456), wallet(1)])
    assert presenter.engine.current_structure() == EMPTY_STRUCTURE, (
        "expected the engine to drop the structure the sink never adopted"
    )
    assert "Sink failed to apply" in caplog.text

    presenter.on_modules([Greeting(), wallet(1)])
    assert sink.calls[-1][1] is False, "expected a non-animated full adoption"
    assert sink.structure == presenter.engine.current_structure(), (
        "expected the sink and the engine to agree again"
    )
    assert sink.structure.items(SemanticSection.MAIN_WALLET_SPLIT) == (wallet(1),)


def test_events_queued_behind_a_failure_run_with_the_next_event(
    regular: Context, caplog: pytest.LogCaptureFixture
) -> None:
    queued = [Greeting(), Disclosures()]

    class FailingSink(RecordingSink):
        def __init__(self) -> None:
            super().__init__()
            self.presenter: DashboardPresenter | None = None

        def apply(self, sequence: MutationSequence, *, animate: bool) -> None:
            if self.presenter is not None and not self.calls:
                self.presenter.on_modules(queued)
                self.presenter = None
                msg = "view rejected the update"
                raise RuntimeError(msg)
            super().apply(sequence, animate=animate)

    sink = FailingSink()
    presenter = DashboardPresenter(SnapshotEngine(), sink, regular)
    sink.presenter = presenter
    with (
        caplog.at_level(logging.WARNING, logger="panda_layout.presenter"),
        pytest.raises(RuntimeError),
    ):
        presenter.on_modules([Greeting(), wallet(456)])
    assert "1 queued event(s) wait for the next event" in caplog.text
    assert sink.calls == [], "expected nothing to be adopted yet"

    presenter.on_context(regular)
    assert [animate for _, animate in sink.calls] == [False], (
        "expected the queued list to arrive as a full adoption"
    )
    assert sink.structure.as_dict() == {
        "header": ["greeting"],
        "footer": ["disclosures"],
    }, f"unexpected structure: {sink.structure.as_dict()!r}"
