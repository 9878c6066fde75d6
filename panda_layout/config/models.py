"""Typed dataclasses describing dashboard layout configuration."""

from __future__ import annotations

import dataclasses as dc
import enum

from .._constants import DEFAULT_SPLIT_RIGHT_ACCOUNT_ID
from ..model import Module, ModuleKind, SemanticSection, WidthClass


class DashboardConfigError(ValueError):
    """Raised when the dashboard configuration is invalid or incomplete."""


class ContextChangePolicy(enum.StrEnum):
    """What the presenter does when only the viewing context changes."""

    REFRESH_LAYOUT = "refresh_layout"
    REPARTITION = "repartition"


DEFAULT_SECTION_ORDER: tuple[SemanticSection, ...] = tuple(SemanticSection)


@dc.dataclass(frozen=True, slots=True)
class LayoutConfig:
    """Section ordering, routing overrides, and split placement settings.

    Attributes
    ----------
    split_right_account_id : int
        Wallet account identifier placed in the right-hand split column.
    default_section_order : tuple[SemanticSection, ...]
        Section order used for widths without an explicit entry.
    section_order : dict[WidthClass, tuple[SemanticSection, ...]]
        Per-width section order. Every entry lists every section once.
    routing : dict[WidthClass, dict[ModuleKind, SemanticSection]]
        Per-width overrides of the built-in module routing.
    """

    split_right_account_id: int = DEFAULT_SPLIT_RIGHT_ACCOUNT_ID
    default_section_order: tuple[SemanticSection, ...] = DEFAULT_SECTION_ORDER
    section_order: dict[WidthClass, tuple[SemanticSection, ...]] = dc.field(
        default_factory=dict
    )
    routing: dict[WidthClass, dict[ModuleKind, SemanticSection]] = dc.field(
        default_factory=dict
    )

    def order_for(self, width: WidthClass) -> tuple[SemanticSection, ...]:
        """Return the section order configured for ``width``."""
        return self.section_order.get(width, self.default_section_order)

    def route_override(
        self, kind: ModuleKind, width: WidthClass
    ) -> SemanticSection | None:
        """Return the configured section for ``kind`` under ``width``, if any."""
        return self.routing.get(width, {}).get(kind)


@dc.dataclass(frozen=True, slots=True)
class PresenterConfig:
    """Behaviour switches for the dashboard presenter."""

    context_change: ContextChangePolicy = ContextChangePolicy.REFRESH_LAYOUT
    strict_layout: bool = False


@dc.dataclass(frozen=True, slots=True)
class DashboardConfig:
    """Top-level configuration loaded from ``dashboard.yaml``."""

    layout: LayoutConfig = dc.field(default_factory=LayoutConfig)
    presenter: PresenterConfig = dc.field(default_factory=PresenterConfig)


@dc.dataclass(frozen=True, slots=True)
class ContextEvent:
    """Scripted context change used by ``dashboard replay``."""

    width: WidthClass


@dc.dataclass(frozen=True, slots=True)
class ModulesEvent:
    """Scripted module-list emission used by ``dashboard replay``."""

    modules: tuple[Module, ...]


ReplayEvent = ContextEvent | ModulesEvent


__all__ = [
    "DEFAULT_SECTION_ORDER",
    "ContextChangePolicy",
    "ContextEvent",
    "DashboardConfig",
    "DashboardConfigError",
    "LayoutConfig",
    "ModulesEvent",
    "PresenterConfig",
    "ReplayEvent",
]
