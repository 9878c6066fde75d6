"""Resolve dashboard modules into semantic sections and layout descriptors.

Every decision here is a pure function of its arguments plus the immutable
:class:`~panda_layout.config.LayoutConfig` held by the resolver; nothing is
cached between calls. The snapshot engine owns all mutable state.

Examples
--------
>>> from panda_layout.model import AccountViewModel, Context, Wallet
>>> from panda_layout.resolver import SectionResolver
>>> resolver = SectionResolver()
>>> resolver.preferred_section(Wallet(AccountViewModel(456)), Context.regular())
<SemanticSection.MAIN_WALLET_SPLIT: 'main_wallet_split'>
>>> resolver.item_split_placement(Wallet(AccountViewModel(456)))
<ItemPlacement.RIGHT: 'right'>
"""

from __future__ import annotations

import enum
import typing as typ

from .config.models import LayoutConfig
from .model import (
    MODULE_TYPES,
    Context,
    Disclosures,
    Greeting,
    Module,
    ModuleKind,
    SemanticSection,
    Snapshot,
    Wallet,
    WidthClass,
)


class SectionLayout(enum.StrEnum):
    """Section-level rendering hint."""

    FULL_WIDTH = "full_width"
    SPLIT_ELIGIBLE = "split_eligible"
    UNSUPPORTED = "unsupported"


class ItemPlacement(enum.StrEnum):
    """Item-level split placement within a split-eligible section."""

    LEFT = "left"
    RIGHT = "right"
    NONE = "none"


_REGULAR_SECTION_LAYOUTS: dict[SemanticSection, SectionLayout] = {
    SemanticSection.HEADER: SectionLayout.FULL_WIDTH,
    SemanticSection.MAIN_WALLET_NON_SPLIT: SectionLayout.UNSUPPORTED,
    SemanticSection.MAIN_WALLET_SPLIT: SectionLayout.SPLIT_ELIGIBLE,
    SemanticSection.FOOTER: SectionLayout.FULL_WIDTH,
}

_DEFAULT_ROUTING: dict[ModuleKind, SemanticSection] = {
    ModuleKind.GREETING: SemanticSection.HEADER,
    ModuleKind.WALLET: SemanticSection.MAIN_WALLET_SPLIT,
    ModuleKind.SNAPSHOT: SemanticSection.MAIN_WALLET_NON_SPLIT,
    ModuleKind.DISCLOSURES: SemanticSection.FOOTER,
}

def _check_exhaustive() -> None:
    """Fail at import time when a variant or section has no dispatch entry."""
    kinds = {variant.kind for variant in MODULE_TYPES}
    missing_kinds = set(ModuleKind) - kinds
    if missing_kinds:
        msg = f"Module kinds without a variant class: {sorted(missing_kinds)}"
        raise RuntimeError(msg)
    unrouted = set(ModuleKind) - set(_DEFAULT_ROUTING)
    if unrouted:
        msg = f"Module kinds without a default section: {sorted(unrouted)}"
        raise RuntimeError(msg)
    unlaid = set(SemanticSection) - set(_REGULAR_SECTION_LAYOUTS)
    if unlaid:
        msg = f"Sections without a regular-width layout: {sorted(unlaid)}"
        raise RuntimeError(msg)


_check_exhaustive()


class SectionResolver:
    """Map modules and contexts to sections and layout descriptors."""

    def __init__(self, config: LayoutConfig | None = None) -> None:
        self.config = config or LayoutConfig()

    def candidate_sections(self, context: Context) -> tuple[SemanticSection, ...]:
        """Return the full ordered list of sections for ``context``."""
        return self.config.order_for(context.width)

    def preferred_section(self, module: Module, context: Context) -> SemanticSection:
        """Return the single section ``module`` belongs to under ``context``.

        Configured routing overrides for the context width win; otherwise the
        built-in routing for the module kind applies to every width.
        """
        kind = module.kind
        override = self.config.route_override(kind, context.width)
        if override is not None:
            return override
        return _DEFAULT_ROUTING[kind]

    def section_layout(
        self, section: SemanticSection, context: Context
    ) -> SectionLayout:
        """Return the layout descriptor for ``section`` under ``context``.

        Split layouts exist only on regular width; every other width,
        including unrecognised ones, renders all sections full width.
        """
        if context.width is WidthClass.REGULAR:
            return _REGULAR_SECTION_LAYOUTS[section]
        return SectionLayout.FULL_WIDTH

    def item_split_placement(self, module: Module) -> ItemPlacement:
        """Return the split column for ``module``, independent of context."""
        match module:
            case Wallet():
                if module.account_id == self.config.split_right_account_id:
                    return ItemPlacement.RIGHT
                return ItemPlacement.LEFT
            case Greeting() | Snapshot() | Disclosures():
                return ItemPlacement.NONE
            case _:
                typ.assert_never(module)

    def is_supported(self, section: SemanticSection, context: Context) -> bool:
        """Return whether ``section`` has a valid rendering under ``context``."""
        return self.section_layout(section, context) is not SectionLayout.UNSUPPORTED


DEFAULT_RESOLVER = SectionResolver()


def candidate_sections(context: Context) -> tuple[SemanticSection, ...]:
    """Return the default section order for ``context``."""
    return DEFAULT_RESOLVER.candidate_sections(context)


def preferred_section(module: Module, context: Context) -> SemanticSection:
    """Return the default section for ``module`` under ``context``."""
    return DEFAULT_RESOLVER.preferred_section(module, context)


def section_layout(section: SemanticSection, context: Context) -> SectionLayout:
    """Return the default layout descriptor for ``section``."""
    return DEFAULT_RESOLVER.section_layout(section, context)


def item_split_placement(module: Module) -> ItemPlacement:
    """Return the default split placement for ``module``."""
    return DEFAULT_RESOLVER.item_split_placement(module)


__all__ = [
    "DEFAULT_RESOLVER",
    "ItemPlacement",
    "SectionLayout",
    "SectionResolver",
    "candidate_sections",
    "item_split_placement",
    "preferred_section",
    "section_layout",
]
