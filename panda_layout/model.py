"""Typed dashboard modules, semantic sections, and the viewing context.

The dashboard is fed a flat list of *modules*. Each module is one of a closed
set of frozen dataclasses (:class:`Greeting`, :class:`Wallet`,
:class:`Snapshot`, :class:`Disclosures`) whose equality and hash cover only
the fields that identify the entity, so a module whose opaque payload changes
is still the same item when the dashboard is diffed.

Examples
--------
>>> from panda_layout.model import AccountViewModel, Wallet
>>> Wallet(AccountViewModel(456, name="Savings")) == Wallet(AccountViewModel(456))
True
>>> Wallet(AccountViewModel(1)).kind
<ModuleKind.WALLET: 'wallet'>
"""

from __future__ import annotations

import dataclasses as dc
import enum
import typing as typ


class UnknownModuleVariantError(TypeError):
    """Raised when a value falls outside the closed set of module variants."""


class ModuleKind(enum.StrEnum):
    """Tag naming each module variant."""

    GREETING = "greeting"
    WALLET = "wallet"
    SNAPSHOT = "snapshot"
    DISCLOSURES = "disclosures"


class SemanticSection(enum.StrEnum):
    """Named logical grouping a module is routed into.

    Declaration order is the default render order.
    """

    HEADER = "header"
    MAIN_WALLET_NON_SPLIT = "main_wallet_non_split"
    MAIN_WALLET_SPLIT = "main_wallet_split"
    FOOTER = "footer"


class WidthClass(enum.StrEnum):
    """Horizontal size classification of the viewing context."""

    REGULAR = "regular"
    COMPACT = "compact"
    UNSPECIFIED = "unspecified"

    @classmethod
    def parse(cls, value: str | WidthClass | None) -> WidthClass:
        """Return the matching width class, or ``UNSPECIFIED`` when unknown."""
        if isinstance(value, WidthClass):
            return value
        if value is None:
            return cls.UNSPECIFIED
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.UNSPECIFIED


@dc.dataclass(frozen=True, slots=True)
class Context:
    """Viewing context the layout decisions branch on.

    Any ``width`` is accepted; values that name no width class become
    ``WidthClass.UNSPECIFIED``.
    """

    width: WidthClass = WidthClass.UNSPECIFIED

    def __post_init__(self) -> None:
        object.__setattr__(self, "width", WidthClass.parse(self.width))

    @classmethod
    def from_value(cls, value: str | WidthClass | None) -> Context:
        """Build a context from a raw width value, tolerating unknown values."""
        return cls(width=WidthClass.parse(value))

    @classmethod
    def regular(cls) -> Context:
        return cls(width=WidthClass.REGULAR)

    @classmethod
    def compact(cls) -> Context:
        return cls(width=WidthClass.COMPACT)

    @property
    def is_regular(self) -> bool:
        return self.width is WidthClass.REGULAR


@dc.dataclass(frozen=True, slots=True)
class AccountViewModel:
    """Wallet account summary; identified by ``account_id`` alone."""

    account_id: int
    name: str = dc.field(default="", compare=False)
    balance: str = dc.field(default="", compare=False)


@dc.dataclass(frozen=True, slots=True)
class Greeting:
    """Greeting banner shown at the top of the dashboard."""

    kind: typ.ClassVar[ModuleKind] = ModuleKind.GREETING

    key: str = "greeting"
    payload: typ.Mapping[str, typ.Any] = dc.field(
        default_factory=dict, compare=False, hash=False
    )


@dc.dataclass(frozen=True, slots=True)
class Wallet:
    """Wallet card for a single account."""

    kind: typ.ClassVar[ModuleKind] = ModuleKind.WALLET

    account: AccountViewModel

    @property
    def account_id(self) -> int:
        return self.account.account_id

    @property
    def key(self) -> str:
        return f"wallet-{self.account.account_id}"


@dc.dataclass(frozen=True, slots=True)
class Snapshot:
    """Account snapshot summary card."""

    kind: typ.ClassVar[ModuleKind] = ModuleKind.SNAPSHOT

    key: str = "snapshot"
    payload: typ.Mapping[str, typ.Any] = dc.field(
        default_factory=dict, compare=False, hash=False
    )


@dc.dataclass(frozen=True, slots=True)
class Disclosures:
    """Legal disclosures rendered at the foot of the dashboard."""

    kind: typ.ClassVar[ModuleKind] = ModuleKind.DISCLOSURES

    key: str = "disclosures"
    payload: typ.Mapping[str, typ.Any] = dc.field(
        default_factory=dict, compare=False, hash=False
    )


Module = Greeting | Wallet | Snapshot | Disclosures
MODULE_TYPES: tuple[type[Module], ...] = typ.get_args(Module)


def ensure_module(value: object) -> Module:
    """Return ``value`` unchanged if it is a module, otherwise raise.

    Raises
    ------
    UnknownModuleVariantError
        If ``value`` is not one of the closed module variants.
    """
    if isinstance(value, MODULE_TYPES):
        return value
    msg = f"Unknown module variant: {type(value).__name__}"
    raise UnknownModuleVariantError(msg)


def module_label(module: Module) -> str:
    """Return a short human-readable label such as ``wallet-456``."""
    if isinstance(module, Wallet):
        return module.key
    if module.key == module.kind.value:
        return module.key
    return f"{module.kind.value}:{module.key}"


def module_from_mapping(payload: typ.Mapping[str, typ.Any]) -> Module:
    """Build a module variant from a mapping with a ``kind`` field.

    Parameters
    ----------
    payload : Mapping[str, Any]
        Mapping such as ``{"kind": "wallet", "account_id": 456}``. Keys other
        than ``kind``, ``key`` and the wallet account fields are kept as the
        opaque payload of non-wallet modules.

    Returns
    -------
    Module
        The constructed variant.

    Raises
    ------
    UnknownModuleVariantError
        If ``kind`` is missing or names no known variant, or a wallet entry
        lacks an integer ``account_id``.
    """
    raw_kind = payload.get("kind")
    try:
        kind = ModuleKind(str(raw_kind).strip().lower())
    except ValueError as exc:
        msg = f"Unknown module kind {raw_kind!r}"
        raise UnknownModuleVariantError(msg) from exc

    match kind:
        case ModuleKind.WALLET:
            account_id = payload.get("account_id")
            if isinstance(account_id, bool) or not isinstance(account_id, int):
                msg = f"Wallet module requires an integer 'account_id', got {account_id!r}"
                raise UnknownModuleVariantError(msg)
            return Wallet(
                AccountViewModel(
                    account_id=account_id,
                    name=str(payload.get("name", "")),
                    balance=str(payload.get("balance", "")),
                )
            )
        case ModuleKind.GREETING:
            variant: type[Greeting | Snapshot | Disclosures] = Greeting
        case ModuleKind.SNAPSHOT:
            variant = Snapshot
        case ModuleKind.DISCLOSURES:
            variant = Disclosures

    extra = {k: v for k, v in payload.items() if k not in {"kind", "key"}}
    key = payload.get("key")
    if key is None:
        return variant(payload=extra)
    return variant(key=str(key), payload=extra)


__all__ = [
    "MODULE_TYPES",
    "AccountViewModel",
    "Context",
    "Disclosures",
    "Greeting",
    "Module",
    "ModuleKind",
    "SemanticSection",
    "Snapshot",
    "UnknownModuleVariantError",
    "Wallet",
    "WidthClass",
    "ensure_module",
    "module_from_mapping",
    "module_label",
]
