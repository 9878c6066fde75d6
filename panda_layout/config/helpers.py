"""Utility helpers shared by the dashboard configuration loader."""

from __future__ import annotations

import typing as typ

from ..model import ModuleKind, SemanticSection, WidthClass
from .models import DashboardConfigError

DEFAULT_ORDER_KEY = "default"


def _parse_enum(enum_type: type[typ.Any], value: object, label: str) -> typ.Any:
    """Return the enum member named by ``value`` or raise a config error."""
    text = str(value).strip().lower()
    try:
        return enum_type(text)
    except ValueError as exc:
        known = ", ".join(member.value for member in enum_type)
        msg = f"Unknown {label} {value!r}. Expected one of: {known}"
        raise DashboardConfigError(msg) from exc


def _parse_section(value: object) -> SemanticSection:
    return _parse_enum(SemanticSection, value, "section")


def _parse_kind(value: object) -> ModuleKind:
    return _parse_enum(ModuleKind, value, "module kind")


def _parse_width(value: object) -> WidthClass:
    """Parse a configured width; unlike contexts, config typos are errors."""
    return _parse_enum(WidthClass, value, "width")


def _parse_order(value: object, label: str) -> tuple[SemanticSection, ...]:
    """Parse a section order that must list every section exactly once."""
    if not isinstance(value, list):
        msg = f"Section order for {label!r} must be a list."
        raise DashboardConfigError(msg)
    order = tuple(_parse_section(entry) for entry in value)
    if len(set(order)) != len(order):
        msg = f"Section order for {label!r} repeats a section."
        raise DashboardConfigError(msg)
    missing = [section.value for section in SemanticSection if section not in order]
    if missing:
        msg = f"Section order for {label!r} is missing: {', '.join(missing)}"
        raise DashboardConfigError(msg)
    return order


def _parse_section_orders(
    payload: typ.Mapping[str, typ.Any] | None,
) -> tuple[tuple[SemanticSection, ...] | None, dict[WidthClass, tuple[SemanticSection, ...]]]:
    """Split a ``section_order`` mapping into the default and per-width orders."""
    if not payload:
        return None, {}
    if not isinstance(payload, dict):
        msg = "'layout.section_order' must be a mapping of width to section list."
        raise DashboardConfigError(msg)
    default_order = None
    per_width: dict[WidthClass, tuple[SemanticSection, ...]] = {}
    for key, value in payload.items():
        if str(key).strip().lower() == DEFAULT_ORDER_KEY:
            default_order = _parse_order(value, DEFAULT_ORDER_KEY)
        else:
            per_width[_parse_width(key)] = _parse_order(value, str(key))
    return default_order, per_width


def _parse_routing(
    payload: typ.Mapping[str, typ.Any] | None,
) -> dict[WidthClass, dict[ModuleKind, SemanticSection]]:
    """Parse per-width routing overrides of module kind to section."""
    if not payload:
        return {}
    if not isinstance(payload, dict):
        msg = "'layout.routing' must be a mapping of width to routing rules."
        raise DashboardConfigError(msg)
    routing: dict[WidthClass, dict[ModuleKind, SemanticSection]] = {}
    for width_key, rules in payload.items():
        if not isinstance(rules, dict):
            msg = f"Routing for width {width_key!r} must be a mapping."
            raise DashboardConfigError(msg)
        routing[_parse_width(width_key)] = {
            _parse_kind(kind): _parse_section(section) for kind, section in rules.items()
        }
    return routing


def _parse_account_id(value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        msg = f"'layout.split_right_account_id' must be an integer, got {value!r}"
        raise DashboardConfigError(msg)
    return value


def _parse_flag(value: object, label: str) -> bool:
    if not isinstance(value, bool):
        msg = f"'{label}' must be true or false, got {value!r}"
        raise DashboardConfigError(msg)
    return value


__all__ = [
    "DEFAULT_ORDER_KEY",
    "_parse_account_id",
    "_parse_flag",
    "_parse_kind",
    "_parse_order",
    "_parse_routing",
    "_parse_section",
    "_parse_section_orders",
    "_parse_width",
]
