"""Load dashboard configuration, module lists, and event scripts from YAML."""

from __future__ import annotations

import logging
import typing as typ
from pathlib import Path

from ruamel.yaml import YAML

from ..model import UnknownModuleVariantError, module_from_mapping
from .helpers import (
    _parse_account_id,
    _parse_flag,
    _parse_routing,
    _parse_section_orders,
    _parse_width,
)
from .models import (
    DEFAULT_SECTION_ORDER,
    ContextChangePolicy,
    ContextEvent,
    DashboardConfig,
    DashboardConfigError,
    LayoutConfig,
    ModulesEvent,
    PresenterConfig,
    ReplayEvent,
)

if typ.TYPE_CHECKING:
    from ..model import Module

logger = logging.getLogger(__name__)


def _load_yaml(path: Path) -> object:
    if not path.exists():
        msg = f"Configuration file '{path}' not found."
        raise FileNotFoundError(msg)
    loader = YAML(typ="safe")
    loader.version = (1, 2)
    with path.open("r", encoding="utf-8") as handle:
        return loader.load(handle)


def load_dashboard_config(path: Path) -> DashboardConfig:
    """Load the YAML configuration describing dashboard layout choices.

    Parameters
    ----------
    path : Path
        Filesystem path to the YAML file (for example ``dashboard.yaml``).

    Returns
    -------
    DashboardConfig
        Parsed layout and presenter configuration with defaults applied for
        any omitted keys.

    Raises
    ------
    FileNotFoundError
        If the configuration file does not exist at ``path``.
    TypeError
        If the top-level YAML structure is not a mapping.
    DashboardConfigError
        If a section, width, module kind, or setting is invalid.
    YAMLError
        If the YAML content cannot be parsed by the underlying loader.

    Examples
    --------
    >>> from pathlib import Path
    >>> config = load_dashboard_config(Path("config/dashboard.yaml"))  # doctest: +SKIP
    >>> config.layout.split_right_account_id  # doctest: +SKIP
    456
    """
    loaded = _load_yaml(path) or {}
    if not isinstance(loaded, dict):  # pragma: no cover - config error guard
        msg = "Top-level YAML structure must be a mapping."
        raise TypeError(msg)
    raw: dict[str, typ.Any] = dict(loaded)
    layout = _build_layout_config(raw.get("layout") or {})
    presenter = _build_presenter_config(raw.get("presenter") or {})
    logger.debug("Loaded dashboard config from %s", path)
    return DashboardConfig(layout=layout, presenter=presenter)


def _build_layout_config(payload: typ.Mapping[str, typ.Any]) -> LayoutConfig:
    if not isinstance(payload, dict):
        msg = "'layout' configuration must be a mapping."
        raise DashboardConfigError(msg)
    base = LayoutConfig()
    account_id = payload.get("split_right_account_id", base.split_right_account_id)
    default_order, per_width = _parse_section_orders(payload.get("section_order"))
    return LayoutConfig(
        split_right_account_id=_parse_account_id(account_id),
        default_section_order=default_order or DEFAULT_SECTION_ORDER,
        section_order=per_width,
        routing=_parse_routing(payload.get("routing")),
    )


def _build_presenter_config(payload: typ.Mapping[str, typ.Any]) -> PresenterConfig:
    if not isinstance(payload, dict):
        msg = "'presenter' configuration must be a mapping."
        raise DashboardConfigError(msg)
    base = PresenterConfig()
    raw_policy = payload.get("context_change", base.context_change.value)
    try:
        policy = ContextChangePolicy(str(raw_policy).strip().lower())
    except ValueError as exc:
        known = ", ".join(member.value for member in ContextChangePolicy)
        msg = f"Unknown context_change policy {raw_policy!r}. Expected one of: {known}"
        raise DashboardConfigError(msg) from exc
    strict = _parse_flag(
        payload.get("strict_layout", base.strict_layout), "presenter.strict_layout"
    )
    return PresenterConfig(context_change=policy, strict_layout=strict)


def _build_modules(entries: object, label: str) -> tuple[Module, ...]:
    if not isinstance(entries, list):
        msg = f"{label} must be a list of module mappings."
        raise DashboardConfigError(msg)
    modules: list[Module] = []
    for index, entry in enumerate(entries):
        if not isinstance(entry, dict):
            msg = f"{label}[{index}] must be a mapping with a 'kind'."
            raise UnknownModuleVariantError(msg)
        modules.append(module_from_mapping(entry))
    return tuple(modules)


def load_module_list(path: Path) -> tuple[Module, ...]:
    """Load a YAML list of module mappings.

    The file holds either a bare list or a mapping with a ``modules`` list.

    Raises
    ------
    UnknownModuleVariantError
        If an entry names no known module kind.
    DashboardConfigError
        If the document is not a list of mappings.
    """
    loaded = _load_yaml(path)
    if isinstance(loaded, dict):
        loaded = loaded.get("modules")
    return _build_modules(loaded or [], f"Module list '{path}'")


def load_event_script(path: Path) -> tuple[ReplayEvent, ...]:
    """Load a YAML list of ``modules`` and ``context`` events for replay.

    Examples
    --------
    An event script interleaves module emissions and width changes::

        - modules:
            - {kind: greeting}
            - {kind: wallet, account_id: 456}
        - context: compact
    """
    loaded = _load_yaml(path) or []
    if not isinstance(loaded, list):
        msg = f"Event script '{path}' must be a list."
        raise DashboardConfigError(msg)
    events: list[ReplayEvent] = []
    for index, entry in enumerate(loaded):
        match entry:
            case {"modules": modules}:
                events.append(
                    ModulesEvent(_build_modules(modules or [], f"events[{index}].modules"))
                )
            case {"context": width}:
                events.append(ContextEvent(_parse_width(width)))
            case _:
                msg = f"events[{index}] must contain 'modules' or 'context'."
                raise DashboardConfigError(msg)
    return tuple(events)


__all__ = ["load_dashboard_config", "load_event_script", "load_module_list"]
