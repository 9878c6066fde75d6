"""Load and validate dashboard configuration YAML.

This subpackage parses ``dashboard.yaml`` into frozen dataclasses
(:class:`DashboardConfig`, :class:`LayoutConfig`, :class:`PresenterConfig`)
and reads the module lists and event scripts the ``dashboard`` command
replays.

Examples
--------
>>> from pathlib import Path
>>> from panda_layout.config import load_dashboard_config
>>> config = load_dashboard_config(Path("config/dashboard.yaml"))  # doctest: +SKIP
>>> config.presenter.context_change  # doctest: +SKIP
<ContextChangePolicy.REFRESH_LAYOUT: 'refresh_layout'>
"""

from .loader import load_dashboard_config, load_event_script, load_module_list
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
    "load_dashboard_config",
    "load_event_script",
    "load_module_list",
]
