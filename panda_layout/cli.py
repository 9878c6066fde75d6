"""Cyclopts CLI entrypoint for inspecting dashboard partitions and diffs.

The ``dashboard`` console script defined here partitions a YAML module list
into sections for a given width, prints the mutations between two module
lists, and replays scripted module/context events through a presenter so the
effect of each update on the rendering sink can be inspected.

Examples
--------
Show the regular-width layout for a module list:

>>> from panda_layout.cli import app
>>> app.run(["plan", "--modules", "modules.yaml", "--width", "regular"])  # doctest: +SKIP

Replay an event script as JSON:

>>> app.run(["replay", "--events", "events.yaml", "--json"])  # doctest: +SKIP
"""

from __future__ import annotations

import dataclasses as dc
import logging
import typing as typ
from pathlib import Path

import cyclopts
import msgspec.json as msgspec_json
from cyclopts import App, Parameter
from jinja2 import Environment, FileSystemLoader

from ._constants import DEFAULT_CONFIG, ENV_PREFIX
from .config import (
    ContextEvent,
    DashboardConfig,
    ReplayEvent,
    load_dashboard_config,
    load_event_script,
    load_module_list,
)
from .diffing import diff_structures
from .engine import LayoutPlan, SnapshotEngine
from .model import Context, WidthClass, module_label
from .mutations import Mutation, MutationSequence
from .presenter import DashboardPresenter, RecordingSink
from .resolver import ItemPlacement, SectionLayout, SectionResolver

if typ.TYPE_CHECKING:
    from .anomalies import Anomaly

logger = logging.getLogger(__name__)

app = App(name="dashboard", config=cyclopts.config.Env(ENV_PREFIX, command=False))  # type: ignore[unknown-argument]

_TEMPLATES_DIR = Path(__file__).parent / "templates"


def _environment() -> Environment:
    return Environment(
        loader=FileSystemLoader(_TEMPLATES_DIR),
        autoescape=False,  # noqa: S701 - plain-text terminal output
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
    )


def _load_config(path: Path) -> DashboardConfig:
    """Load ``path`` when present; the default location is optional."""
    if path == DEFAULT_CONFIG and not path.exists():
        return DashboardConfig()
    return load_dashboard_config(path)


def _context_for(width: str) -> Context:
    context = Context.from_value(width)
    if context.width is WidthClass.UNSPECIFIED and width.strip().lower() != "unspecified":
        logger.warning("Unrecognised width %r; using full-width layout", width)
    return context


def _plan_record(plan: LayoutPlan) -> dict[str, typ.Any]:
    sections = []
    for section_plan in plan.sections:
        split = section_plan.layout is SectionLayout.SPLIT_ELIGIBLE
        sections.append(
            {
                "section": section_plan.section.value,
                "layout": section_plan.layout.value,
                "items": [
                    {
                        "label": module_label(module),
                        "placement": (
                            placement.value if split else ItemPlacement.NONE.value
                        ),
                    }
                    for module, placement in section_plan.items
                ],
            }
        )
    return {"width": plan.context.width.value, "sections": sections}


def _mutation_record(mutation: Mutation) -> dict[str, typ.Any]:
    record: dict[str, typ.Any] = {"op": type(mutation).__name__}
    for field in dc.fields(mutation):
        name = field.name
        value = getattr(mutation, name)
        if name == "module":
            record["module"] = module_label(value)
        elif hasattr(value, "value"):
            record[name] = value.value
        else:
            record[name] = value
    return record


def _sequence_record(
    sequence: MutationSequence, *, animate: bool | None = None
) -> dict[str, typ.Any]:
    record: dict[str, typ.Any] = {
        "mutations": [_mutation_record(mutation) for mutation in sequence],
        "descriptions": [mutation.describe() for mutation in sequence],
        "anomalies": _anomaly_lines(sequence.anomalies),
    }
    if animate is not None:
        record["animate"] = animate
    return record


def _anomaly_lines(anomalies: typ.Iterable[Anomaly]) -> list[str]:
    return [anomaly.describe() for anomaly in anomalies]


def _emit(template: str, payload: dict[str, typ.Any], *, as_json: bool) -> None:
    if as_json:
        print(msgspec_json.format(msgspec_json.encode(payload), indent=2).decode())
        return
    print(_environment().get_template(template).render(**payload), end="")


@app.command(help="Partition a module list into sections and show its layout.")
def plan(
    *,
    modules: typ.Annotated[
        Path, Parameter(help="YAML module list", env_var="DASHBOARD_MODULES")
    ],
    width: typ.Annotated[
        str, Parameter(help="Width class (regular, compact)", env_var="DASHBOARD_WIDTH")
    ] = WidthClass.REGULAR.value,
    config: typ.Annotated[
        Path, Parameter(help="Path to dashboard config", env_var="DASHBOARD_CONFIG")
    ] = DEFAULT_CONFIG,
    json: typ.Annotated[bool, Parameter(help="Emit JSON instead of text")] = False,
    log_level: typ.Annotated[str, Parameter(help="Logging level")] = "WARNING",
) -> None:
    """Print the sections, layouts, and placements for a module list.

    Parameters
    ----------
    modules : Path
        YAML file listing module mappings.
    width : str, optional
        Width classification; unrecognised values use the full-width layout.
    config : Path, optional
        Dashboard configuration; the default path may be absent.
    json : bool, optional
        Emit JSON rather than the text report.
    log_level : str, optional
        Logging level for anomaly reporting.
    """
    _configure_logging(log_level)
    settings = _load_config(config)
    context = _context_for(width)
    engine = SnapshotEngine(SectionResolver(settings.layout))
    sequence = engine.apply(load_module_list(modules), context)
    payload = _plan_record(engine.layout_plan(context))
    payload["anomalies"] = _anomaly_lines(sequence.anomalies)
    _emit("plan.jinja", payload, as_json=json)


@app.command(help="Show the mutations between two module lists.")
def diff(
    *,
    before: typ.Annotated[Path, Parameter(help="YAML module list shown first")],
    after: typ.Annotated[Path, Parameter(help="YAML module list shown next")],
    width: typ.Annotated[
        str, Parameter(help="Width class (regular, compact)", env_var="DASHBOARD_WIDTH")
    ] = WidthClass.REGULAR.value,
    config: typ.Annotated[
        Path, Parameter(help="Path to dashboard config", env_var="DASHBOARD_CONFIG")
    ] = DEFAULT_CONFIG,
    json: typ.Annotated[bool, Parameter(help="Emit JSON instead of text")] = False,
    log_level: typ.Annotated[str, Parameter(help="Logging level")] = "WARNING",
) -> None:
    """Print the mutation sequence that turns ``before`` into ``after``."""
    _configure_logging(log_level)
    settings = _load_config(config)
    context = _context_for(width)
    engine = SnapshotEngine(SectionResolver(settings.layout))
    old, old_anomalies = engine.build_structure(load_module_list(before), context)
    new, new_anomalies = engine.build_structure(load_module_list(after), context)
    sequence = MutationSequence(
        mutations=diff_structures(old, new),
        anomalies=old_anomalies + new_anomalies,
    )
    _emit("mutations.jinja", {"steps": [_sequence_record(sequence)]}, as_json=json)


class _ReportingSink(RecordingSink):
    """Recording sink that also records layout invalidations as steps."""

    def __init__(self) -> None:
        super().__init__()
        self.steps: list[dict[str, typ.Any]] = []

    def apply(self, sequence: MutationSequence, *, animate: bool) -> None:
        super().apply(sequence, animate=animate)
        self.steps.append(_sequence_record(sequence, animate=animate))

    def invalidate_layout(self) -> None:
        super().invalidate_layout()
        self.steps.append({"invalidate_layout": True})


def _replay(
    events: typ.Iterable[ReplayEvent], presenter: DashboardPresenter
) -> None:
    for event in events:
        if isinstance(event, ContextEvent):
            presenter.on_context(Context(event.width))
        else:
            presenter.on_modules(event.modules)


@app.command(help="Replay scripted module and context events through a presenter.")
def replay(
    *,
    events: typ.Annotated[Path, Parameter(help="YAML event script")],
    width: typ.Annotated[
        str, Parameter(help="Initial width class", env_var="DASHBOARD_WIDTH")
    ] = WidthClass.REGULAR.value,
    config: typ.Annotated[
        Path, Parameter(help="Path to dashboard config", env_var="DASHBOARD_CONFIG")
    ] = DEFAULT_CONFIG,
    json: typ.Annotated[bool, Parameter(help="Emit JSON instead of text")] = False,
    log_level: typ.Annotated[str, Parameter(help="Logging level")] = "WARNING",
) -> None:
    """Drive a presenter through ``events`` and print what the sink received.

    The final layout plan follows the steps so the effect of the configured
    context-change policy is visible.
    """
    _configure_logging(log_level)
    settings = _load_config(config)
    sink = _ReportingSink()
    presenter = DashboardPresenter(
        SnapshotEngine(SectionResolver(settings.layout)),
        sink,
        _context_for(width),
        config=settings.presenter,
    )
    _replay(load_event_script(events), presenter)
    payload = {"steps": sink.steps, "final": _plan_record(presenter.layout_plan())}
    _emit("mutations.jinja", payload, as_json=json)


def main() -> None:
    """Invoke the Cyclopts application that powers the ``dashboard`` command."""
    app()


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    main()
