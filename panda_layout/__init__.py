"""Adaptive section assignment and diffing for dashboard modules.

The package partitions a flat list of typed dashboard modules into ordered,
named sections for a viewing context, resolves section and item layout
descriptors, and computes the mutations a rendering sink applies to move from
the previously displayed structure to the new one.

Exports
-------
- ``SnapshotEngine``: owns the current structure and produces mutation sequences.
- ``SectionResolver``: pure section routing and layout resolution.
- ``DashboardPresenter``: serialized intake feeding a rendering sink.
- ``app`` / ``main``: the ``dashboard`` Cyclopts command.

Examples
--------
>>> from panda_layout import Context, Greeting, SnapshotEngine
>>> engine = SnapshotEngine()
>>> _ = engine.apply([Greeting()], Context.regular())
>>> engine.current_structure().as_dict()
{'header': ['greeting']}
"""

from __future__ import annotations

from .cli import app, main
from .engine import LayoutPlan, SnapshotEngine
from .model import (
    AccountViewModel,
    Context,
    Disclosures,
    Greeting,
    Module,
    SemanticSection,
    Snapshot,
    Wallet,
    WidthClass,
)
from .mutations import MutationSequence, apply_mutations
from .presenter import DashboardPresenter, RecordingSink
from .resolver import ItemPlacement, SectionLayout, SectionResolver
from .structure import Structure

__all__ = [
    "AccountViewModel",
    "Context",
    "DashboardPresenter",
    "Disclosures",
    "Greeting",
    "ItemPlacement",
    "LayoutPlan",
    "Module",
    "MutationSequence",
    "RecordingSink",
    "SectionLayout",
    "SectionResolver",
    "SemanticSection",
    "Snapshot",
    "SnapshotEngine",
    "Structure",
    "Wallet",
    "WidthClass",
    "app",
    "main",
]
