"""Recoverable anomalies recorded while building a dashboard structure.

None of these stop the render pipeline: the offending module is left out of
the structure, the anomaly is logged, and it is reported alongside the
mutation sequence so callers can count what was dropped.
"""

from __future__ import annotations

import dataclasses as dc

from .model import Module, SemanticSection, WidthClass, module_label


@dc.dataclass(frozen=True, slots=True)
class UnsupportedSectionLayout:
    """A module was routed to a section with no rendering for the width."""

    module: Module
    section: SemanticSection
    width: WidthClass

    def describe(self) -> str:
        return (
            f"dropped {module_label(self.module)}: section "
            f"{self.section.value} is unsupported for {self.width.value} width"
        )


@dc.dataclass(frozen=True, slots=True)
class UnknownModuleVariant:
    """A value outside the closed module variant set reached the engine."""

    value: object

    def describe(self) -> str:
        return f"dropped unknown module variant {type(self.value).__name__}"


@dc.dataclass(frozen=True, slots=True)
class DuplicateModule:
    """A module identity appeared more than once in one module list."""

    module: Module

    def describe(self) -> str:
        return f"dropped duplicate {module_label(self.module)}"


Anomaly = UnsupportedSectionLayout | UnknownModuleVariant | DuplicateModule


__all__ = [
    "Anomaly",
    "DuplicateModule",
    "UnknownModuleVariant",
    "UnsupportedSectionLayout",
]
