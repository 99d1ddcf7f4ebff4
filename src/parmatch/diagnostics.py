"""
Diagnostics and findings.

Two output channels:
- diagnostics: ``warning: <file>:<line>: <message>`` (secondary, stderr)
- findings: ``<file>:<line>: parameter '<p>' not assigned in instantiation
  of module '<m>' (defined at <file>:<line>)`` (primary, stdout)

The Reporter keeps both in emission order.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, asdict
from typing import Any, Dict, List


@dataclass(frozen=True)
class Diagnostic:
    """A warning about the input that did not stop the analysis."""
    file: str
    line: int
    message: str

    def __str__(self) -> str:
        return f"warning: {self.file}:{self.line}: {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Finding:
    """A declared parameter left unbound by an instantiation."""
    file: str
    line: int
    parameter: str
    module: str
    definition_file: str
    definition_line: int

    def __str__(self) -> str:
        return (
            f"{self.file}:{self.line}: parameter '{self.parameter}' not assigned "
            f"in instantiation of module '{self.module}' "
            f"(defined at {self.definition_file}:{self.definition_line})"
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class Reporter:
    """Collects diagnostics and findings for one run, in emission order."""

    def __init__(self) -> None:
        self.diagnostics: List[Diagnostic] = []
        self.findings: List[Finding] = []

    def warn(self, file: str, line: int, message: str) -> None:
        self.diagnostics.append(Diagnostic(file=file, line=line, message=message))

    def add_finding(self, finding: Finding) -> None:
        self.findings.append(finding)

    def render_diagnostics(self) -> str:
        return "".join(f"{d}\n" for d in self.diagnostics)

    def render_findings(self) -> str:
        return "".join(f"{f}\n" for f in self.findings)

    def summary(self) -> str:
        return f"{len(self.findings)} unassigned parameter(s), {len(self.diagnostics)} warning(s)"

    def to_json(self) -> str:
        return json.dumps(
            {
                "findings": [f.to_dict() for f in self.findings],
                "diagnostics": [d.to_dict() for d in self.diagnostics],
            },
            indent=2,
        )
