"""
Two-pass analysis driver.

Pass 1 registers module definitions from every file; pass 2 then checks
instantiations in every file against the finished registry. The passes
never interleave.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Union

from parmatch.analysis import BindingChecker, ModuleRegistry
from parmatch.config import ParmatchConfig
from parmatch.diagnostics import Diagnostic, Finding, Reporter
from parmatch.discovery import collect_source_files

logger = logging.getLogger(__name__)


@dataclass
class AnalysisResult:
    """Everything one run produced."""
    files: List[Path]
    registry: ModuleRegistry
    reporter: Reporter

    @property
    def findings(self) -> List[Finding]:
        return self.reporter.findings

    @property
    def diagnostics(self) -> List[Diagnostic]:
        return self.reporter.diagnostics


def analyze(paths: Iterable[Union[str, Path]], verbose: bool = False,
            aggressive: bool = False) -> AnalysisResult:
    """Run both passes over paths, in the given order."""
    files = [Path(p) for p in paths]
    reporter = Reporter()

    registry = ModuleRegistry(reporter)
    for path in files:
        registry.find_defs(path)
    logger.info("Registered %d module(s) from %d file(s)", len(registry), len(files))

    checker = BindingChecker(registry, reporter, verbose=verbose, aggressive=aggressive)
    for path in files:
        checker.check_insts(path)
    logger.info("%s", reporter.summary())

    return AnalysisResult(files=files, registry=registry, reporter=reporter)


def run(roots: Iterable[Union[str, Path]], config: ParmatchConfig) -> AnalysisResult:
    """Discover the files under roots and analyze them."""
    files = collect_source_files(roots, config)
    return analyze(files, verbose=config.verbose, aggressive=config.aggressive)
