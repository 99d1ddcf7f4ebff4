"""
Module Definition Registry

First pass of the analysis. Scans every input file for ``module`` headers and
records each module's parameter signature. A module defined more than once
(``ifdef`` variants, copies in several libraries, ...) keeps a single entry;
redefinitions are reconciled against it instead of replacing it.

Reconciliation rules for a redefinition of a known module:
1. Names only in the new definition are "new".
2. Names only in the old definition are "missing": their slots in the entry
   become anonymous and stop being tracked.
3. Names in both whose position differs are "reordered".
Any of the three switches the entry to name-only checking
(``ignore_positional``), permanently. The first time this happens for a
module a single warning is emitted.

Usage:
    registry = ModuleRegistry(reporter)
    for path in paths:
        registry.find_defs(path)
    entry = registry.get("fifo")
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Set, Union

from parmatch.diagnostics import Reporter
from parmatch.scanner import (
    Token,
    TokenGroup,
    TokenStream,
    TokenType,
    open_stream,
    read_param_list,
)

logger = logging.getLogger(__name__)


@dataclass
class ParameterSlot:
    """One position of a module parameter list. name is None if unparsable."""
    index: int
    name: Optional[str]


@dataclass
class ModuleEntry:
    """Parameter signature of one module name, across all its definitions."""
    name: str
    definition_file: str
    definition_line: int
    parameters: List[ParameterSlot] = field(default_factory=list)
    parameter_names: Set[str] = field(default_factory=set)
    warned: bool = False
    ignore_positional: bool = False

    @classmethod
    def create(cls, name: str, slots: List[ParameterSlot],
               definition_file: str, definition_line: int) -> "ModuleEntry":
        return cls(
            name=name,
            definition_file=definition_file,
            definition_line=definition_line,
            parameters=list(slots),
            parameter_names={s.name for s in slots if s.name is not None},
        )

    @property
    def definition_site(self) -> str:
        return f"{self.definition_file}:{self.definition_line}"

    def forget_parameter(self, name: str) -> None:
        """Make every slot called name anonymous and stop tracking name."""
        for slot in self.parameters:
            if slot.name == name:
                slot.name = None
        self.parameter_names.discard(name)

    def grow_to(self, count: int) -> None:
        """Pad with anonymous slots so at least count positions exist."""
        while len(self.parameters) < count:
            self.parameters.append(ParameterSlot(len(self.parameters), None))


def _unique(names: List[str]) -> List[str]:
    return list(dict.fromkeys(names))


class ModuleRegistry:
    """
    Module name -> ModuleEntry, built by scanning module definitions.

    Entries are created on first definition, updated in place on
    redefinition and never removed. Once the first pass is over the registry
    is only read.
    """

    def __init__(self, reporter: Optional[Reporter] = None):
        self.reporter = reporter if reporter is not None else Reporter()
        self._modules: Dict[str, ModuleEntry] = {}

    def __contains__(self, name: str) -> bool:
        return name in self._modules

    def __len__(self) -> int:
        return len(self._modules)

    def __iter__(self) -> Iterator[ModuleEntry]:
        return iter(self._modules.values())

    def get(self, name: str) -> Optional[ModuleEntry]:
        return self._modules.get(name)

    def find_defs(self, filepath: Union[str, Path]) -> None:
        """Scan one file and register every module it defines."""
        logger.info("Scanning %s for module definitions...", filepath)
        self.scan(open_stream(filepath, self.reporter))

    def scan(self, stream: TokenStream) -> None:
        for token in stream:
            if token.type != TokenType.KEYWORD or token.value != "module":
                continue
            name_token = stream.next()
            if name_token.type != TokenType.IDENTIFIER:
                stream.push_back(name_token)
                continue
            groups = read_param_list(stream)
            slots = self._parse_slots(name_token, groups)
            self.define(name_token.value, slots, name_token.file, name_token.line)

    def _parse_slots(self, name_token: Token, groups: List[TokenGroup]) -> List[ParameterSlot]:
        """
        Name each parameter group after its first identifier.

        Keywords (parameter, localparam, type, integer, ...) and anything
        else that is not an identifier are passed over, so
        ``parameter logic [7:0] MASK = 8'hff`` yields MASK.
        """
        slots = []
        for index, group in enumerate(groups):
            name = next((t.value for t in group if t.type == TokenType.IDENTIFIER), None)
            if name is None:
                self.reporter.warn(
                    name_token.file, name_token.line,
                    f"failed to parse {index}-th parameter of module '{name_token.value}'",
                )
            else:
                logger.debug("%s:%d: %d-th parameter of '%s': %s",
                             name_token.file, name_token.line, index, name_token.value, name)
            slots.append(ParameterSlot(index, name))
        return slots

    def define(self, name: str, slots: List[ParameterSlot],
               definition_file: str, definition_line: int) -> ModuleEntry:
        """Register a definition of name, reconciling with any earlier one."""
        entry = self._modules.get(name)
        if entry is None:
            entry = ModuleEntry.create(name, slots, definition_file, definition_line)
            self._modules[name] = entry
            return entry
        self._reconcile(entry, slots, definition_file, definition_line)
        return entry

    def _reconcile(self, entry: ModuleEntry, slots: List[ParameterSlot],
                   definition_file: str, definition_line: int) -> None:
        new_names = [s.name for s in slots if s.name is not None]
        new_name_set = set(new_names)

        added = _unique([n for n in new_names if n not in entry.parameter_names])
        missing = _unique([
            s.name for s in entry.parameters
            if s.name is not None and s.name not in new_name_set
        ])
        for name in missing:
            entry.forget_parameter(name)

        reordered = [
            s.name for s in slots
            if s.name in entry.parameter_names
            and (s.index >= len(entry.parameters) or entry.parameters[s.index].name != s.name)
        ]
        entry.grow_to(len(slots))

        if not (added or missing or reordered):
            return
        entry.ignore_positional = True
        if reordered:
            logger.debug("%s:%d: parameters of '%s' reordered: %s",
                         definition_file, definition_line, entry.name, ", ".join(reordered))
        if entry.warned:
            return
        entry.warned = True
        self.reporter.warn(
            definition_file, definition_line,
            f"incompatible redefinition of module '{entry.name}' "
            f"(previously defined at {entry.definition_site}): "
            f"new parameters [{', '.join(added)}], "
            f"missing parameters [{', '.join(missing)}]",
        )
