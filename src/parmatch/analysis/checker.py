"""
Instantiation Binding Checker

Second pass of the analysis. Looks for uses of known module names, reads
their ``#( ... )`` parameter lists and reports every declared parameter the
instantiation leaves unbound.

There is no parser behind this, so whether an identifier is really an
instantiation is guessed from the token before it: only identifiers that
follow a ``;`` or one of begin/end/generate/endgenerate (or start the file)
are considered. ``aggressive`` mode drops that guess and checks every
identifier that names a known module.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Set, Union

from parmatch.analysis.registry import ModuleEntry, ModuleRegistry
from parmatch.diagnostics import Finding, Reporter
from parmatch.scanner import (
    Token,
    TokenGroup,
    TokenStream,
    TokenType,
    open_stream,
    read_param_list,
)

logger = logging.getLogger(__name__)

# Keywords after which a new statement (and so an instantiation) may start
CONTEXT_KEYWORDS = frozenset({"begin", "end", "generate", "endgenerate"})


def restores_context(token: Token) -> bool:
    """Can an instantiation start right after token?"""
    if token.type == TokenType.SEMICOLON:
        return True
    return token.type == TokenType.KEYWORD and token.value in CONTEXT_KEYWORDS


@dataclass
class Binding:
    """
    Actual parameters of one instantiation, in order.

    Each argument is the bound parameter name for ``.NAME(value)`` or None
    for a positional value.
    """
    arguments: List[Optional[str]]

    @classmethod
    def from_groups(cls, groups: List[TokenGroup]) -> "Binding":
        # An empty #() binds nothing
        if groups == [[]]:
            return cls([])
        arguments = []
        for group in groups:
            first = group[0] if group else None
            if first is not None and first.type == TokenType.PARAM_BIND:
                arguments.append(first.value)
            else:
                arguments.append(None)
        return cls(arguments)

    @property
    def count(self) -> int:
        return len(self.arguments)

    @property
    def has_positional(self) -> bool:
        return any(a is None for a in self.arguments)


class BindingChecker:
    """
    Checks instantiations against a completed ModuleRegistry.

    The registry is only read. ``verbose`` suppresses the "too many
    parameters" and "named parameter missing" warnings.
    """

    def __init__(self, registry: ModuleRegistry, reporter: Optional[Reporter] = None,
                 verbose: bool = False, aggressive: bool = False):
        self.registry = registry
        self.reporter = reporter if reporter is not None else registry.reporter
        self.verbose = verbose
        self.aggressive = aggressive

    def check_insts(self, filepath: Union[str, Path]) -> List[Finding]:
        """Check every instantiation in one file."""
        logger.info("Scanning %s for module instantiations...", filepath)
        # Lexer warnings were already reported by pass 1
        return self.scan(open_stream(filepath))

    def scan(self, stream: TokenStream) -> List[Finding]:
        findings = []
        expect_instantiation = True
        for token in stream:
            candidate = expect_instantiation or self.aggressive
            expect_instantiation = restores_context(token)

            # Skip the name in module headers
            if token.type == TokenType.KEYWORD and token.value == "module":
                name_token = stream.next()
                if name_token.type != TokenType.IDENTIFIER:
                    stream.push_back(name_token)
                continue

            if token.type != TokenType.IDENTIFIER or not candidate:
                continue
            entry = self.registry.get(token.value)
            if entry is None:
                continue

            binding = Binding.from_groups(read_param_list(stream))
            logger.debug("%s:%d: '%s' instantiation arguments: %s",
                         token.file, token.line, token.value, binding.arguments)
            findings.extend(self.check_instantiation(token, entry, binding))
        return findings

    def check_instantiation(self, token: Token, entry: ModuleEntry,
                            binding: Binding) -> List[Finding]:
        """Validate one instantiation; returns the unassigned-parameter findings."""
        if binding.count > len(entry.parameters):
            if not self.verbose:
                self.reporter.warn(
                    token.file, token.line,
                    f"no. of instantiation parameters ({binding.count}) > "
                    f"no. of defined parameters ({len(entry.parameters)}) "
                    f"in module '{entry.name}' (defined at {entry.definition_site})",
                )
            return []

        bound: Set[str] = set()
        for index, name in enumerate(binding.arguments):
            if name is None:
                slot_name = entry.parameters[index].name
                if slot_name is not None:
                    bound.add(slot_name)
                continue
            bound.add(name)
            if name not in entry.parameter_names and not self.verbose:
                self.reporter.warn(
                    token.file, token.line,
                    f"named parameter '{name}' missing in module '{entry.name}' "
                    f"(defined at {entry.definition_site})",
                )

        # Positions mean nothing once the definitions disagree
        if binding.has_positional and entry.ignore_positional:
            return []

        findings = []
        for slot in entry.parameters:
            if slot.name is None or slot.name in bound:
                continue
            finding = Finding(
                file=token.file,
                line=token.line,
                parameter=slot.name,
                module=entry.name,
                definition_file=entry.definition_file,
                definition_line=entry.definition_line,
            )
            self.reporter.add_finding(finding)
            findings.append(finding)
        return findings
