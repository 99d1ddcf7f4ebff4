"""
parmatch.analysis - two-pass parameter binding analysis

ModuleRegistry collects module signatures (pass 1); BindingChecker validates
instantiations against them (pass 2).
"""

from parmatch.analysis.registry import ModuleEntry, ModuleRegistry, ParameterSlot
from parmatch.analysis.checker import Binding, BindingChecker, restores_context

__all__ = [
    "ModuleEntry",
    "ModuleRegistry",
    "ParameterSlot",
    "Binding",
    "BindingChecker",
    "restores_context",
]
