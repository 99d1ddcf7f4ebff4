"""
Exceptions raised by parmatch.

Recoverable conditions found while scanning (unknown tokens, unparsable
parameter slots, incompatible redefinitions, bad instantiations) are reported
as diagnostics, never raised. Only conditions that make the run meaningless
end up here.
"""

from pathlib import Path
from typing import Optional, Union


class ParmatchError(Exception):
    """Base class for all parmatch errors."""


class SourceReadError(ParmatchError):
    """An input file or root could not be read. Aborts the run."""
    def __init__(self, path: Union[str, Path], reason: str):
        self.path = str(path)
        self.reason = reason
        super().__init__(f"unable to read {self.path}: {reason}")


class ConfigError(ParmatchError):
    """Malformed configuration file or option value."""
    def __init__(self, message: str, source: Optional[Union[str, Path]] = None):
        self.source = str(source) if source is not None else None
        if self.source:
            super().__init__(f"{self.source}: {message}")
        else:
            super().__init__(message)
