"""
Exceptions raised by the data preparation and modeling workflow.

Every error here is fatal to the current pipeline run. Missing numeric
results (an undefined C:N ratio, say) are never errors; they are NaN.
"""

from typing import Iterable


class SoilCNError(Exception):
    """Base class for soil_cn errors."""


class MalformedInputError(SoilCNError):
    """A required column is absent or holds unparsable values."""


class InconsistentSiteDataError(SoilCNError):
    """More than one set of site-level values was found for a plot."""

    def __init__(self, plot_ids: Iterable, message: str = None):
        self.plot_ids = sorted(plot_ids)
        if message is None:
            message = ("Conflicting site-level values for plot(s): "
                       + ", ".join(str(p) for p in self.plot_ids))
        super().__init__(message)


class InconsistentCoreDataError(SoilCNError):
    """Replicates of a core disagree on a per-core attribute."""

    def __init__(self, core_ids: Iterable, columns: Iterable = ()):
        self.core_ids = sorted(core_ids)
        self.columns = sorted(columns)
        message = ("Replicates disagree on per-core values for core(s): "
                   + ", ".join(str(c) for c in self.core_ids))
        if self.columns:
            message += f" (columns: {', '.join(self.columns)})"
        super().__init__(message)


class UnknownCategoryCodeError(SoilCNError):
    """A treatment code falls outside the harvest/fire lookup tables."""

    def __init__(self, code, message: str = None):
        self.code = code
        if message is None:
            message = f"Unknown treatment code: {code!r}"
        super().__init__(message)


class UnparsablePlotIdError(SoilCNError):
    """A plot label carries no trailing numeric id."""

    def __init__(self, label):
        self.label = label
        super().__init__(f"No trailing plot number in label: {label!r}")


class TableNotFoundError(SoilCNError, KeyError):
    """A table was loaded under a key that was never saved."""

    def __init__(self, key: str, location=None):
        self.key = key
        message = f"No table saved under key {key!r}"
        if location is not None:
            message += f" in {location}"
        super().__init__(message)

    def __str__(self):
        # KeyError would otherwise repr() the message
        return self.args[0]


class EmptyGroupError(SoilCNError):
    """A grouping key mapped to zero rows."""


class InsufficientDataError(SoilCNError):
    """Too few complete rows remain to fit a model."""
