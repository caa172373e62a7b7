"""Run-level failures of the reconciliation engine.

Row-level outcomes (missing data, ambiguity, conflicts) are never raised;
they are reported as suggestion statuses.
"""

from __future__ import annotations


class ReconciliationError(RuntimeError):
    """Base class for failures that abort a whole reconciliation run."""


class ReferenceSheetError(ReconciliationError):
    """Raised when the reference source cannot be read or interpreted."""
