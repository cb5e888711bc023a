"""
Base types for remote data source adapters.

Adapters stay narrow: they fetch and decode. Scan state, cursor handling and
cell typing belong to the connector itself.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional, Protocol


@dataclass(slots=True)
class VerificationResult:
    """
    Outcome of an adapter connectivity check.

    Attributes
    ----------
    success:
        Whether the check passed.
    message:
        Human-readable summary.
    details:
        Optional structured metadata such as the number of rows returned.
    """

    success: bool
    message: str
    details: Optional[Mapping[str, object]] = None


class DataSourceAdapter(Protocol):
    """Protocol implemented by remote source adapters."""

    def verify(self) -> VerificationResult:
        """Perform a lightweight connectivity check."""
