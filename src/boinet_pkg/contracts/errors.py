"""Error definitions for the BOIN-ET simulation package."""

from __future__ import annotations
from typing import Dict, Optional


class BoinetError(Exception):
    """Base exception for all package errors."""

    def __init__(self, message: str, details: Optional[Dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(BoinetError):
    """Malformed design inputs, always raised before any replication runs."""
    pass


class EstimationError(BoinetError):
    """Numeric fit failures inside the dose-response estimators."""
    pass
