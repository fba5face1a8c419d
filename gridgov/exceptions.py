"""
GridGov Exceptions

Package-wide exception roots. Governance-specific errors live in
gridgov.governance.proposals and derive from GridGovException.
"""


class GridGovException(Exception):
    """Base exception for GridGov."""
    pass


class ConfigurationError(GridGovException):
    """Configuration error."""
    pass
