"""
Script Analyzer error types.

Every failure the analysis flow can produce is one of these. Routers map them
to HTTP status codes; PersistenceError is only ever logged.
"""


class ScriptAnalyzerError(Exception):
    """Base class for all script analyzer errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AnalysisValidationError(ScriptAnalyzerError):
    """Request rejected before any generation call is made."""


class AnalysisInProgressError(ScriptAnalyzerError):
    """An analysis for the same client is still outstanding."""


class GenerationError(ScriptAnalyzerError):
    """The generation service failed or returned nothing usable."""


class PersistenceError(ScriptAnalyzerError):
    """Saving, loading or removing persisted analysis state failed."""


class FileReadError(ScriptAnalyzerError):
    """An uploaded script file could not be read."""

    def __init__(self, filename: str, reason: str = ""):
        super().__init__(f"Failed to read the file: {filename}")
        self.filename = filename
        self.reason = reason
