"""
Custom exceptions for the provenance system
"""


class ProvenanceSystemError(Exception):
    """Base exception for provenance system"""
    pass


class ConfigurationError(ProvenanceSystemError):
    """Configuration related errors"""
    pass


class SchemaError(ProvenanceSystemError):
    """Raw analysis payload failed structural validation"""
    def __init__(self, field: str, reason: str):
        super().__init__(f"{field}: {reason}")
        self.field = field
        self.reason = reason


class UpstreamError(ProvenanceSystemError):
    """Research provider call failed"""
    def __init__(self, message: str, status_code: int = None, details: str = None):
        super().__init__(message)
        self.status_code = status_code
        self.details = details


class UpstreamUnavailableError(UpstreamError):
    """Provider could not be reached or answered with a non-2xx status"""
    pass


class UpstreamFormatError(UpstreamError):
    """Provider answered, but the body could not be parsed as a payload"""
    pass
