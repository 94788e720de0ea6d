"""Application-level exceptions for the RiskViz API."""


class RiskVizError(Exception):
    """Base class for RiskViz errors."""


class StorageError(RiskVizError):
    """A backing store read or write failed."""


class UploadError(RiskVizError):
    """An uploaded file was missing, too large, or could not be parsed."""


class RouteLoadError(RiskVizError):
    """A route module could not be imported or exposes no router."""
