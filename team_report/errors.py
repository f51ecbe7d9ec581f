"""Error kinds shared by the report pipeline"""

from typing import Optional


class ReportError(Exception):
    """Base class for report pipeline errors"""


class ConfigurationError(ReportError):
    """Required configuration is missing or malformed"""


class UpstreamRequestError(ReportError):
    """A collaborator endpoint answered with a non-success status or could not be reached"""

    def __init__(self, url: str, status: Optional[int] = None, body: str = ""):
        self.url = url
        self.status = status
        self.body = body
        if status is None:
            message = f"Request to {url} failed: {body}"
        else:
            message = f"API error ({status}) for {url}"
            if body:
                message += f": {body}"
        super().__init__(message)


class PartialDataError(UpstreamRequestError):
    """A secondary enrichment call failed while the primary record was fetched"""
