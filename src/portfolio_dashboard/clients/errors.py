class DashboardFetchError(Exception):
    """Base class for failures raised while reading from the portfolio API."""


class RequestError(DashboardFetchError):
    def __init__(self, resource: str, status_code: int, status_text: str):
        self.resource = resource
        self.status_code = status_code
        self.status_text = status_text
        super().__init__(f"Failed to fetch {resource}: {status_text}")


class ParseError(DashboardFetchError):
    def __init__(self, resource: str, detail: str):
        self.resource = resource
        self.detail = detail
        super().__init__(f"Failed to parse {resource}: {detail}")


class UpstreamUnavailableError(DashboardFetchError):
    def __init__(self, resource: str, reason: str):
        self.resource = resource
        self.reason = reason
        super().__init__(f"Failed to fetch {resource}: {reason}")
