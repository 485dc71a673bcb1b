class ZaiError(Exception):
    """Base class for failures a single command can run into."""


class ConfigurationError(ZaiError):
    pass


class NetworkError(ZaiError):
    def __init__(self, message: str, status_code: int | None = None, body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class ParseError(ZaiError):
    pass


class ValidationError(ZaiError):
    pass


class FileSystemError(ZaiError):
    def __init__(self, message: str, path: str | None = None):
        super().__init__(message)
        self.path = path
