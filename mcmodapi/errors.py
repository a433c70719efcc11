class ApiError(Exception):
    """Error descriptor rendered as ``{error, message}`` with an HTTP status."""

    def __init__(self, error, message, status=500):
        super().__init__(message)
        self.error = error
        self.message = message
        self.status = status

    def to_dict(self):
        return {'error': self.error, 'message': self.message}


class FetchError(Exception):
    pass


class ScrapeError(Exception):
    pass
