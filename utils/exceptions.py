class StoreError(Exception):
    """A document store call failed. Carries the original message."""

    status_code = 500

    def __init__(self, message: str, collection: str | None = None):
        super().__init__(message)
        self.message = message
        self.collection = collection


class NetworkError(StoreError):
    """The document store could not be reached."""

    status_code = 503


class NotFoundError(StoreError):
    """Update, delete or get against an id that does not exist."""

    status_code = 404


class AuthError(Exception):
    """Invalid admin credentials."""

    def __init__(self, message: str = "Invalid email or password"):
        super().__init__(message)
        self.message = message


class UploadError(Exception):
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
