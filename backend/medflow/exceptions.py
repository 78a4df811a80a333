class MedflowError(Exception):
    """Base class for errors raised by the stores and contexts."""


class DuplicateUsername(MedflowError):
    def __init__(self, username: str):
        self.username = username
        super().__init__("Username already exists")


class AuthenticationFailed(MedflowError):
    def __init__(self):
        super().__init__("Invalid credentials")


class NotAuthenticated(MedflowError):
    def __init__(self):
        super().__init__("Not authenticated")


class FileFormatInvalid(MedflowError):
    def __init__(self, reason: str, details: dict = None):
        self.reason = reason
        self.details = details or {}
        super().__init__(reason)
