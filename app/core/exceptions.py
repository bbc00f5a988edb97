"""
Error kinds raised by the subscriber store, notifier and HTTP routes.
Each one knows the HTTP status it maps to.
"""

class SubscriptionError(Exception):
    status_code = 500
    default_message = "Server error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)

class ValidationError(SubscriptionError):
    """A required field is missing or malformed."""
    status_code = 400
    default_message = "Email is required"

class DuplicateKeyError(SubscriptionError):
    """The email is already subscribed."""
    status_code = 400
    default_message = "This email is already subscribed."

class NotFoundError(SubscriptionError):
    status_code = 404
    default_message = "Email not found"

class StoreUnavailableError(SubscriptionError):
    """The subscriber store could not be reached or is not initialised."""
    status_code = 500

class NotificationError(SubscriptionError):
    status_code = 500
