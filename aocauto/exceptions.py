class AocError(Exception):
    """base exception for this package"""


class ConfigurationError(AocError):
    """missing session token, or no usable day/year"""


class PuzzleLockedError(AocError):
    """trying to access input before the unlock"""


class TransportError(AocError):
    """the server could not be reached, or replied with an HTTP error status"""

    def __init__(self, msg, status=None):
        super().__init__(msg)
        self.status = status


class DeadTokenError(TransportError):
    """the auth is expired/incorrect"""


class ExampleError(AocError):
    """for problems in the declaration of worked examples"""
