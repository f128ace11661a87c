"""
Domain exceptions for the WeChat OAuth login flow.

Exchange-path errors are caught at the exchange boundary and reported via
the failure hook. StorageError is the exception: it is fatal and is caught
by the centralized exception handler in wxoauth.main.
"""


class WxOAuthError(Exception):
    """Base class for all login flow errors."""

    pass


class SerializationError(WxOAuthError):
    """Raised when the profile cannot be turned into a storable string."""

    pass


class ExchangeFailure(WxOAuthError):
    """
    Raised when exchanging the authorization code fails.

    Covers network errors, backend rejections, and a success mapping that
    raised. The underlying error is available as __cause__.
    """

    pass


class MalformedReturnLeg(WxOAuthError):
    """
    Raised when a return-leg parameter is present but unusable.

    The controller treats this as "no code" and starts a fresh redirect.
    """

    pass


class StorageError(WxOAuthError):
    """
    Raised when the cookie store cannot be read or written.

    The whole login scheme depends on working storage, so this is
    never swallowed.
    """

    pass


class TransportError(WxOAuthError):
    """Raised by Transport adapters for network and HTTP status errors."""

    pass


class ConfigurationError(WxOAuthError):
    """
    Raised when client settings are missing or unusable.

    Surfaces as a 500 through the centralized exception handler.
    """

    pass
