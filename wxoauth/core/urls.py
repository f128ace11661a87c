"""
URL helpers for the provider redirect and the return leg.

The provider dictates the wire format: redirect_uri is the only parameter
that is percent-encoded, parameters keep their insertion order, and the
authorize URL ends with a fragment marker that selects the in-app browser
flow.
"""

import logging
import re
from typing import Any, Mapping, Optional
from urllib.parse import quote, unquote

from wxoauth.core.domain import RedirectQuery, Scope
from wxoauth.core.exceptions import MalformedReturnLeg


logger = logging.getLogger(__name__)

AUTHORIZE_URL = "https://open.weixin.qq.com/connect/oauth2/authorize"
REDIRECT_MARKER = "#wechat_redirect"

# Characters left alone by JavaScript's encodeURIComponent
_URI_COMPONENT_SAFE = "-_.!~*'()"


def encode_uri_component(value: str) -> str:
    """Percent-encode a value the way browsers encode a URI component."""
    return quote(value, safe=_URI_COMPONENT_SAFE)


def _decode_component(raw: str, name: str) -> str:
    try:
        decoded = unquote(raw.replace("+", "%20"), errors="strict")
    except UnicodeDecodeError as e:
        raise MalformedReturnLeg(f"Parameter '{name}' is not valid UTF-8: {e}") from e

    if not decoded.strip():
        raise MalformedReturnLeg(f"Parameter '{name}' is empty after decoding")

    return decoded


def get_query_param(url: str, name: str) -> Optional[str]:
    """
    Extract a single parameter from a URL's query or fragment.

    Values may be terminated by '&', ';', '#' or the end of the string,
    because the provider appends '#wechat_redirect' and some mobile
    browsers move the query string behind the fragment.

    Args:
        url: Full page URL
        name: Parameter name

    Returns:
        The decoded value, or None when the parameter is absent

    Raises:
        MalformedReturnLeg: If the parameter is present but unusable
    """
    pattern = r"[?&]" + re.escape(name) + r"=([^&;#]+)(?:&|#|;|$)"
    match = re.search(pattern, url)
    if match is None:
        return None
    return _decode_component(match.group(1), name)


def parse_return_leg(url: str) -> RedirectQuery:
    """
    Read `code` and `state` from the current page URL.

    A malformed parameter is logged and treated as absent.
    """
    values: dict[str, Optional[str]] = {}
    for name in ("code", "state"):
        try:
            values[name] = get_query_param(url, name)
        except MalformedReturnLeg as e:
            logger.warning(
                f"Ignoring malformed return leg parameter: {e}",
                extra={"extra_fields": {"param": name}},
            )
            values[name] = None
    return RedirectQuery(**values)


def build_url(url: str, params: Any) -> str:
    """
    Append parameters to a URL, skipping those whose value is None.

    Values are written as-is; callers encode what needs encoding. The
    query always starts with '?', so the base URL must not carry one.
    Anything other than a mapping leaves the URL unchanged.
    """
    if not isinstance(params, Mapping):
        return url

    pairs = [f"{key}={value}" for key, value in params.items() if value is not None]
    if not pairs:
        return url

    return f"{url}?{'&'.join(pairs)}"


def build_authorize_url(
    app_id: str,
    redirect_uri: str,
    scope: Scope,
    state: Optional[str] = None,
) -> str:
    """
    Build the provider's authorize URL for a full-page redirect.

    Args:
        app_id: Application identifier registered with the provider
        redirect_uri: Page to return to, not yet encoded
        scope: Requested scope
        state: Opaque value echoed back on the return leg

    Returns:
        Authorize URL ending with the fragment marker
    """
    url = build_url(
        AUTHORIZE_URL,
        {
            "appid": app_id,
            "redirect_uri": encode_uri_component(redirect_uri),
            "response_type": "code",
            "scope": scope.value,
            "state": state,
        },
    )
    return f"{url}{REDIRECT_MARKER}"
