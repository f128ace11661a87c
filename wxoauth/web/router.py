"""
WeChat OAuth API endpoints.

- GET /wx/me - Run the login flow for this page load
- GET /wx/oauth - Forget the cached identity and log in again
- GET /wx/userinfo - Read the cached profile
"""

import logging

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse, RedirectResponse
from starlette.responses import Response

from wxoauth.web.dependencies import PageLogin, WxLogin


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/wx", tags=["wechat-oauth"])


def _redirect(login: PageLogin) -> Response:
    return login.respond(
        RedirectResponse(url=login.navigator.location, status_code=status.HTTP_302_FOUND)
    )


@router.get("/me")
async def me(login: WxLogin) -> Response:
    """
    Resolve the visitor's identity.

    Redirects to the provider when there is no cached identity and no
    authorization code. On the return leg the code is exchanged first.

    Returns:
        Identity fields when logged in, 401 when the exchange failed,
        or a redirect to the provider
    """
    await login.controller.init()

    if login.navigator.redirected:
        return _redirect(login)

    identity = login.controller.cache.get()
    if not login.controller.is_logged_in(identity):
        return login.respond(
            JSONResponse(
                status_code=status.HTTP_401_UNAUTHORIZED,
                content={
                    "status": "error",
                    "message": "Not authenticated - reload to try again",
                },
            )
        )

    return login.respond(
        JSONResponse(
            content={
                "status": "success",
                "open_id": identity.primary_id,
                "union_id": identity.secondary_id,
                "user_info": login.controller.get_user_info(),
            }
        )
    )


@router.get("/oauth")
async def oauth(login: WxLogin) -> Response:
    """
    Log in again, e.g. to switch accounts.

    Clears the cached identity and redirects to the provider, which
    returns the visitor to /wx/me.
    """
    return_to = login.navigator.absolute_url(login.request.url_for("me").path)
    login.controller.oauth(redirect_uri=return_to)
    return _redirect(login)


@router.get("/userinfo")
async def userinfo(login: WxLogin) -> Response:
    """Return the cached profile ({} when there is none)."""
    return login.respond(
        JSONResponse(
            content={
                "status": "success",
                "user_info": login.controller.get_user_info(),
            }
        )
    )
