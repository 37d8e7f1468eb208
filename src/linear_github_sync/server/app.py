"""FastAPI app factory.

Endpoints are thin wrappers over :mod:`linear_github_sync.bridge.oauth`. The
context save/fetch endpoints belong to the persistence layer and are not served
here.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Literal

import requests
from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware

from linear_github_sync import __version__
from linear_github_sync.bridge.helpers import get_webhook_url, is_dev
from linear_github_sync.bridge.models import TokenExchangeRequest, TokenExchangeResponse
from linear_github_sync.bridge.oauth import (
    OAuthExchangeError,
    OAuthNotConfigured,
    OAuthTokenExchanger,
    TokenResponse,
    generate_verification_code,
    get_github_auth_url,
    get_linear_auth_url,
)
from linear_github_sync.server.config import ServerSettings

logger = logging.getLogger(__name__)

Provider = Literal["linear", "github"]


def _to_api_token(token: TokenResponse) -> TokenExchangeResponse:
    return TokenExchangeResponse(
        access_token=token.access_token,
        token_type=token.token_type,
        scope=token.scope,
    )


def create_app(
    settings: ServerSettings | None = None,
    exchanger: OAuthTokenExchanger | None = None,
) -> FastAPI:
    settings = settings or ServerSettings()

    app = FastAPI(
        title="Linear-GitHub Sync",
        version=__version__,
        description="OAuth token exchange for the Linear <-> GitHub sync bridge.",
        openapi_url="/api/openapi.json",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    # Expose settings for request handlers that want to read it.
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.parsed_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/api/health")
    def health() -> dict[str, object]:
        return {
            "status": "ok",
            "version": __version__,
            "dev": is_dev(settings.environment),
            "webhookUrl": get_webhook_url(settings.app_url),
        }

    @app.get("/api/{provider}/auth-url")
    def auth_url(
        provider: Provider,
        state: str | None = Query(default=None),
    ) -> dict[str, str]:
        verification_code = state or generate_verification_code()
        if provider == "linear":
            url = get_linear_auth_url(
                verification_code,
                redirect_uri=settings.redirect_uri,
                client_id=settings.linear_oauth_id,
            )
        else:
            url = get_github_auth_url(
                verification_code,
                redirect_uri=settings.redirect_uri,
                client_id=settings.github_oauth_id,
            )
        return {"url": url, "state": verification_code}

    @app.post("/api/linear/token", response_model=TokenExchangeResponse)
    def linear_token(req: TokenExchangeRequest) -> TokenExchangeResponse:
        return _exchange(
            lambda ex: ex.exchange_linear_code(code=req.code, redirect_uri=req.redirect_uri),
            provider="linear",
        )

    @app.post("/api/github/token", response_model=TokenExchangeResponse)
    def github_token(req: TokenExchangeRequest) -> TokenExchangeResponse:
        return _exchange(
            lambda ex: ex.exchange_github_code(code=req.code, redirect_uri=req.redirect_uri),
            provider="github",
        )

    def _exchange(
        call: Callable[[OAuthTokenExchanger], TokenResponse], *, provider: str
    ) -> TokenExchangeResponse:
        # Handlers run in a threadpool; each request gets its own requests.Session.
        ex = exchanger or _build_exchanger(settings)
        try:
            return _to_api_token(call(ex))
        except OAuthNotConfigured as e:
            raise HTTPException(status_code=409, detail=str(e)) from e
        except (OAuthExchangeError, ValueError) as e:
            logger.warning("Token exchange failed", extra={"provider": provider})
            raise HTTPException(status_code=400, detail=str(e)) from e
        except requests.RequestException as e:
            logger.warning("Token endpoint unreachable", extra={"provider": provider})
            raise HTTPException(
                status_code=502, detail=f"{provider} token endpoint request failed"
            ) from e
        finally:
            if ex is not exchanger:
                ex.close()

    return app


def _build_exchanger(settings: ServerSettings) -> OAuthTokenExchanger:
    return OAuthTokenExchanger(
        linear_client_id=settings.linear_oauth_id,
        linear_client_secret=settings.linear_oauth_secret,
        github_client_id=settings.github_oauth_id,
        github_client_secret=settings.github_oauth_secret,
    )
