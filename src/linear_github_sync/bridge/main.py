"""CLI entrypoint for the Linear <-> GitHub sync bridge setup."""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import asdict

from pydantic import ValidationError

from linear_github_sync import __version__
from linear_github_sync.bridge.config import SyncSettings
from linear_github_sync.bridge.context_api import ContextApiClient
from linear_github_sync.bridge.crypto import decrypt, encrypt
from linear_github_sync.bridge.github.client import GitHubClient
from linear_github_sync.bridge.helpers import (
    ClipboardUnavailable,
    copy_to_clipboard,
    format_json,
    get_webhook_url,
)
from linear_github_sync.bridge.linear.client import LinearClient, LinearGraphQLError
from linear_github_sync.bridge.logging import configure_logging
from linear_github_sync.bridge.oauth import (
    OAuthExchangeError,
    OAuthNotConfigured,
    OAuthTokenExchanger,
    generate_verification_code,
    get_github_auth_url,
    get_github_token_url,
    get_linear_auth_url,
    get_linear_token_url,
)
from linear_github_sync.bridge.setup_service import PublicLabelMissing, SyncSetupService

logger = logging.getLogger(__name__)

PROVIDERS = ("linear", "github")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="linear-github-sync",
        description="Connect a Linear team to a GitHub repository for two-way issue sync",
    )
    parser.add_argument("--version", action="version", version=f"linear-github-sync {__version__}")

    subparsers = parser.add_subparsers(dest="command", required=True)

    auth_url = subparsers.add_parser("auth-url", help="Print the OAuth authorization URL")
    auth_url.add_argument("provider", choices=PROVIDERS)
    auth_url.add_argument(
        "--state",
        default=None,
        help="Verification code to round-trip through OAuth (random if omitted)",
    )
    auth_url.add_argument(
        "--redirect-uri",
        default=None,
        help="OAuth redirect URI (defaults to APP_URL)",
    )
    auth_url.add_argument("--copy", action="store_true", help="Also copy the URL to the clipboard")

    token_url = subparsers.add_parser(
        "token-url", help="Print the page where a personal API token can be created"
    )
    token_url.add_argument("provider", choices=PROVIDERS)
    token_url.add_argument("--copy", action="store_true", help="Also copy the URL to the clipboard")

    exchange = subparsers.add_parser(
        "exchange-code", help="Trade an OAuth authorization code for an access token"
    )
    exchange.add_argument("provider", choices=PROVIDERS)
    exchange.add_argument("--code", required=True, help="Authorization code from the callback")
    exchange.add_argument(
        "--redirect-uri",
        default=None,
        help="Redirect URI used in the authorization request (defaults to APP_URL)",
    )

    linear_context = subparsers.add_parser(
        "linear-context", help="List Linear teams with their labels and workflow states"
    )
    linear_context.add_argument("--token", default=None, help="Linear token (or LINEAR_TOKEN)")

    github_repos = subparsers.add_parser(
        "github-repos", help="List GitHub repositories the token can access"
    )
    github_repos.add_argument(
        "--token", default=None, help="GitHub token (or SYNC_GITHUB_TOKEN)"
    )

    link = subparsers.add_parser(
        "link",
        help="Register webhooks on both sides and save the team <-> repository mapping",
    )
    link.add_argument("--team-id", required=True, help="Linear team ID")
    link.add_argument(
        "--repo",
        "--repository",
        dest="repository",
        required=True,
        help="GitHub repository in the form 'owner/repo'",
    )
    link.add_argument("--linear-token", default=None, help="Linear token (or LINEAR_TOKEN)")
    link.add_argument(
        "--github-token", default=None, help="GitHub token (or SYNC_GITHUB_TOKEN)"
    )

    encrypt_cmd = subparsers.add_parser("encrypt", help="Encrypt a secret with ENCRYPTION_KEY")
    encrypt_cmd.add_argument("text")

    decrypt_cmd = subparsers.add_parser("decrypt", help="Decrypt a secret with ENCRYPTION_KEY")
    decrypt_cmd.add_argument("content", help="Hex-encoded ciphertext")
    decrypt_cmd.add_argument("--iv", required=True, help="Hex-encoded initialisation vector")

    return parser


def _require(value: str | None, fallback: str, name: str) -> str:
    token = (value or fallback).strip()
    if not token:
        raise ValueError(f"{name} is required (pass it as an option or set it in .env)")
    return token


def _emit(text: str, *, copy: bool) -> None:
    print(text)
    if copy:
        tool = copy_to_clipboard(text)
        print(f"Copied to clipboard ({tool})", file=sys.stderr)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = SyncSettings()
    except ValidationError as e:
        # Logging isn't configured yet; keep it simple and actionable.
        print("Configuration error (check your .env):", file=sys.stderr)
        print(e, file=sys.stderr)
        return 2

    configure_logging(settings.log_level)

    try:
        if args.command == "auth-url":
            state = args.state or generate_verification_code()
            redirect_uri = args.redirect_uri or settings.redirect_uri
            if args.provider == "linear":
                url = get_linear_auth_url(
                    state, redirect_uri=redirect_uri, client_id=settings.linear_oauth_id
                )
            else:
                url = get_github_auth_url(
                    state, redirect_uri=redirect_uri, client_id=settings.github_oauth_id
                )
            _emit(url, copy=args.copy)
            if not args.state:
                print(f"state={state}", file=sys.stderr)
            return 0

        if args.command == "token-url":
            url = get_linear_token_url() if args.provider == "linear" else get_github_token_url()
            _emit(url, copy=args.copy)
            return 0

        if args.command == "exchange-code":
            exchanger = OAuthTokenExchanger(
                linear_client_id=settings.linear_oauth_id,
                linear_client_secret=settings.linear_oauth_secret,
                github_client_id=settings.github_oauth_id,
                github_client_secret=settings.github_oauth_secret,
            )
            try:
                redirect_uri = args.redirect_uri or settings.redirect_uri
                if args.provider == "linear":
                    token = exchanger.exchange_linear_code(code=args.code, redirect_uri=redirect_uri)
                else:
                    token = exchanger.exchange_github_code(code=args.code, redirect_uri=redirect_uri)
            finally:
                exchanger.close()
            print(format_json(asdict(token)))
            return 0

        if args.command == "linear-context":
            linear = LinearClient(
                token=_require(args.token, settings.linear_token, "Linear token"),
                graphql_url=settings.linear_graphql_url,
            )
            try:
                context = linear.get_context()
            finally:
                linear.close()
            print(format_json(asdict(context)))
            return 0

        if args.command == "github-repos":
            github = GitHubClient(
                token=_require(args.token, settings.github_token, "GitHub token"),
                base_url=settings.github_base_url,
            )
            try:
                repos = github.list_repos()
            finally:
                github.close()
            print(format_json([asdict(r) for r in repos]))
            return 0

        if args.command == "link":
            linear = LinearClient(
                token=_require(args.linear_token, settings.linear_token, "Linear token"),
                graphql_url=settings.linear_graphql_url,
            )
            github = GitHubClient(
                token=_require(args.github_token, settings.github_token, "GitHub token"),
                base_url=settings.github_base_url,
            )
            context_api = ContextApiClient(
                base_url=settings.context_api_url,
                encryption_key=settings.encryption_key,
            )
            try:
                service = SyncSetupService(
                    linear=linear,
                    github=github,
                    context_api=context_api,
                    webhook_url=get_webhook_url(settings.app_url),
                )
                result = service.link(team_id=args.team_id, repo_name=args.repository)
            finally:
                linear.close()
                github.close()
                context_api.close()
            print(
                f"Linked Linear team {result.linear_context.team_name!r} "
                f"to {result.repo.name} (webhook #{result.github_webhook.id})"
            )
            return 0

        if args.command == "encrypt":
            encrypted = encrypt(args.text, settings.encryption_key)
            print(format_json({"hash": encrypted.hash, "initVector": encrypted.init_vector}))
            return 0

        if args.command == "decrypt":
            print(decrypt(args.content, args.iv, settings.encryption_key))
            return 0

        logger.error("Unknown command", extra={"command": args.command})
        return 2

    except (
        ClipboardUnavailable,
        OAuthNotConfigured,
        PublicLabelMissing,
        ValueError,
        LookupError,
    ) as e:
        logger.warning(str(e), extra={"command": args.command})
        print(str(e), file=sys.stderr)
        return 3

    except (LinearGraphQLError, OAuthExchangeError) as e:
        logger.error(str(e), extra={"command": args.command})
        print(str(e), file=sys.stderr)
        return 1

    except Exception:
        logger.exception("Command failed")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
