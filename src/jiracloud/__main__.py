"""CLI entry point for jiracloud.

Usage:
    python -m jiracloud authorize [--state STATE] [--scope SCOPE]...
    python -m jiracloud exchange <code>
    python -m jiracloud refresh
    python -m jiracloud whoami
    python -m jiracloud request <method> <resource> [--param key=value]... [--agile]
    python -m jiracloud labels [--start-at N] [--max-results N]
    python -m jiracloud board <board_id_or_key> [--projects]

Configuration comes from JIRA_* environment variables (see jiracloud.config).
Credentials are kept in ~/.config/jiracloud/credentials.json unless --store
is given.
"""

from __future__ import annotations

import argparse
import json
import sys
from typing import Any

from jiracloud.auth import DEFAULT_STATE
from jiracloud.client import JiraClient
from jiracloud.config import get_settings
from jiracloud.exceptions import JiraError, NotAuthenticatedError
from jiracloud.logging import setup_logging
from jiracloud.store import CredentialStore
from jiracloud.transport import AGILE_API_PATH, API_PATH


def parse_params(pairs: list[str] | None) -> dict[str, str]:
    """Turn ``["key=value", ...]`` into a dict."""
    params: dict[str, str] = {}
    for pair in pairs or []:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise ValueError(f"Expected key=value, got {pair!r}")
        params[key] = value
    return params


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False))


def _restore(client: JiraClient, store: CredentialStore) -> None:
    saved = store.load()
    if saved is None:
        raise NotAuthenticatedError(
            f"No saved credential at {store.path}. Run 'jiracloud exchange <code>' first."
        )
    client.auth.restore_credential(saved)


# --- Command handlers ---


def cmd_authorize(client: JiraClient, store: CredentialStore, args: argparse.Namespace) -> int:
    """Print the authorization URL."""
    url = client.auth.build_authorization_url(state=args.state, scopes=args.scope)
    print(url)
    return 0


def cmd_exchange(client: JiraClient, store: CredentialStore, args: argparse.Namespace) -> int:
    """Exchange an authorization code and save the credential."""
    credential = client.auth.exchange_code_for_tokens(args.code)
    store.save(credential)
    print(f"Authenticated for cloud {credential.cloud_id}")
    print(f"Token expires in: {credential.expires_in_seconds()} seconds")
    print(f"Credential saved to {store.path}")
    return 0


def cmd_refresh(client: JiraClient, store: CredentialStore, args: argparse.Namespace) -> int:
    """Refresh the saved credential."""
    _restore(client, store)
    credential = client.auth.refresh_tokens()
    store.save(credential)
    print(f"Token refreshed, expires in: {credential.expires_in_seconds()} seconds")
    return 0


def cmd_whoami(client: JiraClient, store: CredentialStore, args: argparse.Namespace) -> int:
    """Show the authenticated user."""
    _restore(client, store)
    owner = client.auth.current_owner()
    print(f"{owner.display_name} ({owner.account_id})")
    print(f"Cloud id: {owner.cloud_id}")
    return 0


def cmd_request(client: JiraClient, store: CredentialStore, args: argparse.Namespace) -> int:
    """Send a raw request and print the JSON response."""
    params = parse_params(args.param)
    _restore(client, store)
    api_path = AGILE_API_PATH if args.agile else API_PATH
    data = client.requests.send(args.method, args.resource, params, api_path=api_path)
    _print_json(data)
    return 0


def cmd_labels(client: JiraClient, store: CredentialStore, args: argparse.Namespace) -> int:
    """List labels."""
    _restore(client, store)
    page = client.labels.get_all({"startAt": args.start_at, "maxResults": args.max_results})
    if page is None:
        print("Error: unexpected response from Jira", file=sys.stderr)
        return 1
    for label in page.values:
        print(label)
    return 0


def cmd_board(client: JiraClient, store: CredentialStore, args: argparse.Namespace) -> int:
    """Show a board or its projects."""
    _restore(client, store)
    if args.projects:
        page = client.boards.get_projects(args.board)
        if page is None:
            print("Error: unexpected response from Jira", file=sys.stderr)
            return 1
        for project in page.values:
            print(f"{project.get('key', '')}\t{project.get('name', '')}")
        return 0

    board = client.boards.get(args.board)
    if board is None:
        print("Error: unexpected response from Jira", file=sys.stderr)
        return 1
    print(f"{board.id}\t{board.name}\t{board.type}")
    return 0


# --- CLI setup ---


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jiracloud",
        description="Jira Cloud OAuth 2.0 client",
    )
    parser.add_argument(
        "--store",
        default=None,
        help="Credential file (default: ~/.config/jiracloud/credentials.json)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # authorize
    authorize_parser = subparsers.add_parser("authorize", help="Print the authorization URL")
    authorize_parser.add_argument("--state", default=DEFAULT_STATE, help="OAuth state value")
    authorize_parser.add_argument(
        "--scope",
        action="append",
        default=None,
        help="Scope to request (can be repeated, default: JIRA_SCOPES)",
    )
    authorize_parser.set_defaults(func=cmd_authorize)

    # exchange
    exchange_parser = subparsers.add_parser(
        "exchange", help="Exchange an authorization code for tokens"
    )
    exchange_parser.add_argument("code", help="Code from the redirect URL")
    exchange_parser.set_defaults(func=cmd_exchange)

    # refresh
    refresh_parser = subparsers.add_parser("refresh", help="Refresh the saved access token")
    refresh_parser.set_defaults(func=cmd_refresh)

    # whoami
    whoami_parser = subparsers.add_parser("whoami", help="Show the authenticated user")
    whoami_parser.set_defaults(func=cmd_whoami)

    # request
    request_parser = subparsers.add_parser("request", help="Send a raw API request")
    request_parser.add_argument("method", help="HTTP method, e.g. GET")
    request_parser.add_argument("resource", help="Resource path, e.g. issue/TEST-1")
    request_parser.add_argument(
        "--param",
        action="append",
        metavar="KEY=VALUE",
        help="Request parameter (can be repeated)",
    )
    request_parser.add_argument(
        "--agile",
        action="store_true",
        help="Target /rest/agile/1.0/ instead of /rest/api/2/",
    )
    request_parser.set_defaults(func=cmd_request)

    # labels
    labels_parser = subparsers.add_parser("labels", help="List labels")
    labels_parser.add_argument("--start-at", type=int, default=0)
    labels_parser.add_argument("--max-results", type=int, default=1000)
    labels_parser.set_defaults(func=cmd_labels)

    # board
    board_parser = subparsers.add_parser("board", help="Show an Agile board")
    board_parser.add_argument("board", help="Board id or key")
    board_parser.add_argument(
        "--projects", action="store_true", help="List the board's projects instead"
    )
    board_parser.set_defaults(func=cmd_board)

    return parser


def main(argv: list[str] | None = None, client: JiraClient | None = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = get_settings() if client is None else client.settings
    setup_logging(
        json_logs=settings.json_logs,
        log_level="DEBUG" if args.verbose else settings.log_level,
    )

    store = CredentialStore(args.store)
    jira = client or JiraClient(settings)
    try:
        result: int = args.func(jira, store, args)
        return result
    except (JiraError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        if client is None:
            jira.close()


if __name__ == "__main__":
    sys.exit(main())
