#!/usr/bin/env python3
"""Issue or revoke gateway access tokens.

Tokens are opaque random strings stored in the ``api_tokens`` table next
to a comma-separated role list. The roles only mean something through the
policy document: a token with role ``editor`` can write wherever a rule
lists ``editor`` under ``write``.
"""

import argparse
import sys
from pathlib import Path

# Allow running from a checkout without installing the package.
sys.path.insert(0, str(Path(__file__).parent.parent))

from blobgate.database import Base, SessionLocal, engine
from blobgate.repositories.token_repository import TokenRepository, generate_token
from blobgate.services.role_service import parse_roles
from blobgate import models  # noqa: F401


def issue(roles: str, token: str = "") -> str:
    parsed = parse_roles(roles)
    if not parsed:
        print("✗ At least one role is required, e.g. 'viewer,editor'")
        sys.exit(1)

    token = token or generate_token()
    db = SessionLocal()
    try:
        TokenRepository(db).upsert(token, ",".join(sorted(parsed)))
    finally:
        db.close()
    print(f"✓ Token for roles {sorted(parsed)}:")
    print(token)
    return token


def revoke(token: str) -> None:
    db = SessionLocal()
    try:
        removed = TokenRepository(db).revoke(token)
    finally:
        db.close()
    if not removed:
        print("✗ Unknown token")
        sys.exit(1)
    print("✓ Token revoked")


def main():
    parser = argparse.ArgumentParser(
        description="Manage blobgate access tokens",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s issue viewer
  %(prog)s issue "viewer,editor" --token my-fixed-token
  %(prog)s revoke <token>
        """,
    )
    sub = parser.add_subparsers(dest="command", required=True)

    issue_p = sub.add_parser("issue", help="Create a token (or replace its roles)")
    issue_p.add_argument("roles", help="Comma-separated role list")
    issue_p.add_argument("--token", default="", help="Use this token instead of a random one")

    revoke_p = sub.add_parser("revoke", help="Delete a token")
    revoke_p.add_argument("token")

    args = parser.parse_args()
    Base.metadata.create_all(bind=engine)

    if args.command == "issue":
        issue(args.roles, args.token)
    else:
        revoke(args.token)


if __name__ == "__main__":
    main()
