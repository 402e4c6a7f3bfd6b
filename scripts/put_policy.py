#!/usr/bin/env python3
"""Validate a policy document and upload it to the blob store.

The gateway silently falls back to deny-everything when the stored policy
cannot be parsed, so this script parses the file with the same code and
refuses to upload anything the gateway would reject.
"""

import argparse
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from blobgate.core.config import settings
from blobgate.database import Base, SessionLocal, engine
from blobgate.services.policy_service import parse_policy
from blobgate.storage.sql_store import SqlBlobStore
from blobgate import models  # noqa: F401


def main():
    parser = argparse.ArgumentParser(description="Upload the access policy document")
    parser.add_argument("file", help="Path to the policy JSON file")
    parser.add_argument(
        "--key",
        default=settings.policy_key,
        help=f"Blob key to write (default: {settings.policy_key})",
    )
    parser.add_argument("--dry-run", action="store_true", help="Validate only")
    args = parser.parse_args()

    raw = Path(args.file).read_bytes()
    result = parse_policy(raw)
    if not result.ok:
        print(f"✗ Rejected: {result.error}")
        sys.exit(1)

    print(f"✓ {len(result.policy.directories)} rule(s):")
    for rule in sorted(result.policy.directories, key=lambda r: r.prefix):
        read = "ANONYMOUS" if rule.is_anonymous_read else ",".join(sorted(rule.read_roles)) or "-"
        write = ",".join(sorted(rule.write)) or "-"
        print(f"    {rule.prefix:40} read={read} write={write}")

    if args.dry_run:
        return

    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        put = SqlBlobStore(db).put(args.key, raw, "application/json")
    finally:
        db.close()
    print(f"✓ Stored at {put.key} (etag {put.etag})")


if __name__ == "__main__":
    main()
