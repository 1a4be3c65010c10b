#!/usr/bin/env python3
"""Generate bearer tokens for manual API testing.

    python scripts/generate_test_token.py manager-1 --role manager
"""
import argparse
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.api.deps import issue_smoke_token  # noqa: E402
from src.core.auth import Role  # noqa: E402


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("user_id", nargs="?", default="admin-test")
    parser.add_argument("--role", choices=[role.value for role in Role], default=Role.ADMIN.value)
    parser.add_argument("--email")
    args = parser.parse_args()

    token = issue_smoke_token(args.user_id, role=Role(args.role), email=args.email)
    print(f"{args.role.title()} token for {args.user_id}:\n{token}")


if __name__ == "__main__":
    main()
