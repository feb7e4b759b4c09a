"""Print a bearer token for a voter identity (local development only)."""

import argparse

from election_service.auth import create_access_token


def main():
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("identity", help="Voter identity stored as the token subject")
    parser.add_argument("--minutes", type=int, default=60, help="Token lifetime in minutes")
    args = parser.parse_args()
    print(create_access_token(args.identity, expires_minutes=args.minutes))


if __name__ == "__main__":
    main()
