"""Hydro Ottawa command line client.

Authenticates with the SRP handshake, then prints the account profile and
the hourly usage summary for one day.

Environment variables:
  - HO_PASSWORD   (optional; prompted for interactively when unset)
"""

from __future__ import annotations

import argparse
import asyncio
import getpass
import logging
import os
import sys
from datetime import date, timedelta

from hydroottawa.api.client import (
    ApiError,
    HoApi,
    SessionExpiredError,
    UnexpectedResponseError,
)
from hydroottawa.api.models import HoHourlyUsage, HoProfile
from hydroottawa.auth.client.ho_client import HoAuthClient
from hydroottawa.auth.client.models.config import CognitoConfig
from hydroottawa.auth.client.models.errors import (
    CryptoError,
    InvalidCredentialsError,
    ProtocolError,
    TransportError,
)

logger = logging.getLogger("hydroottawa")


def _yesterday() -> date:
    return date.today() - timedelta(days=1)


def parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="hydroottawa",
        description="Fetch Hydro Ottawa profile and hourly usage.",
    )
    p.add_argument("-u", "--username", required=True, help="Account username.")
    p.add_argument(
        "-d",
        "--date",
        type=date.fromisoformat,
        default=_yesterday(),
        help="Day to fetch, YYYY-MM-DD (default: yesterday).",
    )
    p.add_argument("-v", "--verbose", action="store_true", help="Log progress.")
    return p.parse_args(argv)


def get_password(username: str) -> str:
    password = os.environ.get("HO_PASSWORD")
    if password:
        return password
    return getpass.getpass(f"Password for {username}: ")


def format_profile(profile: HoProfile) -> str:
    account = profile.account_information
    address = account.service_address
    return "\n".join(
        [
            f"Account:  {account.account_id}",
            f"User:     {profile.user_information.username}",
            f"Service:  {address.street_number} {address.street_name}, "
            f"{address.city} {address.province} {address.postal_code}",
        ]
    )


def format_usage(usage: HoHourlyUsage) -> str:
    summary = usage.summary
    lines = [
        f"Date:     {summary.actual_date} ({summary.rate_plan})",
        f"Usage:    {summary.total_usage:.2f} kWh",
        f"Cost:     ${summary.total_cost:.2f}",
    ]
    lines.extend(
        f"  {interval.start_date_time}  {interval.rate_band:<10} "
        f"{interval.hourly_usage:7.2f} kWh  ${interval.hourly_cost:.2f}"
        for interval in usage.intervals
    )
    return "\n".join(lines)


async def run(username: str, password: str, day: date) -> None:
    config = CognitoConfig()
    async with HoAuthClient(config) as auth_client:
        auth = await auth_client.authenticate(username, password)
    print("Authentication successful!")

    api = HoApi(config)
    try:
        profile = await api.profile(auth)
        usage = await api.hourly(auth, day)
    finally:
        await api.close()

    print(format_profile(profile))
    print(format_usage(usage))


def main(argv: list[str] | None = None) -> int:
    args = parse_args(sys.argv[1:] if argv is None else argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.ERROR,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    try:
        password = get_password(args.username)
        asyncio.run(run(args.username, password, args.date))
        return 0
    except InvalidCredentialsError:
        print("Authentication failed: wrong username or password.", file=sys.stderr)
        return 1
    except SessionExpiredError:
        print("Session rejected by Hydro Ottawa, please retry.", file=sys.stderr)
        return 2
    except UnexpectedResponseError as e:
        logger.exception("Unexpected API response")
        print(f"Unexpected response from Hydro Ottawa: {e}", file=sys.stderr)
        return 3
    except (TransportError, ApiError) as e:
        print(f"Could not reach Hydro Ottawa: {e}", file=sys.stderr)
        return 2
    except (ProtocolError, CryptoError) as e:
        logger.exception("Unexpected authentication failure")
        print(f"Unexpected failure, please report a bug: {e}", file=sys.stderr)
        return 3
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    raise SystemExit(main())
