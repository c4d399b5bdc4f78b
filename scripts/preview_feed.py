#!/usr/bin/env python3
"""Terminal preview of a user's Relevant feed.

Logs in (or reuses the stored token), loads a few pages of the feed and
prints them as text cards.

Usage:
    # Reuse the token saved by a previous login
    python scripts/preview_feed.py

    # Log in first
    python scripts/preview_feed.py --email testuser@relevant.com --password testpass123

    # Saved list, two pages
    python scripts/preview_feed.py --list saved --pages 2
"""

import argparse
import asyncio
import getpass
import sys

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

from relevant.core.container import create_container  # noqa: E402
from relevant.core.exceptions import RelevantError  # noqa: E402
from relevant.core.logging import get_logger, setup_logging  # noqa: E402
from relevant.presentation import ErrorBoundary, render_content_card  # noqa: E402

setup_logging()
logger = get_logger(__name__)


async def preview(list_name: str, pages: int, email: str | None, password: str | None) -> int:
    """Print the requested list.

    Returns:
        Process exit code
    """
    container = create_container()
    async with container.dashboard() as dashboard:
        await dashboard.start(f"/{list_name}")

        if email:
            await dashboard.login(email, password or getpass.getpass("Password: "))
        elif not dashboard.session.is_authenticated:
            logger.error("Not logged in; pass --email to log in")
            return 1

        feed = dashboard.content.accumulator(list_name)
        boundary = ErrorBoundary()
        for _ in range(pages):
            if not await dashboard.call(feed.load_next):
                break

        for block in boundary.render_all(render_content_card, feed.items):
            print(block)
            print("-" * 60)

        logger.info(
            "Preview complete",
            items=len(feed.items),
            has_more=feed.has_more,
            render_errors=len(boundary.errors),
        )
    return 0


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Preview a Relevant content list in the terminal",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--list",
        "-l",
        choices=["feed", "discover", "saved"],
        default="feed",
        help="Which list to show (default: feed)",
    )

    parser.add_argument(
        "--pages",
        "-p",
        type=int,
        default=1,
        help="Number of pages to load (default: 1)",
    )

    parser.add_argument("--email", type=str, default=None, help="Log in with this email")
    parser.add_argument("--password", type=str, default=None, help="Password (prompted if omitted)")

    args = parser.parse_args()

    try:
        code = asyncio.run(preview(args.list, args.pages, args.email, args.password))
    except KeyboardInterrupt:
        logger.info("Preview cancelled by user")
        sys.exit(1)
    except RelevantError as e:
        logger.error("Preview failed", error=str(e), **e.context)
        sys.exit(1)
    sys.exit(code)


if __name__ == "__main__":
    main()
