"""
Main entry point for local execution.

Usage:
    python -m src.main COMMAND [OPTIONS]

Commands:
    serve               Run the HTTP API
    top                 Print the top coins by market cap
    coin ID             Print detail for one coin (tickers like "btc" accepted)
    chart ID            Print the daily price history of one coin
    trending            Print the coins trending in searches
    valuate USER        Value a user's portfolio at live prices
    create-user USER    Create an empty user record
    issue-token USER    Print a signed bearer token for a user (development)

Options:
    --log-level     Logging level: DEBUG, INFO, WARNING, ERROR (default: INFO)
    --json-logs     Output logs as JSON

Examples:
    # Run the API on the configured host/port
    python -m src.main serve

    # Show the top 10 coins
    python -m src.main top --limit 10

    # Value a portfolio
    python -m src.main valuate alice
"""

import argparse
import asyncio
import sys
from typing import NoReturn

from src.adapters.auth.jwt_identity import issue_token
from src.domain.exceptions import CoinSightError
from src.infrastructure.config import Settings, get_settings
from src.infrastructure.container import cleanup_container, create_container
from src.infrastructure.logging import get_logger, setup_logging
from src.presentation.formatting import (
    format_compact_usd,
    format_percent,
    format_supply,
    format_usd,
)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="CoinSight - Crypto watchlist and portfolio tracker",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (default: from config)",
    )
    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Output logs as JSON",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("serve", help="Run the HTTP API")

    top = commands.add_parser("top", help="Print the top coins by market cap")
    top.add_argument("--limit", type=int, help="Number of coins (default: from config)")

    coin = commands.add_parser("coin", help="Print detail for one coin")
    coin.add_argument("coin_id")

    chart = commands.add_parser("chart", help="Print the price history of one coin")
    chart.add_argument("coin_id")
    chart.add_argument("--days", type=int, default=30, help="History range in days (default: 30)")

    commands.add_parser("trending", help="Print trending coins")

    valuate = commands.add_parser("valuate", help="Value a user's portfolio")
    valuate.add_argument("user_id")

    create_user = commands.add_parser("create-user", help="Create an empty user record")
    create_user.add_argument("user_id")

    token = commands.add_parser("issue-token", help="Print a signed token for a user")
    token.add_argument("user_id")
    token.add_argument("--ttl", type=int, default=3600, help="Lifetime in seconds")

    return parser.parse_args(argv)


def print_top(snapshots: list) -> None:
    print(f"{'#':>4}  {'Coin':<24} {'Price':>16} {'24h':>9} {'Market Cap':>12}")
    for snapshot in snapshots:
        rank = snapshot.market_cap_rank if snapshot.market_cap_rank is not None else "-"
        print(
            f"{rank:>4}  {snapshot.name[:24]:<24} "
            f"{format_usd(snapshot.current_price_usd):>16} "
            f"{format_percent(snapshot.price_change_pct_24h):>9} "
            f"{format_compact_usd(snapshot.market_cap_usd):>12}"
        )


def print_coin(snapshot) -> None:
    print("\n" + "=" * 60)
    print(f"{snapshot.name} ({snapshot.symbol})")
    print("=" * 60)
    print(f"Price:              {format_usd(snapshot.current_price_usd)}")
    print(f"Market Cap:         {format_compact_usd(snapshot.market_cap_usd)}")
    print(f"24h Volume:         {format_compact_usd(snapshot.volume_24h_usd)}")
    print(
        "Change 1h/24h/7d/30d: "
        f"{format_percent(snapshot.price_change_pct_1h)} / "
        f"{format_percent(snapshot.price_change_pct_24h)} / "
        f"{format_percent(snapshot.price_change_pct_7d)} / "
        f"{format_percent(snapshot.price_change_pct_30d)}"
    )
    print(f"Circulating Supply: {format_supply(snapshot.circulating_supply, snapshot.symbol)}")
    print(f"Max Supply:         {format_supply(snapshot.max_supply, snapshot.symbol)}")
    print("=" * 60)


def print_chart(history) -> None:
    print(f"{history.coin_id}: last {history.days} days, change {format_percent(history.change_pct)}")
    for point in history.prices:
        print(f"  {point.timestamp:%Y-%m-%d %H:%M}  {format_usd(point.price_usd):>16}")


def print_trending(coins: list) -> None:
    for position, coin in enumerate(coins, start=1):
        rank = f"#{coin.market_cap_rank}" if coin.market_cap_rank is not None else "unranked"
        print(f"{position:>2}. {coin.name} ({coin.symbol})  market cap rank {rank}")


def print_report(report) -> None:
    stats = report.stats
    print("\n" + "=" * 60)
    print(f"PORTFOLIO: {report.user_id}")
    print("=" * 60)
    for row in stats.holdings:
        print(
            f"[{row.index}] {row.coin_id:<20} {row.amount:>14,.6g}  "
            f"invested {format_usd(row.invested):>14}  "
            f"value {format_usd(row.current_value) if row.is_priced else 'N/A':>14}  "
            f"{format_percent(row.gain_loss_pct) if row.is_priced else '':>9}"
        )
    print("-" * 60)
    print(f"Total Invested:      {format_usd(stats.total_invested)}")
    print(f"Total Current Value: {format_usd(stats.total_current_value)}")
    print(
        f"Total Gain/Loss:     {format_usd(stats.total_gain_loss)} "
        f"({format_percent(stats.total_gain_loss_pct)})"
    )
    if report.is_partial:
        print(f"\nNo live price for: {', '.join(stats.unpriced_coin_ids)}")
        if report.batch.stopped_reason:
            print(f"Stopped early: {report.batch.stopped_reason}")
    print("=" * 60)


async def run_async(args: argparse.Namespace, settings: Settings) -> int:
    """Run a market data command asynchronously."""
    logger = get_logger(__name__)

    try:
        container = await create_container(settings)

        if args.command == "top":
            snapshots = await container.market_data_adapter.fetch_top_coins(args.limit)
            print_top(snapshots)
        elif args.command == "coin":
            snapshot = await container.market_data_adapter.fetch_coin_detail(args.coin_id)
            print_coin(snapshot)
        elif args.command == "chart":
            history = await container.market_data_adapter.fetch_market_chart(args.coin_id, args.days)
            print_chart(history)
        elif args.command == "trending":
            print_trending(await container.market_data_adapter.fetch_trending())
        elif args.command == "valuate":
            report = await container.portfolio_valuation.execute(args.user_id)
            print_report(report)
        elif args.command == "create-user":
            record = await container.user_store.create_user(args.user_id)
            print(f"User ready: {record.user_id}")

        return 0

    except CoinSightError as e:
        logger.error("Command failed", command=args.command, error=e.code)
        print(f"\nError: {e.message}")
        for key, value in e.details.items():
            print(f"  {key}: {value}")
        return 1

    finally:
        await cleanup_container()


def serve(settings: Settings) -> int:
    """Run the API with uvicorn."""
    import uvicorn

    from src.api.app import create_app

    missing = settings.validate_required()
    if missing:
        get_logger(__name__).error("Missing required settings", missing=missing)
        print(f"Error: Missing required environment variables: {', '.join(missing)}")
        print("Please check your .env file or environment variables.")
        return 1

    uvicorn.run(
        create_app(settings=settings),
        host=settings.api_host,
        port=settings.api_port,
        log_config=None,
    )
    return 0


def main(argv: list[str] | None = None) -> NoReturn:
    """Main entry point."""
    args = parse_args(argv)
    settings = get_settings()

    setup_logging(
        log_level=args.log_level or settings.log_level,
        json_format=args.json_logs or settings.json_logs,
    )

    if args.command == "serve":
        sys.exit(serve(settings))

    if args.command == "issue-token":
        if not settings.jwt_secret:
            print("Error: JWT_SECRET is not set")
            sys.exit(1)
        print(issue_token(settings.jwt_secret, args.user_id, args.ttl, settings.jwt_user_claim))
        sys.exit(0)

    sys.exit(asyncio.run(run_async(args, settings)))


if __name__ == "__main__":
    main()
