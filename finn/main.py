"""Command-line entry point."""
import argparse
import json
import sys
from pathlib import Path

from finn.analysis import ExpenseMetadata
from finn.config import ConfigManager, get_settings
from finn.llm import VendorCache
from finn.orchestrator import AnalysisOrchestrator
from finn.profiles import JsonProfileStore
from finn.utils.exceptions import ConfigError, FinnError, NoValidTransactionsError, ValidationError
from finn.utils.logger import configure_logging, get_logger, set_log_level

logger = get_logger()


def analyze_command(args, config, settings) -> int:
    """Run the pipeline on a file and store the profile."""
    if args.offline:
        config.use_llm = False
    elif config.use_llm and not config.gemini_api_key:
        logger.warning("GEMINI_API_KEY not set, running keyword heuristics only")
        config.use_llm = False

    is_valid, message = ConfigManager().validate_config(config)
    if not is_valid:
        logger.critical(f"Invalid configuration: {message}")
        return 1
    set_log_level(config.log_level)

    store = JsonProfileStore(settings.profiles_dir)
    orchestrator = AnalysisOrchestrator(config, settings, store)

    try:
        processed = orchestrator.process_file(Path(args.file), args.profile)
    except NoValidTransactionsError as e:
        print(f"✗ {e}. Please upload a different file.", file=sys.stderr)
        return 1
    except ValidationError as e:
        print(f"✗ {e}", file=sys.stderr)
        return 1

    metadata = processed.result.metadata
    if args.json:
        print(json.dumps(metadata.to_dict(), ensure_ascii=False, indent=2))
    else:
        _print_summary(metadata, processed.used_llm)
    return 0


def show_profile_command(args, settings) -> int:
    """Print the stored profile JSON."""
    profile = JsonProfileStore(settings.profiles_dir).get(args.profile)
    if profile is None:
        print(f"No profile stored for: {args.profile}")
        return 1
    print(json.dumps(profile, ensure_ascii=False, indent=2))
    return 0


def clear_profile_command(args, settings) -> int:
    """Delete the stored profile."""
    if JsonProfileStore(settings.profiles_dir).delete(args.profile):
        print(f"✓ Deleted profile: {args.profile}")
    else:
        print(f"No profile stored for: {args.profile}")
    return 0


def clear_cache_command(args, settings) -> int:
    """Delete learned merchant categories."""
    cache = VendorCache(settings.vendors_dir, fuzzy_threshold=settings.vendor_cache_fuzzy_threshold)
    deleted = cache.clear(args.profile)

    if args.profile:
        print(f"✓ Cleared {deleted} learned merchants for profile: {args.profile}")
    else:
        print(f"✓ Cleared {deleted} learned merchants (all profiles)")
    return 0


def _print_summary(metadata: ExpenseMetadata, used_llm: bool) -> None:
    """Print a readable analysis summary."""
    insights = metadata.insights
    lifestyle = metadata.lifestyle

    print(f"\nPeriod: {metadata.period_start} to {metadata.period_end} ({metadata.month_span:.1f} months)")
    print(f"Transactions: {metadata.transaction_count}")
    print(f"Total spent: {metadata.total_expenses:,.2f}")
    print(f"Average per month: {metadata.average_monthly_spend:,.2f}")
    print(f"Trend: {metadata.spending_trend}")
    print(f"Categories via: {'Gemini' if used_llm else 'keyword heuristics'}")

    print(f"\n{'Category':<20} {'Total':>12}")
    print("-" * 33)
    for category, total in sorted(metadata.category_breakdown.items(), key=lambda kv: -kv[1]):
        print(f"{category:<20} {total:>12,.2f}")

    if metadata.top_merchants:
        print(f"\n{'Merchant':<30} {'Visits':>6} {'Total':>12} {'Frequency':<10}")
        print("-" * 61)
        for merchant in metadata.top_merchants:
            print(
                f"{merchant.name[:30]:<30} {merchant.transaction_count:>6} "
                f"{merchant.total_spent:>12,.2f} {merchant.frequency:<10}"
            )

    if metadata.recurring_expenses:
        print("\nRecurring:")
        for item in metadata.recurring_expenses:
            print(f"  {item.name} - {item.amount:,.2f} {item.frequency}, next {item.next_due_date}")

    for anomaly in metadata.anomalies:
        print(f"! {anomaly.date} {anomaly.description}")

    print(
        f"\nLifestyle: {insights.lifestyle}, life stage {lifestyle.life_stage}, "
        f"personality {lifestyle.spending_personality}, transport {lifestyle.transport_mode}"
    )


def main(argv=None) -> int:
    """Main entry point for Finn."""
    parser = argparse.ArgumentParser(description="Finn expense analysis")
    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze = subparsers.add_parser("analyze", help="Analyze an expense file")
    analyze.add_argument("file", help="Text or CSV file with one transaction per line")
    analyze.add_argument("--offline", action="store_true", help="Skip Gemini, use heuristics only")
    analyze.add_argument("--json", action="store_true", help="Print metadata as JSON")

    subparsers.add_parser("show-profile", help="Print the stored profile")
    subparsers.add_parser("clear-profile", help="Delete the stored profile")
    subparsers.add_parser("clear-cache", help="Delete learned merchant categories")

    for subparser in subparsers.choices.values():
        subparser.add_argument("--profile", help="Profile ID (defaults to the configured profile)")

    args = parser.parse_args(argv)

    try:
        settings = get_settings()
        configure_logging(
            settings.log_level,
            settings.log_max_file_size_mb,
            settings.log_backup_count,
            settings.logs_dir
        )

        config_manager = ConfigManager(settings.home_dir)
        config = config_manager.load_config()
    except ConfigError as e:
        logger.critical(f"Invalid configuration: {e}")
        return 1

    if args.command == "clear-cache":
        return clear_cache_command(args, settings)

    args.profile = args.profile or config.profile_id

    try:
        if args.command == "analyze":
            return analyze_command(args, config, settings)
        if args.command == "show-profile":
            return show_profile_command(args, settings)
        return clear_profile_command(args, settings)
    except FinnError as e:
        logger.critical(f"Fatal error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
