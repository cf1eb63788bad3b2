"""CLI entrypoint for Property Scout."""

import argparse
import json
import sys


def _build_search():
    from property_scout.config import settings
    from property_scout.search import PropertySearch

    return PropertySearch(settings)


def cmd_search(args):
    """Run a natural-language search and print the top results."""
    search = _build_search()
    result = search.search(args.query)

    if args.json:
        print(json.dumps(result.to_dict(), indent=2, default=str))
        return

    print(f"Filters: {result.filters.to_params() or '(none)'}")
    print(f"Found: {len(result.properties)} listings\n")

    listings = result.scored or []
    for item in listings[:args.limit]:
        prop = item.property
        print(f"  [{item.score:3d}] {prop.address} - ${prop.price:,.0f} "
              f"({prop.bedrooms or '?'} bd, {prop.property_type.value})")
        for reason in item.reasons:
            print(f"         {reason}")

    if not listings:
        for prop in result.properties[:args.limit]:
            print(f"  {prop.address} - ${prop.price:,.0f}")

    report = result.market_report
    if report is not None and report.total_listings:
        print(f"\nMarket: {report.trend_description}")
        print(f"  Average price: ${report.average_price:,.0f} (median ${report.median_price:,.0f})")
        print(f"  Competition: {report.competition_level}")
        print(f"  Market score: {report.market_score} ({report.market_rating})")

    if result.investments:
        best = result.investments[0]
        print(f"\nBest investment: {best.address} - {best.rating} ({best.recommendation}), "
              f"cap rate {best.cap_rate:.1f}%, cash flow ${best.monthly_cash_flow:,.0f}/mo")

    if result.diagnostics:
        print("\nDiagnostics:")
        for message in result.diagnostics:
            print(f"  ! {message}")


def cmd_interpret(args):
    """Show the filters a query translates to."""
    search = _build_search()
    filters = search.interpreter.interpret(args.query)
    print(json.dumps(filters.to_params(), indent=2))


def cmd_usage(args):
    """Show this month's feature usage and cost."""
    search = _build_search()
    tracker = search.usage

    usage = tracker.monthly_usage()
    totals = {}
    for features in usage.values():
        for feature, counters in features.items():
            calls, cost = totals.get(feature, (0, 0.0))
            totals[feature] = (calls + counters.calls, cost + counters.cost)

    if not totals:
        print("No usage recorded this month")
    for feature, (calls, cost) in sorted(totals.items()):
        print(f"  {feature}: {calls} calls, ${cost:.2f}")

    print(f"\nMonthly cost: ${tracker.monthly_cost():.2f} / ${tracker.config.max_monthly_cost:.2f}")
    if tracker.check_cost_limit():
        print("⚠️  Monthly cost limit exceeded")


def cmd_serve(args):
    """Start the API server."""
    import uvicorn

    from property_scout.config import settings

    uvicorn.run(
        "property_scout.api.app:app",
        host=args.host or settings.host,
        port=args.port or settings.port,
        reload=args.reload,
    )


def cmd_run(args):
    """Run saved searches on schedule (or once)."""
    from property_scout.scheduler import AutoSearchScheduler, setup_logging

    setup_logging()

    scheduler = AutoSearchScheduler()

    if args.once:
        print("Running saved searches once...")
        results = scheduler.run_now()

        successful = sum(1 for r in results if r.success)
        total_new = sum(len(r.new_listings) for r in results)

        print(f"\n✓ Auto-search complete:")
        print(f"  Successful: {successful}/{len(results)}")
        print(f"  New listings: {total_new}")

        if successful < len(results):
            print(f"  Failed: {len(results) - successful}")
            sys.exit(1)
    else:
        if not scheduler.config.enabled:
            print("✗ Auto-search is disabled in configuration.")
            print("  Enable it in config.yaml (auto_search.enabled: true)")
            print("  or set SCOUT_AUTO_SEARCH=true")
            sys.exit(1)

        scheduler.start()
        next_run = scheduler.get_next_run_time()
        if next_run:
            print(f"✓ Scheduler started")
            print(f"  Next run: {next_run.isoformat()}")
            print(f"  Cron: {scheduler.config.cron_expression}")
            print(f"  Saved searches: {len(scheduler.config.queries)}")
            print("\nPress Ctrl+C to stop...")

        try:
            import time
            while True:
                time.sleep(1)
        except (KeyboardInterrupt, SystemExit):
            print("\n\nShutting down...")
            scheduler.shutdown()


def main(argv=None):
    parser = argparse.ArgumentParser(description="Property Scout")
    sub = parser.add_subparsers(dest="command")

    # search
    p_search = sub.add_parser("search", help="Search listings with a natural-language query")
    p_search.add_argument("query", help='e.g. "3 bedroom house under 400k in Austin, TX"')
    p_search.add_argument("--limit", type=int, default=10, help="Listings to print")
    p_search.add_argument("--json", action="store_true", help="Print the full result as JSON")
    p_search.set_defaults(func=cmd_search)

    # interpret
    p_interpret = sub.add_parser("interpret", help="Show the filters a query translates to")
    p_interpret.add_argument("query")
    p_interpret.set_defaults(func=cmd_interpret)

    # usage
    p_usage = sub.add_parser("usage", help="Show this month's feature usage and cost")
    p_usage.set_defaults(func=cmd_usage)

    # serve
    p_serve = sub.add_parser("serve", help="Start the API server")
    p_serve.add_argument("--host", default=None)
    p_serve.add_argument("--port", type=int, default=None)
    p_serve.add_argument("--reload", action="store_true")
    p_serve.set_defaults(func=cmd_serve)

    # run
    p_run = sub.add_parser("run", help="Run saved searches on schedule")
    p_run.add_argument(
        "--once",
        action="store_true",
        help="Run saved searches once and exit (don't start scheduler)",
    )
    p_run.set_defaults(func=cmd_run)

    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        sys.exit(1)
    args.func(args)


if __name__ == "__main__":
    main()
