import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from config.settings import Settings, get_settings, missing_backend_vars, require_backends
from pipelines.lead_pipeline import LeadPipeline
from services.apollo_enricher import ApolloEnricher
from services.engager_extractor import extract_profile_urls
from services.notifiers import ConsoleNotifier, SlackNotifier
from services.reporting import print_summary
from services.smartlead_delivery import SmartleadDelivery
from services.trigger_parser import parse_trigger
from sources.apify_posts import ApifyPostScraper
from utils.logging_setup import init_logging


logger = logging.getLogger(__name__)


def build_pipeline(settings: Settings, notifier_name: str = "console") -> LeadPipeline:
    use_slack = notifier_name == "slack"
    require_backends(settings, with_slack=use_slack)
    notifier = SlackNotifier(settings) if use_slack else ConsoleNotifier()
    return LeadPipeline(
        notifier=notifier,
        scraper=ApifyPostScraper(settings),
        enricher=ApolloEnricher(settings),
        delivery_backend=SmartleadDelivery(settings),
        settings=settings,
    )


def _load_records(path: str) -> list:
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if isinstance(data, dict):
        data = data.get("items") or data.get("records") or []
    return data if isinstance(data, list) else []


def cmd_run(args) -> int:
    settings = get_settings()
    text = args.post_url or args.text
    trigger = parse_trigger(text)
    if trigger is None:
        print("No LinkedIn post URL found")
        return 1
    try:
        pipeline = build_pipeline(settings, args.notifier)
    except (RuntimeError, ValueError) as exc:
        print(str(exc))
        return 1
    try:
        stats = asyncio.run(pipeline.run(trigger, args.thread))
    except Exception as exc:
        logger.error("Pipeline run failed: %s", exc, extra={"error": str(exc)})
        return 1
    print_summary(stats, trigger.post_url)
    return 0


def cmd_parse(args) -> int:
    trigger = parse_trigger(args.text)
    if trigger is None:
        print("No LinkedIn post URL found")
        return 1
    print(json.dumps(trigger.model_dump(), indent=2, ensure_ascii=False))
    return 0


def cmd_extract(args) -> int:
    records = _load_records(args.input)
    urls = extract_profile_urls(records)
    for url in urls:
        print(url)
    print(f"Extracted {len(urls)} profile URLs from {len(records)} records", file=sys.stderr)
    return 0


def cmd_check_config(args) -> int:
    settings = get_settings()
    missing = missing_backend_vars(settings, with_slack=args.slack)
    if missing:
        print(f"Missing: {', '.join(missing)}")
        return 1
    print("Configuration OK")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="LinkedIn post engagers to campaign leads")
    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=settings.log_level.upper(),
        help="Set logging level (default: from settings)",
    )
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_run = sub.add_parser("run", help="Scrape, enrich and deliver leads for one LinkedIn post")
    src = p_run.add_mutually_exclusive_group(required=True)
    src.add_argument("--post-url", "-u", help="LinkedIn post URL")
    src.add_argument("--text", "-t", help="Free-form message text containing a post URL")
    p_run.add_argument("--thread", default=None, help="Chat thread reference for replies")
    p_run.add_argument("--notifier", choices=["console", "slack"], default="console", help="Where progress is reported (default: console)")
    p_run.set_defaults(func=cmd_run)

    p_parse = sub.add_parser("parse", help="Show the trigger parsed from a message")
    p_parse.add_argument("--text", "-t", required=True, help="Message text")
    p_parse.set_defaults(func=cmd_parse)

    p_ext = sub.add_parser("extract", help="Extract profile URLs from a saved scraper dataset")
    p_ext.add_argument("--input", "-i", required=True, help="Path to JSON file (array or {\"items\": [...]})")
    p_ext.set_defaults(func=cmd_extract)

    p_chk = sub.add_parser("check-config", help="Report missing credentials")
    p_chk.add_argument("--slack", action="store_true", help="Also require Slack credentials")
    p_chk.set_defaults(func=cmd_check_config)

    args = parser.parse_args(argv)
    init_logging(args.log_level)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
