from __future__ import annotations

from models import RunStatistics


def format_summary(stats: RunStatistics) -> str:
    """Chat-formatted final summary for a pipeline run."""
    lines = [
        "✅ *Pipeline Complete*",
        "",
        f"Found *{stats.engagers}* engagers",
        f"→ *{stats.enriched}* verified emails",
        f"→ *{stats.pushed}* pushed to campaign",
    ]
    if stats.failed > 0:
        lines.extend(["", f"⚠️ {stats.failed} failed to push"])
    return "\n".join(lines)


def format_status(text: str) -> str:
    return f"⏳ {text}"


def format_error(text: str) -> str:
    return f"❌ *Pipeline Error*\n{text}"


def print_summary(stats: RunStatistics, post_url: str | None = None) -> None:
    """Print summary of a pipeline run."""
    print("\n" + "="*60)
    print("LINKEDIN ENGAGER LEADS - SUMMARY")
    print("="*60)
    if post_url:
        print(f"Post URL: {post_url}")
    print(f"Engagers Found: {stats.engagers}")
    print(f"Verified Emails: {stats.enriched}")
    print(f"Pushed to Campaign: {stats.pushed}")
    print(f"Failed to Push: {stats.failed}")
    print("="*60)
