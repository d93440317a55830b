"""
Itinerary export.

Renders an itinerary as JSON (camelCase keys, indent 2), plain text or
markdown, and builds a shareable view without internal fields. Output
depends only on the itinerary, so exporting the same itinerary twice
yields identical strings.
"""

from functools import partial
from typing import Any, Callable, Dict, List

from itinerary_agents.shared.contracts import Itinerary

CURRENCY_SYMBOLS = {"INR": "₹", "USD": "$", "EUR": "€"}
EXPORT_FORMATS = ("json", "text", "markdown")


def _group_indian(digits: str) -> str:
    """Group digits as 12,34,567 (last three, then pairs)."""
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    pairs = []
    while len(head) > 2:
        pairs.insert(0, head[-2:])
        head = head[:-2]
    if head:
        pairs.insert(0, head)
    return ",".join(pairs + [tail])


def format_currency(amount: float, currency: str = "INR") -> str:
    """
    Format an amount with its currency symbol.

    INR uses Indian digit grouping; unknown currencies are rendered as INR.

    Examples:
        >>> format_currency(120000)
        '₹1,20,000'
        >>> format_currency(1234.5, "USD")
        '$1,234.5'
    """
    if not isinstance(amount, (int, float)) or isinstance(amount, bool):
        return "0"
    currency = currency if currency in CURRENCY_SYMBOLS else "INR"
    sign = "-" if amount < 0 else ""
    rounded = round(abs(amount), 2)
    whole, _, fraction = f"{rounded:.2f}".partition(".")
    fraction = fraction.rstrip("0")

    if currency == "INR":
        grouped = _group_indian(whole)
    else:
        grouped = f"{int(whole):,}"
    number = f"{grouped}.{fraction}" if fraction else grouped
    return f"{sign}{CURRENCY_SYMBOLS[currency]}{number}"


def to_json(itinerary: Itinerary) -> str:
    return itinerary.model_dump_json(by_alias=True, indent=2)


def to_markdown(itinerary: Itinerary) -> str:
    money = partial(format_currency, currency=itinerary.currency)
    lines: List[str] = [f"# {itinerary.title}", ""]
    if itinerary.summary:
        lines += [itinerary.summary, ""]
    if itinerary.executive_summary:
        lines += ["## Executive Summary", "", itinerary.executive_summary, ""]
    lines += [
        f"**Location:** {itinerary.location}",
        f"**Participants:** {itinerary.participants}",
        f"**Total Budget:** {money(itinerary.total_budget)}",
        "",
    ]

    for day in itinerary.days:
        heading = f"## Day {day.day}: {day.theme}" if day.theme else f"## Day {day.day}"
        lines += [heading, ""]
        if day.date:
            lines += [f"*{day.date}*", ""]
        for activity in day.activities:
            lines.append(f"### {activity.time_slot}: {activity.title}")
            if activity.description:
                lines.append(activity.description)
            lines.append(f"- **Cost:** {money(activity.cost)}")
            if activity.venue.name:
                lines.append(f"- **Venue:** {activity.venue.name}")
            if activity.venue.address:
                lines.append(f"- **Address:** {activity.venue.address}")
            if activity.venue.contact:
                lines.append(f"- **Contact:** {activity.venue.contact}")
            lines.append("")
        lines += [f"**Daily Total:** {money(day.total_cost)}", ""]

    notes = itinerary.final_notes
    if notes is not None:
        lines += ["## Final Notes", ""]
        if notes.weather_info:
            lines.append(f"**Weather:** {notes.weather_info}")
        if notes.emergency_info:
            lines.append(f"**Emergency:** {notes.emergency_info}")
        for title, items in (
            ("Packing List", notes.packing_list),
            ("Cultural Tips", notes.cultural_tips),
            ("Preparation Checklist", notes.preparation_checklist),
            ("Payment Tips", notes.payment_tips),
        ):
            if items:
                lines += ["", f"### {title}"] + [f"- {item}" for item in items]
        lines.append("")

    return "\n".join(lines)


def to_text(itinerary: Itinerary) -> str:
    money = partial(format_currency, currency=itinerary.currency)
    title = itinerary.title or "Itinerary"
    lines: List[str] = [title, "=" * len(title), ""]
    if itinerary.summary:
        lines += [itinerary.summary, ""]
    lines += [
        f"Location: {itinerary.location}",
        f"Participants: {itinerary.participants}",
        f"Total Budget: {money(itinerary.total_budget)}",
        "",
    ]

    for day in itinerary.days:
        heading = f"Day {day.day}: {day.theme}" if day.theme else f"Day {day.day}"
        lines += [heading, "-" * 30]
        for activity in day.activities:
            lines.append(f"{activity.time_slot}: {activity.title}")
            if activity.description:
                lines.append(f"  {activity.description}")
            lines.append(f"  Cost: {money(activity.cost)}")
            if activity.venue.name:
                lines.append(f"  Venue: {activity.venue.name}")
            lines.append("")
        lines += [f"Daily Total: {money(day.total_cost)}", ""]

    return "\n".join(lines)


def shareable_version(itinerary: Itinerary) -> Dict[str, Any]:
    """
    A clean view of an itinerary for sharing with participants.

    Ids, data sources, metadata, validation and refinement history are left
    out. Keys are camelCase like the JSON export.
    """
    return {
        "title": itinerary.title,
        "summary": itinerary.summary,
        "executiveSummary": itinerary.executive_summary,
        "type": itinerary.type.value,
        "location": itinerary.location,
        "participants": itinerary.participants,
        "duration": len(itinerary.days),
        "totalBudget": itinerary.total_budget,
        "currency": itinerary.currency or "INR",
        "generatedAt": itinerary.generated_at,
        "days": [
            {
                "day": day.day,
                "date": day.date,
                "theme": day.theme,
                "activities": [
                    {
                        "timeSlot": activity.time_slot,
                        "title": activity.title,
                        "description": activity.description,
                        "cost": activity.cost,
                        "venue": activity.venue.name,
                        "address": activity.venue.address,
                    }
                    for activity in day.activities
                ],
                "totalCost": day.total_cost,
            }
            for day in itinerary.days
        ],
    }


EXPORTERS: Dict[str, Callable[[Itinerary], str]] = {
    "json": to_json,
    "text": to_text,
    "markdown": to_markdown,
}


def export_itinerary(itinerary: Itinerary, fmt: str = "json") -> str:
    """
    Render an itinerary in one of ``json``, ``text`` or ``markdown``.

    Raises:
        ValueError: For any other format
    """
    exporter = EXPORTERS.get((fmt or "").lower())
    if exporter is None:
        raise ValueError(
            f"Unsupported export format: {fmt} (expected one of {', '.join(EXPORT_FORMATS)})"
        )
    return exporter(itinerary)
