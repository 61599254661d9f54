"""Adaptive Card assembly for restock notifications.

Every text block has a fixed default (text and styling). Callers pass a
partial override per block; each field set on the override replaces the
same field of the default and nothing is merged below that level.
"""

from dataclasses import dataclass, field, fields, replace
from typing import Any, Mapping, Optional, Sequence, Union

from restock_bot.notify.grid import DEFAULT_MAX_COLUMNS, DEFAULT_MIN_COLUMNS, layout

CARD_SCHEMA = "http://adaptivecards.io/schemas/adaptive-card.json"
CARD_VERSION = "1.3"


@dataclass(frozen=True)
class Fact:
    """Key/value pair rendered as one grid cell."""

    key: str
    value: Any


@dataclass(frozen=True)
class TextBlock:
    """Styled Adaptive Card ``TextBlock``."""

    text: str
    size: str = "Default"
    weight: str = "Default"
    color: str = "Default"
    is_subtle: bool = False
    wrap: bool = True
    spacing: str = "Default"
    separator: bool = False

    def to_element(self) -> dict[str, Any]:
        return {
            "type": "TextBlock",
            "text": self.text,
            "size": self.size,
            "weight": self.weight,
            "color": self.color,
            "isSubtle": self.is_subtle,
            "wrap": self.wrap,
            "spacing": self.spacing,
            "separator": self.separator,
        }


@dataclass(frozen=True)
class BlockOverride:
    """Partial ``TextBlock``; ``None`` fields keep the default."""

    text: Optional[str] = None
    size: Optional[str] = None
    weight: Optional[str] = None
    color: Optional[str] = None
    is_subtle: Optional[bool] = None
    wrap: Optional[bool] = None
    spacing: Optional[str] = None
    separator: Optional[bool] = None


Override = Union[str, Mapping[str, Any], BlockOverride, None]

DEFAULT_TITLE = TextBlock(text="Restock Report", size="Large", weight="Bolder")
DEFAULT_DATE_RANGE = TextBlock(
    text="Date range unavailable", size="Small", is_subtle=True, spacing="None"
)
DEFAULT_STATUS = TextBlock(
    text="Status unavailable", weight="Bolder", color="Accent", spacing="Medium"
)
DEFAULT_DESCRIPTION = TextBlock(text="No description provided")
FOOTER = TextBlock(
    text="Automated refurbished restock report",
    size="Small",
    is_subtle=True,
    separator=True,
    spacing="Large",
)


def to_override(value: Override) -> BlockOverride:
    """Normalize the accepted override shapes. A bare string sets the text."""
    if value is None:
        return BlockOverride()
    if isinstance(value, BlockOverride):
        return value
    if isinstance(value, str):
        return BlockOverride(text=value)
    known = {f.name for f in fields(BlockOverride)}
    unknown = set(value) - known
    if unknown:
        raise ValueError(f"Unknown block fields: {', '.join(sorted(unknown))}")
    return BlockOverride(**value)


def merge_block(default: TextBlock, override: Override) -> TextBlock:
    """Replace each field of ``default`` that ``override`` sets."""
    override = to_override(override)
    changes = {
        f.name: getattr(override, f.name)
        for f in fields(BlockOverride)
        if getattr(override, f.name) is not None
    }
    return replace(default, **changes)


@dataclass
class NotificationData:
    """Per-run content of the card."""

    title: Override = None
    date_range: Override = None
    status: Override = None
    description: Override = None
    facts: list[Union[Fact, str]] = field(default_factory=list)


def split_facts(facts: Sequence[Union[Fact, str]]) -> tuple[list[str], list[Fact]]:
    """
    Separate literal text from grid facts.

    Facts without a key or with a ``None`` value are dropped; the rest are
    stringified.
    """
    literals: list[str] = []
    pairs: list[Fact] = []
    for item in facts:
        if isinstance(item, str):
            literals.append(item)
        elif isinstance(item, Fact) and item.key and item.value is not None:
            pairs.append(Fact(key=str(item.key), value=str(item.value)))
    return literals, pairs


def _cell(fact: Optional[Fact]) -> dict[str, Any]:
    items = []
    if fact is not None:
        items = [
            TextBlock(text=fact.key, weight="Bolder", is_subtle=True, size="Small").to_element(),
            TextBlock(text=fact.value, spacing="None").to_element(),
        ]
    return {"type": "Column", "width": "stretch", "items": items}


def build_card(
    data: NotificationData,
    min_columns: int = DEFAULT_MIN_COLUMNS,
    max_columns: int = DEFAULT_MAX_COLUMNS,
    columns: int | None = None,
) -> dict[str, Any]:
    """
    Assemble the notification card.

    Body order: title, date range, status, description (with any literal
    facts appended on new lines), one ``ColumnSet`` per grid row, footer.

    Args:
        data: Block overrides and facts
        min_columns: Lower grid column bound
        max_columns: Upper grid column bound
        columns: Forced grid column count

    Returns:
        Adaptive Card payload
    """
    literals, pairs = split_facts(data.facts)

    description = merge_block(DEFAULT_DESCRIPTION, data.description)
    if literals:
        description = replace(description, text="\n".join([description.text, *literals]))

    body = [
        merge_block(DEFAULT_TITLE, data.title).to_element(),
        merge_block(DEFAULT_DATE_RANGE, data.date_range).to_element(),
        merge_block(DEFAULT_STATUS, data.status).to_element(),
        description.to_element(),
    ]

    grid = layout(pairs, min_columns=min_columns, max_columns=max_columns, columns=columns)
    for row in grid.rows:
        body.append({
            "type": "ColumnSet",
            "spacing": "Medium",
            "columns": [_cell(fact) for fact in row],
        })

    body.append(FOOTER.to_element())

    return {
        "type": "AdaptiveCard",
        "$schema": CARD_SCHEMA,
        "version": CARD_VERSION,
        "body": body,
    }
