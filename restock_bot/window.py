"""Watermark persistence and daily window calculation.

The watermark is the start of the next day to process. Each run covers
exactly one calendar day ``[start, start + 1 day)`` and the next run
starts where this one ended, so consecutive saves never overlap or skip.
"""

import json
import logging
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from pathlib import Path
from typing import Optional, Protocol

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from restock_bot.errors import ConfigError

logger = logging.getLogger(__name__)

WINDOW_LENGTH = timedelta(days=1)

# Date.toString() layout written by earlier releases of this job
_LEGACY_TIMESTAMP_FORMAT = "%a %b %d %Y %H:%M:%S"


class RunConfig(BaseModel):
    """Persisted run configuration.

    Field aliases are the keys stored in the JSON file. Keys this model
    does not know about are kept and written back on save.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    last_run: Optional[datetime] = Field(default=None, alias="lastRun")
    base_message: str = Field(default="Refurbished Restock Report", alias="baseMessage")
    debug: bool = False
    dry_run: bool = Field(default=False, alias="dryRun")

    # Status text per outcome
    error_no_items: str = Field(
        default="No refurbished items sold out", alias="ErrorNoItems"
    )
    error_no_used_items: str = Field(
        default="No used components found", alias="ErrorNoUsedItems"
    )
    error_no_items_in_stock: str = Field(
        default="No used inventory available", alias="ErrorNoItemsInStock"
    )
    message_found_items: str = Field(
        default="Used inventory available to refurbish", alias="MessageFoundItems"
    )

    @field_validator("last_run", mode="before")
    @classmethod
    def _parse_legacy_timestamp(cls, value):
        if isinstance(value, str) and value and not value[0].isdigit():
            try:
                return datetime.strptime(value[:24], _LEGACY_TIMESTAMP_FORMAT)
            except ValueError:
                return value
        return value

    @property
    def suppress_side_effects(self) -> bool:
        return self.debug or self.dry_run


@dataclass(frozen=True)
class WindowState:
    """Watermark plus a version bumped on every save."""

    watermark: datetime
    version: int = 0


@dataclass(frozen=True)
class Window:
    """One processing window, end exclusive."""

    start: datetime
    end: datetime

    @property
    def next_watermark(self) -> datetime:
        return self.end

    @property
    def date_range(self) -> str:
        """Human-readable range, e.g. ``Sat Oct 17 2026 to Sun Oct 18 2026``."""
        return f"{_date_string(self.start)} to {_date_string(self.end)}"


def _date_string(value: datetime) -> str:
    return value.strftime("%a %b %d %Y")


def default_watermark(now: datetime | None = None) -> datetime:
    """Yesterday at 00:00:00.000 local time."""
    now = now or datetime.now()
    yesterday = now - timedelta(days=1)
    return yesterday.replace(hour=0, minute=0, second=0, microsecond=0)


def advance(state: WindowState) -> tuple[Window, WindowState]:
    """
    Compute the window that starts at the watermark.

    Returns:
        The window to process and the state to persist once the window
        has been read. The new state's watermark is the window end.
    """
    start = state.watermark
    window = Window(start=start, end=start + WINDOW_LENGTH)
    return window, replace(state, watermark=window.next_watermark)


class WindowStore(Protocol):
    """Persistence for the run configuration and its watermark."""

    def load(self) -> tuple[RunConfig, WindowState]: ...

    def save(self, config: RunConfig, state: WindowState) -> WindowState: ...


class JsonWindowStore:
    """Window store backed by a JSON file."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def load(self) -> tuple[RunConfig, WindowState]:
        """
        Read the run configuration.

        A configuration without ``lastRun`` starts from
        :func:`default_watermark`.

        Raises:
            ConfigError: If the file is missing, unreadable or invalid
        """
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.error(f"Failed to read run configuration {self.path}: {e}")
            raise ConfigError(f"Error reading config file {self.path}") from e

        if not isinstance(raw, dict):
            raise ConfigError(f"Config file {self.path} must contain a JSON object")

        try:
            config = RunConfig.model_validate(raw)
        except ValidationError as e:
            raise ConfigError(f"Invalid config file {self.path}: {e}") from e

        if config.last_run is None:
            watermark = default_watermark()
            logger.info(f"No lastRun recorded, starting from {watermark.isoformat()}")
        else:
            watermark = config.last_run
        return config, WindowState(watermark=watermark)

    def save(self, config: RunConfig, state: WindowState) -> WindowState:
        """Overwrite the file with ``config`` carrying ``state``'s watermark."""
        config.last_run = state.watermark
        payload = config.model_dump(mode="json", by_alias=True)
        self.path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        saved = replace(state, version=state.version + 1)
        logger.info(f"Saved watermark {state.watermark.isoformat()} (version {saved.version})")
        return saved
