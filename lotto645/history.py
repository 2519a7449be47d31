"""
Draw history data model for Lotto 6/45.

A DrawRecord is one historical outcome (6 main numbers + 1 bonus number).
TicketHistory is the ordered, immutable list of records the pipeline works on.
Persisted as CSV with one row per draw: draw_number, date, num1..num6, bonus_number.
"""
import logging
import os
from dataclasses import dataclass

import pandas as pd

from lotto645.config import CSV_PATH, MAX_NUMBER, MIN_NUMBER, NUM_COLS, NUMBERS_PER_DRAW
from lotto645.errors import InvalidDrawRecord

logger = logging.getLogger(__name__)

CSV_COLUMNS = ["draw_number", "date"] + NUM_COLS + ["bonus_number"]


@dataclass(frozen=True)
class DrawRecord:
    """One draw: index, 6 distinct main numbers and a bonus number outside them."""

    draw_index: int
    main_numbers: frozenset
    bonus_number: int
    date: str = None

    def __post_init__(self):
        nums = frozenset(int(n) for n in self.main_numbers)
        object.__setattr__(self, "main_numbers", nums)
        object.__setattr__(self, "bonus_number", int(self.bonus_number))

        if self.draw_index < 1:
            raise InvalidDrawRecord(f"draw_index must be >= 1, got {self.draw_index}")
        if len(nums) != NUMBERS_PER_DRAW:
            raise InvalidDrawRecord(
                f"Draw {self.draw_index}: need {NUMBERS_PER_DRAW} distinct numbers, "
                f"got {sorted(nums)}"
            )
        for n in list(nums) + [self.bonus_number]:
            if not MIN_NUMBER <= n <= MAX_NUMBER:
                raise InvalidDrawRecord(
                    f"Draw {self.draw_index}: {n} outside {MIN_NUMBER}-{MAX_NUMBER}"
                )
        if self.bonus_number in nums:
            raise InvalidDrawRecord(
                f"Draw {self.draw_index}: bonus {self.bonus_number} repeats a main number"
            )

    @property
    def sorted_numbers(self):
        return sorted(self.main_numbers)

    def to_row(self):
        row = {"draw_number": self.draw_index, "date": self.date}
        for col, n in zip(NUM_COLS, self.sorted_numbers):
            row[col] = n
        row["bonus_number"] = self.bonus_number
        return row


class TicketHistory:
    """
    Ordered, read-only sequence of DrawRecords (ascending draw_index).

    Ordering and uniqueness are assumed, not enforced; gaps in draw_index are
    tolerated. Slicing returns another TicketHistory.
    """

    __slots__ = ("_records",)

    def __init__(self, records=()):
        self._records = tuple(records)

    def __len__(self):
        return len(self._records)

    def __iter__(self):
        return iter(self._records)

    def __getitem__(self, item):
        if isinstance(item, slice):
            return TicketHistory(self._records[item])
        return self._records[item]

    def __eq__(self, other):
        if isinstance(other, TicketHistory):
            return self._records == other._records
        return NotImplemented

    def __hash__(self):
        return hash(self._records)

    def __repr__(self):
        if not self._records:
            return "TicketHistory([])"
        return (f"TicketHistory({len(self)} draws, "
                f"#{self._records[0].draw_index}..#{self._records[-1].draw_index})")

    @property
    def records(self):
        return self._records

    @property
    def last(self):
        return self._records[-1] if self._records else None

    @property
    def last_draw_index(self):
        return self._records[-1].draw_index if self._records else 0

    def drop_last(self, n=1):
        return TicketHistory(self._records[:-n] if n else self._records)

    def take_last(self, n):
        if n <= 0:
            return TicketHistory()
        return TicketHistory(self._records[-n:])

    def extend(self, records):
        """Return a new history with `records` appended (skipping known draw indices)."""
        seen = {r.draw_index for r in self._records}
        fresh = sorted((r for r in records if r.draw_index not in seen),
                       key=lambda r: r.draw_index)
        return TicketHistory(self._records + tuple(fresh))

    # ── DataFrame conversion ─────────────────────────────────────────────

    def to_dataframe(self):
        return pd.DataFrame([r.to_row() for r in self._records], columns=CSV_COLUMNS)

    @classmethod
    def from_dataframe(cls, df):
        """Build a history from a frame with draw_number, num1..num6, bonus_number."""
        missing = [c for c in ["draw_number"] + NUM_COLS + ["bonus_number"] if c not in df.columns]
        if missing:
            raise InvalidDrawRecord(f"History frame is missing columns: {missing}")

        df = df.sort_values("draw_number").reset_index(drop=True)
        has_date = "date" in df.columns
        records = []
        for _, row in df.iterrows():
            date = row["date"] if has_date and pd.notna(row["date"]) else None
            records.append(DrawRecord(
                draw_index=int(row["draw_number"]),
                main_numbers=frozenset(int(row[c]) for c in NUM_COLS),
                bonus_number=int(row["bonus_number"]),
                date=str(date) if date is not None else None,
            ))
        return cls(records)


def load_history(path=CSV_PATH):
    """Load draw history from CSV. Returns an empty history if the file is absent."""
    if not os.path.exists(path):
        logger.info("[History] No cached history at %s", path)
        return TicketHistory()
    df = pd.read_csv(path)
    history = TicketHistory.from_dataframe(df)
    logger.info("[History] Loaded %d draws from %s", len(history), path)
    return history


def save_history(history, path=CSV_PATH):
    """Write draw history to CSV, creating the parent directory if needed."""
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)
    history.to_dataframe().to_csv(path, index=False)
    logger.info("[History] Saved %d draws to %s", len(history), path)
