"""
NutriPlan AI — Progress Log
===========================
Append-only history of weight/photo check-ins, persisted under one key
of the local store as a JSON array of ProgressEntry.
"""

import json
import time
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Union

import pandas as pd
import plotly.graph_objects as go
from pydantic import TypeAdapter, ValidationError

from agents.schemas import PHOTO_SLOTS, ProgressEntry, ProgressPhotos
from memory.local_store import LocalStore, StorageQuotaError
from tools.image_compressor import ImageProcessingError, compress_image

# =============================================================================
# CONFIGURATION
# =============================================================================
PROGRESS_KEY = "nutriplan_progress"
SOFT_LIMIT_CHARS = 4_500_000
DATE_FORMAT = "%d/%m"
MIN_CHART_ENTRIES = 2
CHART_Y_PADDING = 2

NEAR_FULL_WARNING = "Warning: local storage is almost full. Consider clearing old records."
STORAGE_FULL_ERROR = "Critical error: storage is full. This record could not be saved."
WEIGHT_REQUIRED_ERROR = "Enter your current weight to save a record."

_ENTRIES = TypeAdapter(List[ProgressEntry])


class ProgressLog:
    """Loads, records and projects progress entries."""

    def __init__(self, store: LocalStore, key: str = PROGRESS_KEY):
        self.store = store
        self.key = key
        self.entries: List[ProgressEntry] = []
        self.load()

    # -------------------------------------------------------------------------
    # Load
    # -------------------------------------------------------------------------
    def load(self) -> List[ProgressEntry]:
        """Read the durable collection; anything unreadable counts as empty."""
        saved = self.store.get_item(self.key)
        if not saved:
            self.entries = []
            return self.entries
        try:
            self.entries = _ENTRIES.validate_python(json.loads(saved))
        except (json.JSONDecodeError, ValidationError) as e:
            print(f"❌ Error parsing saved progress: {e}")
            self.entries = []
        return self.entries

    # -------------------------------------------------------------------------
    # Record
    # -------------------------------------------------------------------------
    def _next_id(self) -> str:
        token = int(time.time() * 1000)
        if self.entries:
            last = self.entries[-1].id
            if last.isdigit() and int(last) >= token:
                token = int(last) + 1
        return str(token)

    @staticmethod
    def _compress_photos(photos: Mapping[str, Any]) -> Dict[str, Any]:
        compressed, errors = {}, {}
        for slot in PHOTO_SLOTS:
            data = photos.get(slot)
            if not data:
                continue
            try:
                compressed[slot] = compress_image(data)
            except ImageProcessingError as e:
                errors[slot] = str(e)
        return {"photos": compressed, "errors": errors}

    def record(
        self,
        weight: Union[float, str, None],
        photos: Optional[Mapping[str, Any]] = None,
        notes: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Add a check-in.

        Returns:
            {"status": "success", "entry": ..., "warning": str|None,
             "photo_errors": {slot: message}}
            or {"status": "error", "message": ..., "blocking": bool}
        """
        try:
            weight_value = float(weight) if weight not in (None, "") else None
        except (TypeError, ValueError):
            weight_value = None
        if weight_value is None or weight_value <= 0:
            return {"status": "error", "message": WEIGHT_REQUIRED_ERROR, "blocking": False}

        prepared = self._compress_photos(photos or {})
        entry = ProgressEntry(
            id=self._next_id(),
            date=datetime.now().strftime(DATE_FORMAT),
            weight=weight_value,
            notes=notes.strip() if notes and notes.strip() else None,
            photos=ProgressPhotos(**prepared["photos"]) if prepared["photos"] else None,
        )

        updated = self.entries + [entry]
        serialized = json.dumps([e.to_wire() for e in updated])

        warning = None
        if len(serialized) > SOFT_LIMIT_CHARS:
            print(f"⚠️ Progress log is {len(serialized)} chars, near the storage limit")
            warning = NEAR_FULL_WARNING

        try:
            self.store.set_item(self.key, serialized)
        except StorageQuotaError as e:
            print(f"❌ Storage error: {e}")
            return {"status": "error", "message": STORAGE_FULL_ERROR, "blocking": True}

        self.entries = updated
        return {
            "status": "success",
            "entry": entry,
            "warning": warning,
            "photo_errors": prepared["errors"],
        }

    # -------------------------------------------------------------------------
    # Projections
    # -------------------------------------------------------------------------
    def chart_frame(self) -> Optional[pd.DataFrame]:
        if len(self.entries) < MIN_CHART_ENTRIES:
            return None
        return pd.DataFrame(
            {"date": [e.date for e in self.entries], "weight": [e.weight for e in self.entries]}
        )

    def build_weight_chart(self) -> Optional[go.Figure]:
        """Weight line chart, or None below two entries."""
        df = self.chart_frame()
        if df is None:
            return None

        # Plot by position so two check-ins on the same date stay distinct
        fig = go.Figure(go.Scatter(
            x=list(df.index),
            y=df["weight"],
            text=df["date"],
            hovertemplate="%{text}: %{y} kg<extra></extra>",
            mode="lines+markers",
            name="Weight",
            line={"color": "#F97316", "width": 3},
            marker={"size": 8, "color": "#F97316"},
        ))
        fig.update_layout(
            height=260,
            margin={"l": 20, "r": 20, "t": 20, "b": 20},
            xaxis={"tickmode": "array", "tickvals": list(df.index), "ticktext": list(df["date"])},
            yaxis={
                "range": [df["weight"].min() - CHART_Y_PADDING, df["weight"].max() + CHART_Y_PADDING],
                "title": "kg",
            },
        )
        return fig

    def history(self) -> List[ProgressEntry]:
        """Most recent first."""
        return list(reversed(self.entries))

    # -------------------------------------------------------------------------
    # Reset
    # -------------------------------------------------------------------------
    def clear(self) -> None:
        self.store.remove_item(self.key)
        self.entries = []
        print("🗑️ Progress history cleared")
