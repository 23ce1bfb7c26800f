"""File-backed persistence of daily risk state across restarts within a day."""

from __future__ import annotations

import logging
from datetime import date
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from stratcore.risk.daily import DailyRiskState

logger = logging.getLogger(__name__)


class RiskStateStore:
    """Save/restore ``DailyRiskState`` as JSON at ``<root>/<name>.json``."""

    def __init__(self, root: str | Path, name: str) -> None:
        self.root = Path(root)
        self.name = name

    @property
    def path(self) -> Path:
        return self.root / f"{self.name}.json"

    def save(self, state: DailyRiskState) -> Path:
        self.root.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(".json.tmp")
        tmp.write_text(state.model_dump_json(indent=2), encoding="utf-8")
        tmp.replace(self.path)
        return self.path

    def load(self, session_date: date) -> Optional[DailyRiskState]:
        """Return the stored state only if it belongs to ``session_date``.

        A state from another day is stale: the tracker would reset it on the
        first bar anyway, so it is ignored.
        """
        if not self.path.is_file():
            return None
        try:
            state = DailyRiskState.model_validate_json(self.path.read_text(encoding="utf-8"))
        except ValidationError as exc:
            logger.warning(f"Ignoring unreadable risk state {self.path}: {exc}")
            return None
        if state.current_date != session_date:
            logger.info(
                f"Stored risk state is from {state.current_date}, not {session_date}; starting fresh"
            )
            return None
        logger.info(f"Restored daily risk state for {session_date} from {self.path}")
        return state
