"""Analysis base definitions."""

from __future__ import annotations

import pandas as pd

from ecodiff.tasks.common import AnalysisSettings


class Analysis:
    """Base class for registered analyses."""

    name: str

    def run(self, frame: pd.DataFrame, settings: AnalysisSettings) -> pd.DataFrame:
        raise NotImplementedError("Analysis implementations must override run().")

    def __call__(self, frame: pd.DataFrame, settings: AnalysisSettings) -> pd.DataFrame:
        return self.run(frame, settings)


__all__ = ["Analysis"]
