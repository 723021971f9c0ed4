from typing import Optional

import pandas as pd

from .errors import SchemaMismatchError
from .utils.logger import get_logger


class DataLoader:
    """Loads a comma-delimited table with a header row, optionally sampling rows."""

    def __init__(self, path: str, sample_size: Optional[int] = None, random_state: int = 42):
        self.path = path
        self.sample_size = sample_size
        self.random_state = random_state
        self.logger = get_logger(self.__class__.__name__)

    def load(self) -> pd.DataFrame:
        df = pd.read_csv(self.path)
        if self.sample_size and self.sample_size < len(df):
            # keep original row order so exported predictions stay aligned
            df = df.sample(self.sample_size, random_state=self.random_state).sort_index()
            df = df.reset_index(drop=True)
        self.logger.info(f"Loaded {self.path}: {df.shape[0]:,} rows x {df.shape[1]} cols")
        return df

    @staticmethod
    def check_schema(
        train: pd.DataFrame,
        validation: pd.DataFrame,
        target_col: str,
    ) -> pd.DataFrame:
        """Verify both tables share feature columns; return validation without the label."""
        if target_col not in train.columns:
            raise SchemaMismatchError(
                f"Training table has no label column '{target_col}'", target_col
            )

        validation = validation.drop(columns=[target_col], errors="ignore")
        train_cols = set(train.columns) - {target_col}
        val_cols = set(validation.columns)

        only_train = sorted(train_cols - val_cols)
        only_val = sorted(val_cols - train_cols)
        if only_train or only_val:
            column = (only_train or only_val)[0]
            raise SchemaMismatchError(
                f"Feature columns differ: train-only={only_train}, validation-only={only_val}",
                column,
            )

        # align validation column order to train
        ordered = [c for c in train.columns if c != target_col]
        return validation[ordered]
