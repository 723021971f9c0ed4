import warnings
from dataclasses import dataclass
from textwrap import indent
from typing import Any, Dict, Optional

import numpy as np
import pandas as pd

from .config import Config
from .data_loader import DataLoader
from .errors import PipelineError
from .evaluator import Evaluator
from .exporter import PredictionExporter
from .feature_encoder import EncoderState, FeatureEncoder
from .hyper_tuner import HyperTuner
from .imputer import Imputer, ImputerState
from .model_trainer import EnsembleTrainer, LinearTrainer
from .normalizer import NormalizerState, SchemaNormalizer
from .splitter import Splitter
from .utils.logger import get_logger


@dataclass(frozen=True)
class PipelineResult:
    aucs: Dict[str, float]
    boosting_params: Dict[str, Any]
    prediction_paths: Dict[str, str]
    excluded_columns: tuple


class PipelineRunner:
    """End-to-end classification pipeline.

    Steps:
      1. Load training and validation tables, check they share a schema
      2. Normalize schema (drop unreliable columns, clean text encodings)
      3. Impute missing cells (tree-based chained equations + sentinels)
      4. Encode features (binary, factors, standardization)
      5. Split training rows into fit / evaluation subsets
      6. Train logistic regression and tuned gradient boosting
      7. Evaluate both via ROC / AUC on the evaluation subset
      8. Score the validation table and write one prediction file per model

    Every stage is fitted once on training data; its state is passed
    explicitly to the shared ``_prepare`` path used for both tables.
    """

    def __init__(self, config_path: Optional[str] = None, config: Optional[Config] = None):
        if config is None:
            if config_path is None:
                raise ValueError("Provide config_path or config")
            config = Config.from_yaml(config_path)
        self.config = config
        self.logger = get_logger(self.__class__.__name__)
        warnings.filterwarnings(
            "ignore",
            message="X does not have valid feature names",
            category=UserWarning,
            module="sklearn",
        )

        prep = config.preprocessing
        imp = config.imputation
        self.normalizer = SchemaNormalizer(
            max_missing_frac=prep.get("max_missing_frac", 0.9),
            day_column=prep.get("day_column"),
            percent_column=prep.get("percent_column"),
            currency_column=prep.get("currency_column"),
        )
        self.imputer = Imputer(
            sentinel_columns=prep.get("sentinel_columns"),
            max_iter=imp.get("max_iter", 5),
            tree_max_depth=imp.get("tree_max_depth", 10),
            random_state=imp.get("random_state", 42),
        )
        self.encoder = FeatureEncoder(
            binary_columns=prep.get("binary_columns"),
            unseen_policy=prep.get("unseen_policy", "sentinel"),
        )

    def _prepare(
        self,
        df: pd.DataFrame,
        norm_state: NormalizerState,
        imp_state: Optional[ImputerState],
        enc_state: Optional[EncoderState],
    ) -> pd.DataFrame:
        """Apply fitted stages in order. A missing imputer state means refit on ``df``."""
        out = self.normalizer.transform(df, norm_state)
        if imp_state is None:
            out, _ = self.imputer.fit_transform(out)
        else:
            out = self.imputer.transform(out, imp_state)
        if enc_state is not None:
            out = self.encoder.transform(out, enc_state)
        return out

    def run(self) -> PipelineResult:
        try:
            return self._run()
        except PipelineError as exc:
            self.logger.error(f"Pipeline aborted on column '{exc.column}': {exc}")
            raise

    def _run(self) -> PipelineResult:
        cfg = self.config
        self.logger.info("Starting classification pipeline")

        train_df = DataLoader(cfg.data["path_train"], cfg.data.get("sample_size")).load()
        val_df = DataLoader(cfg.data["path_validation"]).load()

        target_col = cfg.data["target_col"]
        val_df = DataLoader.check_schema(train_df, val_df, target_col)
        X_raw = train_df.drop(columns=[target_col])
        y_full = train_df[target_col].astype(int).to_numpy()
        self.logger.info(f"Positive rate: {y_full.mean():.4f}")

        missing = self.summarize_missing(X_raw)
        if not missing.empty:
            self.logger.info(f"Most-missing columns:\n{indent(missing.to_string(), ' ' * 4)}")

        # exclusion list is fixed before any imputation or scaling statistic
        norm_state = self.normalizer.fit(X_raw)
        X_norm = self.normalizer.transform(X_raw, norm_state)

        imp_state = self.imputer.fit(X_norm)
        X_imp = self.imputer.transform(X_norm, imp_state)

        enc_state = self.encoder.fit(X_imp)
        X_train = self.encoder.transform(X_imp, enc_state)

        refit = cfg.imputation.get("refit_on_validation", True)
        if refit:
            self.logger.warning(
                "Refitting imputation on the validation table; imputed values may follow "
                "a different distribution than training"
            )
        X_val = self._prepare(val_df, norm_state, None if refit else imp_state, enc_state)
        self.logger.info(f"Prepared features: train {X_train.shape}, validation {X_val.shape}")

        val_cfg = cfg.validation
        split = Splitter(
            test_size=val_cfg.get("test_size", 0.2),
            random_state=val_cfg.get("random_state", 42),
            stratify=val_cfg.get("stratify", False),
        ).split(X_train, y_full)
        self.logger.info(f"Split: fit={len(split.y_fit):,} rows, evaluation={len(split.y_eval):,} rows")

        linear = LinearTrainer(**cfg.model.get("linear", {})).fit(split.X_fit, split.y_fit)

        ensemble_trainer = EnsembleTrainer(cfg.model.get("params"))
        if cfg.model.get("tune", False):
            sweep_cfg = cfg.model.get("sweep", {})
            tuner = HyperTuner(
                grid=sweep_cfg["grid"],
                defaults=sweep_cfg.get("defaults"),
                strategy=cfg.model.get("tuning_strategy", "sweep"),
                n_trials=cfg.model.get("n_trials", 30),
                random_state=val_cfg.get("random_state", 42),
            )
            best_params = tuner.tune(
                ensemble_trainer, split.X_fit, split.y_fit, split.X_eval, split.y_eval
            )
            ensemble_trainer.params.update(best_params)
            self.logger.info("Model parameters updated with tuned values")
        else:
            self.logger.info("Hyperparameter tuning disabled")
        boosting = ensemble_trainer.fit(split.X_fit, split.y_fit)

        evaluator = Evaluator(cfg.output["metrics_path"], cfg.output.get("figures_dir", "artifacts"))
        results = [
            evaluator.evaluate(model.name, split.y_eval, model.predict_proba(split.X_eval))
            for model in (linear, boosting)
        ]
        metrics = evaluator.save(results)
        evaluator.plot_roc(results)

        metrics_str = indent("\n".join(f"{k}: {v:.4f}" for k, v in metrics.items()), " " * 4)
        self.logger.info(f"Evaluation metrics:\n{metrics_str}")

        exporter = PredictionExporter(cfg.output.get("prediction_column", "prediction"))
        paths = cfg.output["predictions"]
        for model in (linear, boosting):
            exporter.export(model, X_val, paths[model.name])

        self.logger.info("Pipeline finished")
        return PipelineResult(
            aucs={r.name: r.auc for r in results},
            boosting_params=dict(ensemble_trainer.params),
            prediction_paths={m.name: paths[m.name] for m in (linear, boosting)},
            excluded_columns=norm_state.excluded,
        )

    @staticmethod
    def summarize_missing(df: pd.DataFrame, top: int = 10) -> pd.Series:
        """Fraction missing per column, highest first."""
        frac = df.isna().mean()
        return frac[frac > 0].sort_values(ascending=False).head(top).astype(np.float64)
