"""
Covariate Classifier — Binary Classification Pipeline on Anonymized Covariates

This package cleans a labeled training table and an unlabeled validation
table, imputes missing values with tree-based chained equations, encodes
features, trains a logistic regression and a gradient-boosted tree
ensemble (LightGBM, tuned by a sequential AUC sweep), evaluates both via
ROC/AUC and writes validation predictions.

Modules:
    config              — Load YAML configuration safely.
    data_loader         — Read CSV tables and check their shared schema.
    normalizer          — Drop unreliable columns, clean text encodings.
    imputer             — Conditional tree-based imputation with sentinels.
    feature_encoder     — Binary mapping, factor levels, standardization.
    splitter            — Seeded fit / evaluation split.
    model_trainer       — Logistic regression and LightGBM trainers.
    hyper_tuner         — One-factor AUC sweep (or Optuna) for boosting.
    evaluator           — ROC curves, AUC, metrics JSON and plot.
    exporter            — Score validation rows and write prediction files.
    pipeline            — Orchestrates all components.
    errors              — Column-level error types.
    utils.logger        — Unified timestamped console logger.
"""

from .config import Config
from .data_loader import DataLoader
from .normalizer import SchemaNormalizer
from .imputer import Imputer
from .feature_encoder import FeatureEncoder
from .splitter import Splitter
from .model_trainer import EnsembleTrainer, FittedModel, LinearTrainer
from .evaluator import Evaluator
from .hyper_tuner import HyperTuner, one_factor_search
from .exporter import PredictionExporter
from .pipeline import PipelineRunner

__all__ = [
    "Config",
    "DataLoader",
    "SchemaNormalizer",
    "Imputer",
    "FeatureEncoder",
    "Splitter",
    "LinearTrainer",
    "EnsembleTrainer",
    "FittedModel",
    "Evaluator",
    "HyperTuner",
    "one_factor_search",
    "PredictionExporter",
    "PipelineRunner",
]
