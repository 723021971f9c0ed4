from dataclasses import dataclass, field
from typing import Any, Dict

import yaml

DEFAULT_CONFIG_PATH = "config/default.yaml"

REQUIRED_DATA_KEYS = ("path_train", "path_validation")
UNSEEN_POLICIES = ("sentinel", "strict")
TUNING_STRATEGIES = ("sweep", "optuna")


@dataclass
class Config:
    """Run configuration loaded from YAML.

    Sections mirror the pipeline stages: ``data`` (input paths, label
    column), ``preprocessing`` (normalizer, imputer and encoder options),
    ``model`` (trainer parameters and the hyperparameter search),
    ``validation`` (hold-out split) and ``output`` (metrics, figures and
    prediction files).
    """
    data: Dict[str, Any]
    preprocessing: Dict[str, Any] = field(default_factory=dict)
    model: Dict[str, Any] = field(default_factory=dict)
    validation: Dict[str, Any] = field(default_factory=dict)
    output: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        missing = [k for k in REQUIRED_DATA_KEYS if k not in self.data]
        if missing:
            raise ValueError(f"Config 'data' section is missing keys: {missing}")
        self.data.setdefault("target_col", "y")

        policy = self.preprocessing.get("unseen_policy", "sentinel")
        if policy not in UNSEEN_POLICIES:
            raise ValueError(f"Unknown unseen_policy: {policy}")

        strategy = self.model.get("tuning_strategy", "sweep")
        if strategy not in TUNING_STRATEGIES:
            raise ValueError(f"Unknown tuning_strategy: {strategy}")

    @property
    def imputation(self) -> Dict[str, Any]:
        return self.preprocessing.get("imputation") or {}

    @classmethod
    def from_yaml(cls, path: str) -> "Config":
        with open(path, "r") as f:
            cfg = yaml.safe_load(f)
        return cls(**cfg)
