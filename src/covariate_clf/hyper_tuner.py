from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Iterator, Mapping, Sequence

import numpy as np
import optuna
import pandas as pd
from sklearn.metrics import roc_auc_score

from .model_trainer import EnsembleTrainer
from .utils.logger import get_logger

ScoreFn = Callable[[dict[str, Any]], float]


def sweep(candidates: Iterable[Any], score_fn: Callable[[Any], float]) -> Iterator[tuple[Any, float]]:
    """Lazily score each candidate in order."""
    for candidate in candidates:
        yield candidate, float(score_fn(candidate))


def select_best(scored: Iterable[tuple[Any, float]]) -> tuple[Any, float]:
    """Highest score wins; on ties the earlier candidate is kept."""
    best: tuple[Any, float] | None = None
    for candidate, score in scored:
        if best is None or score > best[1]:
            best = (candidate, score)
    if best is None:
        raise ValueError("Cannot select from an empty sweep")
    return best


@dataclass
class SearchResult:
    best_params: dict[str, Any]
    best_score: float
    history: list[tuple[str, Any, float]] = field(default_factory=list)


def one_factor_search(
    defaults: Mapping[str, Any],
    grid: Mapping[str, Sequence[Any]],
    score_fn: ScoreFn,
) -> SearchResult:
    """
    Sequential one-factor-at-a-time search.

    Parameters are swept in ``grid`` order; each sweep holds the others at
    their current values (the defaults, or the value already chosen for an
    earlier parameter). Not an exhaustive search.
    """
    current = dict(defaults)
    history: list[tuple[str, Any, float]] = []
    best_score = float("-inf")

    for name, candidates in grid.items():

        def score_candidate(value: Any, name: str = name) -> float:
            score = score_fn({**current, name: value})
            history.append((name, value, score))
            return score

        value, best_score = select_best(sweep(candidates, score_candidate))
        current[name] = value

    return SearchResult(best_params=current, best_score=best_score, history=history)


class HyperTuner:
    """Selects boosting hyperparameters by AUC on the evaluation subset."""

    def __init__(
        self,
        grid: Mapping[str, Sequence[Any]],
        defaults: Mapping[str, Any] | None = None,
        strategy: str = "sweep",
        n_trials: int = 30,
        random_state: int = 42,
    ):
        self.grid = {k: list(v) for k, v in grid.items()}
        self.defaults = dict(defaults or {})
        self.strategy = strategy
        self.n_trials = n_trials
        self.random_state = random_state
        self.logger = get_logger(self.__class__.__name__)
        self.result_: SearchResult | None = None

    def _score_fn(
        self,
        trainer: EnsembleTrainer,
        X_fit: pd.DataFrame,
        y_fit: np.ndarray,
        X_eval: pd.DataFrame,
        y_eval: np.ndarray,
    ) -> ScoreFn:
        def score(params: dict[str, Any]) -> float:
            model = trainer.fit(X_fit, y_fit, **params)
            auc = float(roc_auc_score(y_eval, model.predict_proba(X_eval)))
            self.logger.info(f"  {params} -> AUC {auc:.4f}")
            return auc

        return score

    def _suggest_params(self, trial: optuna.Trial) -> dict[str, Any]:
        """Search space spanning the same ranges as the sweep grid."""
        lr = self.grid["learning_rate"]
        depth = self.grid["interaction_depth"]
        trees = self.grid["n_estimators"]
        return {
            "learning_rate": trial.suggest_float("learning_rate", min(lr), max(lr), log=True),
            "interaction_depth": trial.suggest_int("interaction_depth", min(depth), max(depth)),
            "n_estimators": trial.suggest_int("n_estimators", min(trees), max(trees), step=50),
        }

    def tune(
        self,
        trainer: EnsembleTrainer,
        X_fit: pd.DataFrame,
        y_fit: np.ndarray,
        X_eval: pd.DataFrame,
        y_eval: np.ndarray,
    ) -> dict[str, Any]:
        """Run the configured search and return the selected parameters."""
        score_fn = self._score_fn(trainer, X_fit, y_fit, X_eval, y_eval)

        if self.strategy == "optuna":
            self.logger.info(f"Starting Optuna tuning ({self.n_trials} trials)")
            optuna.logging.set_verbosity(optuna.logging.WARNING)
            sampler = optuna.samplers.TPESampler(seed=self.random_state)
            study = optuna.create_study(direction="maximize", sampler=sampler)
            study.optimize(
                lambda trial: score_fn({**self.defaults, **self._suggest_params(trial)}),
                n_trials=self.n_trials,
            )
            history = [
                (name, t.params[name], float(t.value))
                for t in study.trials
                if t.value is not None
                for name in t.params
            ]
            self.result_ = SearchResult(
                best_params={**self.defaults, **study.best_params},
                best_score=float(study.best_value),
                history=history,
            )
        else:
            self.logger.info(f"Starting sequential sweep over {list(self.grid)}")
            self.result_ = one_factor_search(self.defaults, self.grid, score_fn)

        self.logger.info(f"Best evaluation ROC-AUC: {self.result_.best_score:.4f}")
        self.logger.info(f"Best parameters: {self.result_.best_params}")
        return dict(self.result_.best_params)
