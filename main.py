import sys

from covariate_clf.config import DEFAULT_CONFIG_PATH
from covariate_clf.pipeline import PipelineRunner


def main() -> None:
    """Run the full training, evaluation and prediction pipeline."""
    config_path = sys.argv[1] if len(sys.argv) > 1 else DEFAULT_CONFIG_PATH
    runner = PipelineRunner(config_path)
    runner.run()


if __name__ == "__main__":
    main()
