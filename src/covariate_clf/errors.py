from typing import Any, Optional


class PipelineError(ValueError):
    """Base class for data errors that identify an offending column."""

    def __init__(self, message: str, column: Optional[str] = None):
        super().__init__(message)
        self.column = column


class MalformedValueError(PipelineError):
    """A decorated numeric cell could not be parsed. Recovered as missing."""

    def __init__(self, value: Any, column: Optional[str] = None):
        super().__init__(f"Cannot parse {value!r} as a number", column)
        self.value = value


class UnimputableColumnError(PipelineError):
    """Column has no observed values to fit an imputation model on."""

    def __init__(self, column: str):
        super().__init__(f"Column '{column}' has no non-missing values", column)


class UnseenCategoryError(PipelineError):
    """Value outside the factor levels fitted on the training table."""

    def __init__(self, column: str, values: list):
        super().__init__(
            f"Column '{column}' has levels not seen in training: {sorted(map(str, values))}",
            column,
        )
        self.values = values


class DegenerateColumnError(PipelineError):
    """Numeric column with zero variance; it cannot be standardized."""

    def __init__(self, column: str):
        super().__init__(f"Column '{column}' has zero variance", column)


class SchemaMismatchError(PipelineError):
    """Train and validation tables do not share a feature schema."""
