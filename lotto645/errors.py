"""Error taxonomy for the prediction pipeline."""


class Lotto645Error(Exception):
    """Base class for every pipeline error."""


class InvalidDrawRecord(Lotto645Error, ValueError):
    """A draw row violates the 6-of-45 plus bonus format."""


class HistoryFetchError(Lotto645Error):
    """The remote draw-result source could not be read."""

    # draws fetched before the failure, set by fetch_draws
    fetched = ()


class InsufficientHistory(Lotto645Error):
    """History is too short to produce a single training row."""

    def __init__(self, required, available, unit="draws"):
        self.required = required
        self.available = available
        self.unit = unit
        super().__init__(
            f"Need at least {required} {unit} to train, got {available}"
        )

    def __reduce__(self):
        return type(self), (self.required, self.available, self.unit)


class MissingClassifierForNumber(Lotto645Error, LookupError):
    """No classifier was trained for a number (it had zero training rows)."""

    def __init__(self, family_name, number):
        self.family_name = family_name
        self.number = number
        super().__init__(f"{family_name}: no classifier trained for number {number}")

    def __reduce__(self):
        return type(self), (self.family_name, self.number)


class ClassifierTrainingFailure(Lotto645Error):
    """The classifier capability rejected one number's training data."""

    def __init__(self, family_name, number, cause=None):
        self.family_name = family_name
        self.number = number
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"{family_name}: training failed for number {number}{detail}")

    def __reduce__(self):
        return type(self), (self.family_name, self.number, self.cause)


class NoCandidateFamilies(Lotto645Error):
    """Every candidate family failed (or none was supplied) in a backtest."""
