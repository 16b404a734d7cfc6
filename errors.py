class PredictionError(Exception):
    """Base class for anything that ends a prediction attempt."""

    kind = "prediction"


class InputError(PredictionError):
    """ZIP code missing or blank; raised before any network call."""

    kind = "input"


class ResolutionError(PredictionError):
    """ZIP code does not map to coordinates."""

    kind = "resolution"


class RetrievalError(PredictionError):
    """Forecast or profile fetch failed or came back malformed."""

    kind = "retrieval"
