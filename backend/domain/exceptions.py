class PopChoiceError(Exception):
    """Base class for all errors raised by the recommendation pipeline."""


class ConfigurationError(PopChoiceError):
    pass


class EmbeddingError(PopChoiceError):
    pass


class RetrievalError(PopChoiceError):
    pass


class IngestError(PopChoiceError):
    pass


class RecommendationError(PopChoiceError):
    """The language model could not be reached or refused the request."""


class MalformedModelOutputError(RecommendationError):
    def __init__(self, message: str, raw_output: str = ""):
        super().__init__(message)
        self.raw_output = raw_output


class PosterLookupError(PopChoiceError):
    pass
