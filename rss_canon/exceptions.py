class FeedParseError(Exception):
    """Base class for errors raised while turning a document into a canonical feed."""


class StructuralParseError(FeedParseError):
    """Raised when the XML text cannot be tokenized into a tree."""


class FeedNotRecognizedError(FeedParseError):
    """Raised when the document is not RSS 0.9x/1.0/2.0 or Atom."""


class ConfigurationError(ValueError):
    """Raised when parser options are invalid (bad custom field rule, unknown RSS version)."""
