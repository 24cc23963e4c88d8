"""Exception types raised by llmstxt."""


class LlmstxtError(Exception):
    """Base class for all llmstxt errors."""


class InvalidSlugError(LlmstxtError, ValueError):
    """A slug is not safe to use as a path component."""


class PathTraversalError(LlmstxtError, ValueError):
    """A constructed path escapes the directory it must live in."""


class FetchError(LlmstxtError):
    """Downloading an llms.txt file failed."""


class RegistryError(LlmstxtError):
    """No registry could be loaded from any source."""
