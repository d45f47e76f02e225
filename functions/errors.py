class AppError(Exception):
    """Base for errors the UI shows to the user as-is."""


class ConfigurationError(AppError):
    """A required secret (API key, Supabase credentials) is missing."""


class ActionNotAllowed(AppError):
    """A guard refused the action: self-like, early or duplicate review, etc."""


class PhotoRejected(AppError):
    """Upload refused: too large, not an image, or photo limit reached."""
