"""
Error taxonomy for verse image rendering.

Every failure carries a short, human-readable message the UI can show as-is.
The compositor catches these and hands them back inside a RenderResult
instead of letting them escape.
"""


class VerseImageError(Exception):
    """Base class for every rendering failure."""

    user_message = "Could not create the verse image. Please try again."

    def __init__(self, message: str = "", user_message: str | None = None):
        super().__init__(message or self.user_message)
        if user_message:
            self.user_message = user_message


class ImageDecodeError(VerseImageError):
    """Background bytes were unreadable or the remote fetch failed."""

    user_message = "The background image could not be loaded."


class EmptyInputError(VerseImageError):
    """Verse text is empty or whitespace only."""

    user_message = "Select a verse before creating an image."


class RenderContextError(VerseImageError):
    """The drawing surface could not be allocated."""

    user_message = "The image canvas could not be prepared."


class SerializationError(VerseImageError):
    """Encoding the finished surface failed."""

    user_message = "The finished image could not be saved."


class NoRenderAvailableError(VerseImageError):
    """A download was requested before any render succeeded."""

    user_message = "Create a preview before downloading."
