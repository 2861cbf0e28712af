"""Profile model, codecs, merge and storage."""

from .profile import Profile  # noqa: F401
from .merge import merge_profiles  # noqa: F401
from .fill_gaps import fill_gaps  # noqa: F401
