# Model package init
from .models import GameConfig, Profile  # noqa: F401 re-export

__all__ = ["GameConfig", "Profile"]
