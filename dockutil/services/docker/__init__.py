"""Docker daemon services: client facade, state resolution and lifecycle workflows."""
from .client import RuntimeClient
from .lifecycle import ContainerLifecycle
from .resolver import ExactImageMatcher, ImageMatcher, RegexImageMatcher

__all__ = [
    'RuntimeClient',
    'ContainerLifecycle',
    'ImageMatcher',
    'RegexImageMatcher',
    'ExactImageMatcher',
]
