"""Built-in plugin set."""

from story_linter.plugins import characters, links
from story_linter.plugins.base import Plugin


def get_default_plugins() -> list[Plugin]:
    """Return the plugins registered when none are given explicitly."""
    return [characters.create_plugin(), links.create_plugin()]
