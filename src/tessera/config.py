"""Application and views configuration.

Both configs are frozen dataclasses — immutable after creation,
IDE-autocompletable, no string-key dict lookups.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from tessera.errors import ConfigurationError


@dataclass(frozen=True, slots=True)
class ViewsConfig:
    """Views middleware configuration. Immutable after creation.

    Override what you need::

        config = ViewsConfig(directory="views", map={"html": "kida"}, template="layout")
    """

    # Root directory views are resolved against
    directory: str | Path = "views"

    # Fallback extension when a view name carries none (no leading dot)
    extension: str = "html"

    # Extension -> engine name. Setting it also forces templating for .html
    map: Mapping[str, str] | None = None

    # Default layout view; a ``template`` key in render locals wins
    template: str | None = None

    # kida environment options
    autoescape: bool = True
    auto_reload: bool = False

    def __post_init__(self) -> None:
        if not self.extension:
            raise ConfigurationError("ViewsConfig.extension must not be empty")
        if self.extension.startswith("."):
            msg = f"ViewsConfig.extension must not start with a dot: {self.extension!r}"
            raise ConfigurationError(msg)
        if self.map is not None:
            for ext, engine in self.map.items():
                if not ext or not engine:
                    msg = f"ViewsConfig.map entries must be non-empty: {ext!r} -> {engine!r}"
                    raise ConfigurationError(msg)


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    ``views`` installs a :class:`~tessera.views.Views` middleware as the
    outermost layer when the app is frozen::

        app = App(AppConfig(debug=True, views=ViewsConfig(directory="views")))
    """

    debug: bool = False
    views: ViewsConfig | None = None
