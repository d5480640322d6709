"""Console colors for vmsnap output.

Colors come from the bundled data/theme.toml and are checked by a pydantic
model before being mapped onto the style names used by the status table.
"""

import logging
import re
import tomllib
from functools import cache
from importlib import resources
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator
from rich.theme import Theme

logger = logging.getLogger(__name__)

_HEX_COLOR = re.compile(r"#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})")


class ThemeColors(BaseModel):
    """Hex colors keyed by role. Unknown roles are rejected."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    text: str = "#ffffff"
    muted: str = "#b2bec3"
    header: str = "#69B9A1"
    border: str = "#29526d"
    success: str = "#03b971"
    warning: str = "#f5b332"
    error: str = "#f53263"
    info: str = "#0ec1c8"
    status_ok: str = "#03b971"
    status_inconsistent: str = "#f53263"
    size: str = "#0e8ac8"

    @field_validator("*", mode="before")
    @classmethod
    def _check_hex(cls, value: object, info: Any) -> str:
        if not isinstance(value, str) or not _HEX_COLOR.fullmatch(value.strip()):
            msg = f"{info.field_name}: expected #RGB or #RRGGBB, got {value!r}"
            raise ValueError(msg)
        return value.strip()


def read_bundled_colors() -> ThemeColors:
    """Read the packaged theme file.

    A missing, unparsable or invalid file is logged and the model defaults
    are used instead.
    """
    source = resources.files("vmsnap.data").joinpath("theme.toml")
    try:
        data = tomllib.loads(source.read_text(encoding="utf-8"))
        return ThemeColors(**data.get("colors", {}))
    except (OSError, tomllib.TOMLDecodeError, ValidationError, TypeError) as e:
        logger.warning("Bundled theme unusable, using defaults: %s", e)
        return ThemeColors()


def get_rich_theme(colors: ThemeColors | None = None) -> Theme:
    """Map theme colors onto the rich style names vmsnap prints with."""
    c = colors if colors is not None else read_bundled_colors()
    return Theme(
        {
            "text": c.text,
            "muted": c.muted,
            "dim": c.muted,
            "header": c.header,
            "bold_header": f"bold {c.header}",
            "border": c.border,
            "success": c.success,
            "warning": c.warning,
            "error": f"bold {c.error}",
            "info": c.info,
            "status.ok": f"bold {c.status_ok}",
            "status.inconsistent": f"bold {c.status_inconsistent}",
            "size": c.size,
            "domain": f"bold {c.text}",
        }
    )


@cache
def get_theme() -> Theme:
    """Rich theme shared by the module-level consoles."""
    return get_rich_theme()
