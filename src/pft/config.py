"""Configuration management for pft.

A site is a directory holding a ``pft.yaml`` file. Layout constants live
here rather than being scattered through the tree and map modules.
"""

from __future__ import annotations

import getpass
import locale
import os
import re
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError

from .errors import ConfigurationError

CONF_NAME = "pft.yaml"


# =============================================================================
# On-disk layout
# =============================================================================

# Everything a user edits lives below this directory of the site root.
CONTENT_DIR = "content"

# Blog entries: content/blog/YYYY-MM/DD-slug
BLOG_DIR = "blog"

# Month entries sit beside the month directory: content/blog/YYYY-MM.month
MONTH_SUFFIX = ".month"

PAGES_DIR = "pages"
TAGS_DIR = "tags"

TEMPLATES_DIR = "templates"
INJECT_DIR = "inject"

MONTH_DIR_PATTERN = re.compile(r"^(\d{4})-(\d{2})$")
MONTH_FILE_PATTERN = re.compile(r"^(\d{4})-(\d{2})" + re.escape(MONTH_SUFFIX) + r"$")
BLOG_FILE_PATTERN = re.compile(r"^(\d{2})-(.+)$")


# =============================================================================
# Cross references
# =============================================================================

# Inline reference to another node by id, e.g. [[b.2024.01.05.hello]]
REFERENCE_PATTERN = re.compile(r"\[\[\s*([a-z](?:\.[^\]\s]+)+)\s*\]\]")

# Header option listing extra reference symbols.
REFS_OPTION = "refs"


# =============================================================================
# Site configuration file
# =============================================================================


def _default_user() -> str:
    try:
        return getpass.getuser()
    except (KeyError, OSError):
        return "Anonymous"


def _default_encoding() -> str:
    return locale.getpreferredencoding(False) or "utf-8"


class SiteSection(BaseModel):
    author: str = Field(default_factory=_default_user)
    template: str = "default"
    title: str = "My PFT website"
    home: str = "Welcome"
    encoding: str = Field(default_factory=_default_encoding)
    url: str | None = None


class SystemSection(BaseModel):
    editor: str = Field(default_factory=lambda: f"{os.environ.get('EDITOR', 'vim')} %s")
    browser: str = Field(default_factory=lambda: f"{os.environ.get('BROWSER', 'firefox')} %s")
    encoding: str = Field(default_factory=_default_encoding)


class SiteConfig(BaseModel):
    """Contents of ``pft.yaml``."""

    site: SiteSection = Field(default_factory=SiteSection)
    system: SystemSection = Field(default_factory=SystemSection)

    @classmethod
    def load(cls, root: Path) -> SiteConfig:
        """Load the configuration stored in ``root``.

        Raises:
            ConfigurationError: If the file is missing, unreadable, or lacks
                a mandatory ``site`` key.
        """
        conf_file = root / CONF_NAME
        if not conf_file.exists():
            raise ConfigurationError(f"{root} is not a PFT site: {CONF_NAME} is missing")

        try:
            data = yaml.safe_load(conf_file.read_text(encoding="utf-8")) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Cannot read {conf_file}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"{conf_file}: expected a mapping at top level")

        site = data.get("site")
        if not isinstance(site, dict):
            raise ConfigurationError(f"{conf_file}: missing section 'site'")
        missing = [key for key in ("author", "title", "template", "home") if key not in site]
        if missing:
            raise ConfigurationError(
                f"{conf_file}: missing {', '.join('site.' + key for key in missing)}"
            )

        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise ConfigurationError(f"{conf_file}: {e}") from e

    def save_to(self, root: Path) -> Path:
        """Write this configuration as ``root/pft.yaml``, creating ``root``."""
        root.mkdir(parents=True, exist_ok=True)
        conf_file = root / CONF_NAME
        payload = self.model_dump(exclude_none=True)
        conf_file.write_text(
            yaml.safe_dump(payload, default_flow_style=False, sort_keys=False),
            encoding="utf-8",
        )
        return conf_file


def is_root(path: Path) -> bool:
    """True if ``path`` holds a configuration file."""
    return (path / CONF_NAME).is_file()


def locate_root(start: Path | None = None) -> Path | None:
    """Walk up from ``start`` looking for a directory holding ``pft.yaml``.

    Returns:
        The first such directory, or None when the filesystem root is
        reached without finding one.
    """
    current = Path(start or os.getcwd()).resolve()
    if not current.is_dir():
        raise ConfigurationError(f"Not a directory: {current}")

    while True:
        if is_root(current):
            return current
        parent = current.parent
        if parent == current:
            return None
        current = parent


def get_site_root(start: Path | None = None) -> Path:
    """Get the site root directory.

    Discovery order:
    1. PFT_ROOT environment variable (explicit override)
    2. Walk up from ``start`` (or cwd) looking for pft.yaml

    Raises:
        ConfigurationError: If no site can be found.
    """
    root = os.environ.get("PFT_ROOT")
    if root:
        return Path(root)

    found = locate_root(start)
    if found is None:
        raise ConfigurationError(
            "Not a PFT site (or any parent directory). "
            "Run 'pft init' or set PFT_ROOT to an existing site."
        )
    return found
