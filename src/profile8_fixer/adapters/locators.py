"""Tool and profile locators implementing the application ports."""

from __future__ import annotations

import logging
import os
import shutil
import sys
from collections.abc import Callable, Sequence
from pathlib import Path

from profile8_fixer.application.ports import Installer
from profile8_fixer.application.results import ToolDescriptor
from profile8_fixer.errors import NotFoundError
from profile8_fixer.settings import PROFILE_FILENAME, TOOL_NAMES

logger = logging.getLogger(__name__)

DOTNET_LAUNCHER = "dotnet"
DOTNET_ENVIRONMENT = {"DOTNET_ROLL_FORWARD": "Major"}


def describe_tool(path: Path, platform: str = sys.platform) -> ToolDescriptor:
    """Build a descriptor, routing managed-runtime artifacts through dotnet.

    ``.dll`` always needs the launcher; ``.exe`` needs it off Windows.
    """
    suffix = path.suffix.lower()
    needs_launcher = suffix == ".dll" or (suffix == ".exe" and not platform.startswith("win"))
    if needs_launcher:
        return ToolDescriptor(
            executable=path,
            launcher=DOTNET_LAUNCHER,
            environment=dict(DOTNET_ENVIRONMENT),
        )
    return ToolDescriptor(executable=path)


class ConverterToolLocator:
    """Resolve the converter: explicit path, then ``PATH``, then auto-install.

    Parameters
    ----------
    tool_path : Path | None, default=None
        Explicit converter path.
    auto_install : bool, default=True
        Download the latest release when nothing else is found.
    installer : Installer | None, default=None
        Installer used for auto-install.
    names : Sequence[str], default=TOOL_NAMES
        Executable names searched on ``PATH``.
    which : Callable[[str], str | None], default=shutil.which
        ``PATH`` lookup.
    platform : str, default=sys.platform
        Platform identifier; auto-install is not attempted on macOS.
    """

    def __init__(
        self,
        tool_path: Path | None = None,
        *,
        auto_install: bool = True,
        installer: Installer | None = None,
        names: Sequence[str] = TOOL_NAMES,
        which: Callable[[str], str | None] = shutil.which,
        platform: str = sys.platform,
    ) -> None:
        self._tool_path = tool_path
        self._auto_install = auto_install
        self._installer = installer
        self._names = tuple(names)
        self._which = which
        self._platform = platform

    def search_path(self) -> Path | None:
        """Return the first converter found on ``PATH``."""
        for name in self._names:
            found = self._which(name)
            if found:
                return Path(found)
        return None

    def locate(self, scratch_dir: Path) -> ToolDescriptor:
        """Resolve the converter tool.

        Raises
        ------
        NotFoundError
            If no tool is given, found on ``PATH`` or installable.
        """
        if self._tool_path is not None:
            path = self._tool_path
            if not path.is_file():
                found = self._which(str(path))
                if not found:
                    raise NotFoundError(f"Converter tool not found: {path}")
                path = Path(found)
            return describe_tool(path, self._platform)

        found_on_path = self.search_path()
        if found_on_path is not None:
            logger.debug("Found converter on PATH: %s", found_on_path)
            return describe_tool(found_on_path, self._platform)

        if self._auto_install and self._installer is not None:
            if self._platform == "darwin":
                raise NotFoundError(
                    "Automatic install is not available on macOS. "
                    "Build LSLib's Divine and pass --tool /path/to/Divine.dll."
                )
            return describe_tool(self._installer.install(scratch_dir), self._platform)

        raise NotFoundError(
            "Could not find Divine/ConverterApp in PATH. Use --tool /path/to/Divine."
        )


def detect_profile(profiles_root: Path, filename: str = PROFILE_FILENAME) -> Path | None:
    """Search ``profiles_root`` for ``filename``.

    A match inside a ``Public`` directory wins; otherwise the most recently
    modified match is returned.
    """
    if not profiles_root.is_dir():
        return None
    matches: list[Path] = []
    for dirpath, _dirnames, filenames in os.walk(profiles_root):
        if filename in filenames:
            matches.append(Path(dirpath) / filename)
    if not matches:
        return None
    public = [path for path in sorted(matches) if path.parent.name.lower() == "public"]
    if public:
        return public[0]
    return max(matches, key=lambda path: path.stat().st_mtime)


class ProfileLocator:
    """Resolve the profile to edit, auto-detecting when the path is absent.

    Parameters
    ----------
    profile_path : Path
        Explicit or default profile path.
    profiles_root : Path | None, default=None
        Directory searched when ``profile_path`` is not a file.
    """

    def __init__(self, profile_path: Path, profiles_root: Path | None = None) -> None:
        self._profile_path = profile_path
        self._profiles_root = profiles_root

    def locate(self) -> Path:
        """Return the absolute profile path.

        Raises
        ------
        NotFoundError
            If no profile file exists.
        """
        if self._profile_path.is_file():
            return self._profile_path.resolve()
        if self._profiles_root is not None:
            detected = detect_profile(self._profiles_root, self._profile_path.name or PROFILE_FILENAME)
            if detected is not None:
                logger.info("Auto-detected profile: %s", detected)
                return detected.resolve()
        raise NotFoundError(
            f"{self._profile_path.name or PROFILE_FILENAME} not found. "
            "Use --profile to specify the path."
        )
