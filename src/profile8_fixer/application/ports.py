"""Application ports for clean architecture boundaries."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from profile8_fixer.application.results import (
    BackupRecord,
    ConversionResult,
    ToolDescriptor,
)


class TreeDocumentLike(Protocol):
    """Marker protocol for in-memory tree documents."""

    path: Path


class BackupManager(Protocol):
    """Create redundant copies of the target before mutation."""

    def create_backups(
        self, target_path: Path, central_backup_dir: Path
    ) -> tuple[BackupRecord, BackupRecord]:
        """Return (sibling, central) backup records."""


class ResourceConverter(Protocol):
    """Run the external resource converter."""

    def convert(
        self,
        tool: ToolDescriptor,
        source_path: Path,
        dest_path: Path,
        format_id: str,
    ) -> ConversionResult:
        """Convert ``source_path`` to ``dest_path``; raise on failure."""


class TreeMutator(Protocol):
    """Load, prune and save intermediate tree documents."""

    def load(self, path: Path) -> TreeDocumentLike:
        """Parse the document at ``path``."""

    def count_nodes(
        self,
        document: TreeDocumentLike,
        identity_key: str,
        identity_value: str,
        tag: str = "node",
    ) -> int:
        """Count matching nodes without modifying the document."""

    def prune_nodes(
        self,
        document: TreeDocumentLike,
        identity_key: str,
        identity_value: str,
        tag: str = "node",
    ) -> int:
        """Remove matching nodes and return how many were removed."""

    def save(self, document: TreeDocumentLike, path: Path | None = None) -> Path:
        """Serialize the document."""


class ToolLocator(Protocol):
    """Resolve the converter tool."""

    def locate(self, scratch_dir: Path) -> ToolDescriptor:
        """Return a tool descriptor or raise ``NotFoundError``."""


class TargetLocator(Protocol):
    """Resolve the resource file to edit."""

    def locate(self) -> Path:
        """Return the target path or raise ``NotFoundError``."""


class Installer(Protocol):
    """Obtain a converter artifact inside the scratch directory."""

    def install(self, scratch_dir: Path) -> Path:
        """Return the installed converter path."""
