"""LSX tree loading, pruning and serialization backed by lxml."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from lxml import etree

from profile8_fixer.errors import TreeError

logger = logging.getLogger(__name__)


def _parser() -> etree.XMLParser:
    return etree.XMLParser(
        remove_blank_text=False,
        resolve_entities=False,
        no_network=True,
        huge_tree=True,
    )


@dataclass
class TreeDocument:
    """In-memory LSX document.

    Elements expose their tag, ``attrib`` mapping, ordered children and a
    non-owning parent reference through ``getparent()``.
    """

    path: Path
    tree: etree._ElementTree

    @property
    def root(self) -> etree._Element:
        return self.tree.getroot()

    def find_matches(self, identity_key: str, identity_value: str, tag: str = "node") -> list[etree._Element]:
        """Return every element below the root matching the identity predicate."""
        return [
            element
            for element in self.root.iterdescendants(tag)
            if element.get(identity_key) == identity_value
        ]


class LxmlTreeMutator:
    """Tree mutator implementing the application port."""

    def load(self, path: Path) -> TreeDocument:
        """Parse the LSX document at ``path``.

        Raises
        ------
        TreeError
            If the file is missing or not well-formed XML.
        """
        try:
            tree = etree.parse(str(path), _parser())
        except (OSError, etree.XMLSyntaxError) as exc:
            raise TreeError(f"Could not parse tree document {path}: {exc}") from exc
        return TreeDocument(path=path, tree=tree)

    def count_nodes(
        self,
        document: TreeDocument,
        identity_key: str,
        identity_value: str,
        tag: str = "node",
    ) -> int:
        """Count matching elements without modifying the document."""
        return len(document.find_matches(identity_key, identity_value, tag))

    def prune_nodes(
        self,
        document: TreeDocument,
        identity_key: str,
        identity_value: str,
        tag: str = "node",
    ) -> int:
        """Remove every element whose ``identity_key`` equals ``identity_value``.

        Matches are searched at every depth below the root. Each match is
        detached from its parent; nested matches inside a detached subtree are
        counted as removed too. Remaining siblings keep their order.

        Returns
        -------
        int
            Number of matching elements no longer in the document. Zero is a
            normal outcome.
        """
        matches = document.find_matches(identity_key, identity_value, tag)
        for element in matches:
            parent = element.getparent()
            if parent is not None:
                _detach(parent, element)
        logger.debug("Pruned %d <%s %s=%r> element(s)", len(matches), tag, identity_key, identity_value)
        return len(matches)

    def save(self, document: TreeDocument, path: Path | None = None) -> Path:
        """Write the document as UTF-8 with an XML declaration.

        Raises
        ------
        TreeError
            If the file cannot be written.
        """
        destination = path or document.path
        try:
            document.tree.write(
                str(destination),
                encoding="utf-8",
                xml_declaration=True,
            )
        except OSError as exc:
            raise TreeError(f"Could not write tree document {destination}: {exc}") from exc
        return destination


def _detach(parent: etree._Element, element: etree._Element) -> None:
    # lxml drops the tail with the element; keep non-whitespace tail text.
    tail = element.tail
    if tail and tail.strip():
        previous = element.getprevious()
        if previous is not None:
            previous.tail = (previous.tail or "") + tail
        else:
            parent.text = (parent.text or "") + tail
    parent.remove(element)
