"""Download-and-unpack installer for the LSLib converter release."""

from __future__ import annotations

import logging
import zipfile
from pathlib import Path

import httpx

from profile8_fixer.errors import ToolInstallError
from profile8_fixer.schemas import ReleaseAsset, ReleaseInfo

logger = logging.getLogger(__name__)

LATEST_RELEASE_URL = "https://api.github.com/repos/Norbyte/lslib/releases/latest"
TOOL_FILENAMES = ("divine.dll", "converterapp.dll", "divine.exe", "converterapp.exe")


def asset_score(name: str) -> int:
    """Rank a release asset name; lower is preferred."""
    lowered = name.lower()
    if "exporttool" in lowered:
        return 0
    if "divine" in lowered:
        return 1
    if lowered.endswith(".zip"):
        return 2
    return 9


def pick_asset(release: ReleaseInfo) -> ReleaseAsset | None:
    """Return the best downloadable asset of ``release``."""
    candidates = [asset for asset in release.assets if asset.browser_download_url]
    if not candidates:
        return None
    return min(candidates, key=lambda asset: asset_score(asset.name))


def find_tool(root: Path) -> Path | None:
    """Find the preferred converter artifact below ``root``."""
    best: Path | None = None
    best_index = len(TOOL_FILENAMES)
    for path in sorted(root.rglob("*")):
        if not path.is_file():
            continue
        lowered = path.name.lower()
        if lowered in TOOL_FILENAMES:
            index = TOOL_FILENAMES.index(lowered)
            if index < best_index:
                best, best_index = path, index
    return best


def safe_extract(archive: zipfile.ZipFile, destination: Path) -> None:
    """Extract ``archive`` into ``destination``, rejecting escaping members."""
    root = destination.resolve()
    for member in archive.namelist():
        target = (root / member).resolve()
        if not target.is_relative_to(root):
            raise ToolInstallError(f"Refusing to extract unsafe archive member: {member}")
    archive.extractall(root)


class ReleaseInstaller:
    """Fetch the latest LSLib release and locate its converter.

    Parameters
    ----------
    client : httpx.Client | None, default=None
        HTTP client; a default one following redirects is created when omitted.
    api_url : str, default=LATEST_RELEASE_URL
        GitHub ``releases/latest`` endpoint.
    """

    def __init__(
        self,
        client: httpx.Client | None = None,
        api_url: str = LATEST_RELEASE_URL,
    ) -> None:
        self._client = client
        self._api_url = api_url

    def install(self, scratch_dir: Path) -> Path:
        """Download, unpack and return the converter artifact path.

        Raises
        ------
        ToolInstallError
            If the release, asset, archive or tool cannot be obtained.
        """
        client = self._client or httpx.Client(
            follow_redirects=True,
            timeout=httpx.Timeout(60.0),
            headers={"Accept": "application/vnd.github+json"},
        )
        try:
            return self._install(client, scratch_dir)
        finally:
            if self._client is None:
                client.close()

    def _install(self, client: httpx.Client, scratch_dir: Path) -> Path:
        logger.info("Downloading latest LSLib release...")
        release = self._fetch_release(client)
        asset = pick_asset(release)
        if asset is None or asset.browser_download_url is None:
            raise ToolInstallError(
                "Could not find a downloadable LSLib asset in the latest release."
            )
        logger.debug("Selected asset %s (%s)", asset.name, asset.browser_download_url)

        zip_path = scratch_dir / "lslib.zip"
        extract_dir = scratch_dir / "lslib"
        try:
            with client.stream("GET", asset.browser_download_url) as response:
                response.raise_for_status()
                with zip_path.open("wb") as handle:
                    for chunk in response.iter_bytes():
                        handle.write(chunk)
        except httpx.HTTPError as exc:
            raise ToolInstallError(f"Failed to download {asset.name}: {exc}") from exc

        extract_dir.mkdir(parents=True, exist_ok=True)
        try:
            with zipfile.ZipFile(zip_path) as archive:
                safe_extract(archive, extract_dir)
        except (zipfile.BadZipFile, OSError) as exc:
            raise ToolInstallError(f"Failed to unpack {asset.name}: {exc}") from exc

        tool = find_tool(extract_dir)
        if tool is None:
            raise ToolInstallError(
                "LSLib downloaded, but no Divine/ConverterApp tool was found."
            )
        logger.info("Using tool: %s", tool, extra={"status": "ok"})
        return tool

    def _fetch_release(self, client: httpx.Client) -> ReleaseInfo:
        try:
            response = client.get(self._api_url)
            response.raise_for_status()
            return ReleaseInfo.model_validate(response.json())
        except httpx.HTTPError as exc:
            raise ToolInstallError(f"Could not query LSLib releases: {exc}") from exc
        except ValueError as exc:
            raise ToolInstallError(f"Unexpected LSLib release payload: {exc}") from exc
