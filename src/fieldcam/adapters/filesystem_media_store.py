"""Media library backed by a local directory tree."""

import asyncio
import shutil
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import unquote, urlparse
from uuid import uuid4

from fieldcam.services.media import MediaStore


@dataclass
class FilesystemMediaStore(MediaStore):
    """Assets live in root/assets, albums are folders under root/albums."""

    root: Path

    async def create_asset(self, uri: str) -> str:
        """Copy the file behind uri into the asset folder."""
        return await asyncio.to_thread(self._create_asset, uri)

    async def create_or_append_album(self, name: str, asset_id: str) -> None:
        """Place an asset into the album folder, creating it if needed."""
        await asyncio.to_thread(self._append_to_album, name, asset_id)

    def asset_path(self, asset_id: str) -> Path:
        return self.root / "assets" / asset_id

    def album_path(self, name: str) -> Path:
        return self.root / "albums" / name

    def _create_asset(self, uri: str) -> str:
        source = _path_from_uri(uri)
        if not source.is_file():
            raise FileNotFoundError(f"No file behind {uri}")
        asset_id = f"{uuid4().hex}{source.suffix.lower()}"
        target = self.asset_path(asset_id)
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(source, target)
        return asset_id

    def _append_to_album(self, name: str, asset_id: str) -> None:
        if not name or Path(name).name != name:
            raise ValueError(f"Invalid album name: {name!r}")
        asset = self.asset_path(asset_id)
        if not asset.is_file():
            raise FileNotFoundError(f"Unknown asset {asset_id}")
        album = self.album_path(name)
        album.mkdir(parents=True, exist_ok=True)
        entry = album / asset_id
        if entry.exists():
            return
        try:
            entry.hardlink_to(asset)
        except OSError:
            shutil.copy2(asset, entry)


def _path_from_uri(uri: str) -> Path:
    parsed = urlparse(uri)
    if parsed.scheme == "file":
        return Path(unquote(parsed.path))
    return Path(uri)
