"""Per-story illustration artifacts.

Each story id owns at most one image file.  An existing file is always
reused; age only matters to the retention sweep, which runs at the start
of every :meth:`ArtifactStore.materialize` call.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path

from topstories.config import ImageSectionConfig
from topstories.shared.files import atomic_write_bytes, ensure_directory
from topstories.shared.images import ImageGenerator

logger = logging.getLogger(__name__)

ARTIFACT_SUFFIX = ".jpg"
SECONDS_PER_DAY = 24 * 60 * 60

# 1x1 baseline JPEG written in test mode.
TEST_JPEG = bytes.fromhex(
    "ffd8ffe000104a46494600010100000100010000ffdb00430008060607060508"
    "0707070909080a0c140d0c0b0b0c1912130f141d1a1f1e1d1a1c1c20242e2720"
    "222c231c1c2837292c30313434341f27393d38323c2e333432ffc0000b080001"
    "000101011100ffc4001f00000105010101010101000000000000000001020304"
    "05060708090a0bffc400b5100002010303020403050504040000017d01020300"
    "041105122131410613516107227114328191a1082342b1c11552d1f024336272"
    "82090a161718191a25262728292a3435363738393a434445464748494a535455"
    "565758595a636465666768696a737475767778797a838485868788898a929394"
    "95969798999aa2a3a4a5a6a7a8a9aab2b3b4b5b6b7b8b9bac2c3c4c5c6c7c8c9"
    "cad2d3d4d5d6d7d8d9dae1e2e3e4e5e6e7e8e9eaf1f2f3f4f5f6f7f8f9faffda"
    "0008010100003f00fbd5db20a8f17ee9f361a07fffd9"
)


class ArtifactStore:
    """Map story ids to illustration files, generating them on first use."""

    def __init__(
        self,
        config: ImageSectionConfig,
        generator: ImageGenerator | None = None,
    ) -> None:
        self._config = config
        self.directory = Path(config.directory)
        self.default_image = Path(config.default_image)
        self._generator = generator or ImageGenerator(
            config.api_key,
            model=config.model,
            timeout=config.timeout,
        )
        ensure_directory(self.directory)

    def path_for(self, item_id: int) -> Path:
        return self.directory / f"{item_id}{ARTIFACT_SUFFIX}"

    def sweep(self, now: float | None = None) -> int:
        """Delete artifacts last modified more than ``retention_days`` ago.

        Deletion errors are ignored. Returns the number of files removed.
        """
        cutoff = (time.time() if now is None else now) - self._config.retention_days * SECONDS_PER_DAY
        removed = 0
        for path in self.directory.glob(f"*{ARTIFACT_SUFFIX}"):
            try:
                if path.stat().st_mtime < cutoff:
                    path.unlink()
                    removed += 1
            except OSError as exc:
                logger.debug("Could not remove stale artifact %s: %s", path, exc)
        if removed:
            logger.info("Removed %d stale artifacts from %s", removed, self.directory)
        return removed

    def materialize(self, prompt: str, item_id: int) -> Path:
        """Return the illustration for ``item_id``, creating it if needed.

        Never raises: any failure yields the shared default image path.
        The prompt is only used when no artifact exists yet.
        """
        self.sweep()

        image_path = self.path_for(item_id)
        if image_path.exists():
            return image_path

        if self._config.test_mode:
            logger.info("TEST_MODE: Creating test image at %s", image_path)
            try:
                atomic_write_bytes(image_path, TEST_JPEG)
            except OSError as exc:
                logger.warning("TEST_MODE: Error writing test image: %s", exc)
                return self.default_image
            return image_path

        if not self._generator.is_configured():
            logger.info("GEMINI_API_KEY not set, using default image")
            return self.default_image

        result = self._generator.generate(
            prompt,
            output_path=image_path,
            aspect_ratio=self._config.aspect_ratio,
        )
        return result or self.default_image
