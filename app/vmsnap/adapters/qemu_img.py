"""qemu-img disk image adapter.

Reads image information (sizes, format, persistent bitmaps) and removes
bitmaps from qcow2 images.
"""

import json
import logging
from typing import Any

from vmsnap.adapters.base import DiskImageTool, DiskInfo
from vmsnap.core.errors import AdapterError
from vmsnap.utils.shell import CommandResult, run_command

logger = logging.getLogger(__name__)

QEMU_IMG = "qemu-img"


class QemuImgAdapter(DiskImageTool):
    """Disk image adapter using qemu-img."""

    # Timeout for qemu-img operations (image info on large images can be slow)
    _QEMU_IMG_TIMEOUT: float = 120.0

    @property
    def command(self) -> str:
        """Return the qemu-img executable name."""
        return QEMU_IMG

    def disk_info(self, disk_path: str) -> DiskInfo:
        """Return image information for a disk.

        Args:
            disk_path: Path to the image file.

        Returns:
            DiskInfo with sizes, format and bitmap names.

        Raises:
            AdapterError: If qemu-img fails or prints something that is not JSON.
        """
        result = self._run(["info", disk_path, "--output=json"])

        try:
            data = json.loads(result.stdout)
        except json.JSONDecodeError as e:
            msg = f"Unexpected qemu-img info output for {disk_path}: {e}"
            raise AdapterError(msg, [QEMU_IMG, "info", disk_path]) from e

        if not isinstance(data, dict):
            msg = f"Unexpected qemu-img info output for {disk_path}"
            raise AdapterError(msg, [QEMU_IMG, "info", disk_path])

        return parse_image_info(disk_path, data)

    def remove_bitmap(self, disk_path: str, bitmap: str) -> None:
        """Remove a persistent bitmap from a qcow2 image."""
        self._run(["bitmap", "--remove", "-f", "qcow2", disk_path, bitmap])

    def _run(self, args: list[str]) -> CommandResult:
        """Run a qemu-img subcommand, raising AdapterError on failure."""
        command = [QEMU_IMG, *args]
        try:
            result = run_command(command, timeout=self._QEMU_IMG_TIMEOUT)
        except (FileNotFoundError, OSError) as e:
            msg = f"Cannot execute {QEMU_IMG}: {e}"
            raise AdapterError(msg, command) from e

        if not result.success:
            stderr = result.stderr.strip()
            msg = f"qemu-img {args[0]} failed: {stderr or 'unknown error'}"
            raise AdapterError(msg, command, stderr)
        return result


def parse_image_info(disk_path: str, data: dict[str, Any]) -> DiskInfo:
    """Build DiskInfo from parsed ``qemu-img info --output=json`` data.

    Raw images and qcow2 images without a format-specific section
    simply report no bitmaps.
    """
    bitmaps: list[str] = []

    format_specific = data.get("format-specific") or {}
    specific_data = format_specific.get("data") or {}
    for bitmap in specific_data.get("bitmaps") or []:
        name = bitmap.get("name") if isinstance(bitmap, dict) else None
        if name:
            bitmaps.append(name)
        else:
            logger.debug("Skipping bitmap entry without a name in %s: %r", disk_path, bitmap)

    return DiskInfo(
        path=disk_path,
        format=str(data.get("format", "unknown")),
        virtual_size=data.get("virtual-size"),
        actual_size=data.get("actual-size"),
        bitmaps=tuple(bitmaps),
    )
