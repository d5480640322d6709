"""Checkpoint and bitmap scrubbing.

Removes the change-tracking state virtnbdbackup leaves on a domain: the
checkpoint metadata held by libvirt and the persistent bitmaps stored in
each qcow2 image. Only names matching ``virtnbdbackup.<N>`` are touched.

Removal is best-effort: a failing item is logged, recorded as skipped and
the loop moves on to the next one.
"""

import logging
from enum import Enum

from vmsnap.adapters.base import DiskImageTool, Hypervisor
from vmsnap.adapters.virsh import CHECKPOINT_REGEX
from vmsnap.core.errors import AdapterError, InvalidScrubTypeError, ScrubError
from vmsnap.models.result import ItemKind, ItemResult

logger = logging.getLogger(__name__)


class ScrubType(str, Enum):
    """What a scrub removes.

    Attributes:
        CHECKPOINT: Checkpoint metadata only.
        BITMAP: Disk bitmaps only.
        BOTH: Checkpoints then bitmaps, restricted to a name when one is given.
        ALL: Every checkpoint and bitmap, ignoring any name.
    """

    CHECKPOINT = "checkpoint"
    BITMAP = "bitmap"
    BOTH = "both"
    ALL = "*"

    @classmethod
    def parse(cls, value: "ScrubType | str") -> "ScrubType":
        """Convert a string to a ScrubType.

        Raises:
            InvalidScrubTypeError: If the value is not a known scrub type.
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            msg = f"Invalid scrub type: {value}"
            raise InvalidScrubTypeError(msg) from None


def _selected(candidate: str, name: str | None) -> bool:
    if not CHECKPOINT_REGEX.match(candidate):
        return False
    return name is None or candidate == name


class Scrubber:
    """Removes checkpoints and bitmaps from domains.

    Args:
        hypervisor: Hypervisor adapter owning checkpoint metadata.
        disk_image: Disk image adapter owning bitmaps.
    """

    def __init__(self, hypervisor: Hypervisor, disk_image: DiskImageTool) -> None:
        self._hypervisor = hypervisor
        self._disk_image = disk_image

    def cleanup_checkpoints(self, domain: str, name: str | None = None) -> list[ItemResult]:
        """Delete checkpoint metadata from a domain.

        Args:
            domain: Domain to clean.
            name: Only delete this checkpoint. None deletes all of them.

        Returns:
            One ItemResult per checkpoint that was attempted.

        Raises:
            AdapterError: If the checkpoints cannot be listed.
        """
        results: list[ItemResult] = []

        for checkpoint in self._hypervisor.list_checkpoints(domain):
            if not _selected(checkpoint, name):
                logger.debug("Leaving checkpoint %s on %s", checkpoint, domain)
                continue

            try:
                self._hypervisor.delete_checkpoint(domain, checkpoint)
            except AdapterError as e:
                logger.warning("Error removing checkpoint %s from %s: %s", checkpoint, domain, e)
                results.append(
                    ItemResult(ItemKind.CHECKPOINT, domain, checkpoint, success=False, error=str(e))
                )
                continue

            results.append(ItemResult(ItemKind.CHECKPOINT, domain, checkpoint, success=True))

        return results

    def cleanup_bitmaps(self, domain: str, name: str | None = None) -> list[ItemResult]:
        """Remove bitmaps from every disk of a domain.

        A disk whose image cannot be inspected is skipped with a warning.

        Args:
            domain: Domain to clean.
            name: Only remove this bitmap. None removes all of them.

        Returns:
            One ItemResult per bitmap that was attempted.

        Raises:
            AdapterError: If the domain's disks cannot be listed.
        """
        results: list[ItemResult] = []

        for disk_path in self._hypervisor.list_disks(domain).values():
            try:
                bitmaps = self._disk_image.list_bitmaps(disk_path)
            except AdapterError as e:
                logger.warning("Error reading bitmaps of %s on %s: %s", disk_path, domain, e)
                continue

            if not bitmaps:
                logger.info("No bitmaps found for %s on domain %s", disk_path, domain)
                continue

            for bitmap in bitmaps:
                if not _selected(bitmap, name):
                    continue

                logger.info("Removing bitmap %s from %s on %s", bitmap, disk_path, domain)
                try:
                    self._disk_image.remove_bitmap(disk_path, bitmap)
                except AdapterError as e:
                    logger.warning(
                        "Error removing bitmap %s from %s on %s: %s", bitmap, disk_path, domain, e
                    )
                    results.append(
                        ItemResult(
                            ItemKind.BITMAP,
                            domain,
                            bitmap,
                            success=False,
                            target=disk_path,
                            error=str(e),
                        )
                    )
                    continue

                results.append(
                    ItemResult(ItemKind.BITMAP, domain, bitmap, success=True, target=disk_path)
                )

        return results

    def scrub(
        self,
        domain: str,
        scrub_type: ScrubType | str,
        name: str | None = None,
    ) -> list[ItemResult]:
        """Scrub a domain according to a scrub type.

        Args:
            domain: Domain to scrub.
            scrub_type: What to remove.
            name: Restrict removal to one checkpoint/bitmap name. Ignored
                for ScrubType.ALL.

        Returns:
            Per-item results, checkpoints first.

        Raises:
            InvalidScrubTypeError: If scrub_type is unknown.
            ScrubError: If checkpoints or disks cannot be listed.
        """
        kind = ScrubType.parse(scrub_type)
        if kind == ScrubType.ALL:
            name = None

        logger.info("Scrubbing domain: %s", domain)

        results: list[ItemResult] = []
        try:
            if kind in (ScrubType.CHECKPOINT, ScrubType.BOTH, ScrubType.ALL):
                results.extend(self.cleanup_checkpoints(domain, name))
            if kind in (ScrubType.BITMAP, ScrubType.BOTH, ScrubType.ALL):
                results.extend(self.cleanup_bitmaps(domain, name))
        except AdapterError as e:
            msg = f"Scrubbing {domain} failed: {e}"
            raise ScrubError(msg) from e

        return results
