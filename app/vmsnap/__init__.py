"""vmsnap - Backup rotation and consistency checks for KVM domains."""

__version__ = "0.5.0"
