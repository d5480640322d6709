"""Bundled data files for vmsnap."""
