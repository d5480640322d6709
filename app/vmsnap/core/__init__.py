"""Core lifecycle, consistency and orchestration logic for vmsnap."""
