"""League sync orchestration."""

from .orchestrator import LeagueSyncer

__all__ = ["LeagueSyncer"]
