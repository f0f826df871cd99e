"""
Data sources
============
Common base for the live scheduler feed and the simulator.  Both turn
their input into the same events and hand them to ``dispatch``, which is
the only place events become registry operations.
"""

from __future__ import annotations

import logging

from .events import (
    Event,
    FeedEnd,
    HostStats,
    JobAssignedClient,
    LocalJobBegin,
    LocalJobDone,
    RemoteJobBegin,
    RemoteJobDone,
)
from .model import Registry

logger = logging.getLogger(__name__)


class DataSource:
    def __init__(self, registry: Registry):
        self.registry = registry

    def net_name(self) -> str:
        return ""

    def scheduler_name(self) -> str:
        return ""

    def on_input(self, key: str) -> bool:
        """Source-specific key commands; return True if the key was used."""
        return False

    def start(self):
        pass

    def stop(self):
        pass

    def dispatch(self, event: Event):
        reg = self.registry
        if isinstance(event, LocalJobBegin):
            reg.create_local(event.job_id, event.host_id, event.filename)
        elif isinstance(event, (LocalJobDone, RemoteJobDone)):
            reg.remove_job(event.job_id)
        elif isinstance(event, RemoteJobBegin):
            reg.create_remote(event.job_id, event.host_id)
        elif isinstance(event, JobAssignedClient):
            reg.create_pending(event.job_id, event.client_id, event.filename)
        elif isinstance(event, HostStats):
            reg.update_host(event.host_id, event.attributes)
        elif isinstance(event, FeedEnd):
            pass
        else:
            logger.info("Ignoring unsupported event %r", event)
