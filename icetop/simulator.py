"""
Simulated cluster
=================
Synthetic workload for running the dashboard without a scheduler.  A seeded
generator picks one weighted action per tick; every action is expressed as
the same events the live feed delivers, so the rest of the dashboard cannot
tell the difference.
"""

from __future__ import annotations

import logging
import random
from collections import Counter
from typing import Callable

from .events import (
    HostStats,
    JobAssignedClient,
    LocalJobBegin,
    LocalJobDone,
    RemoteJobBegin,
    RemoteJobDone,
)
from .model import Host, Registry
from .reactor import Handle, Reactor
from .source import DataSource

logger = logging.getLogger(__name__)

MAX_HOSTS = 10
MAX_JOBS = 100
MAX_HOST_JOBS = 20
DEFAULT_INTERVAL = 0.02


class Simulator(DataSource):
    def __init__(
        self,
        registry: Registry,
        reactor: Reactor | None = None,
        seed: int = 0,
        interval: float = DEFAULT_INTERVAL,
        cycles: int = 0,
        on_finished: Callable[[], None] | None = None,
    ):
        super().__init__(registry)
        self.reactor = reactor
        self.random = random.Random(seed)
        self.interval = interval
        self.cycles = cycles
        self.on_finished = on_finished

        self.cycle = 0
        self.next_host_id = 1
        self.next_job_id = 1
        self.source_host = 0
        self._timer: Handle | None = None

        self.actions: list[tuple[int, Callable[[], None]]] = [
            (5, self.add_pending_job),
            (1, self.add_local_job),
            (5, self.activate_job),
            (5, self.remove_job),
            (1, self.choose_source_host),
        ]

    def net_name(self) -> str:
        return "ICECREAM"

    def scheduler_name(self) -> str:
        return "simulator"

    # -- lifecycle ----------------------------------------------------------

    def populate(self):
        for _ in range(MAX_HOSTS):
            self.add_host()

    def start(self):
        self.populate()
        if self.reactor is not None:
            self._timer = self.reactor.call_every(self.interval, self.tick)
        logger.info("Simulator started (interval %.3fs, cycles %s)",
                    self.interval, self.cycles or "unlimited")

    def stop(self):
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def tick(self):
        total = sum(weight for weight, _ in self.actions)
        r = self.random.randrange(total)
        for weight, action in self.actions:
            if r < weight:
                action()
                break
            r -= weight

        self.cycle += 1
        if self.cycles and self.cycle >= self.cycles:
            logger.info("Simulator finished after %d cycles", self.cycle)
            self.stop()
            if self.on_finished is not None:
                self.on_finished()

    # -- helpers ------------------------------------------------------------

    def _running(self) -> Counter[int]:
        return Counter(j.host_id for j in self.registry.active_jobs.values())

    def available_hosts(self, exclude: int = 0) -> list[Host]:
        running = self._running()
        return [
            h for hid, h in sorted(self.registry.hosts.items())
            if hid != exclude and running[hid] < h.max_jobs
        ]

    def source(self) -> Host | None:
        host = self.registry.find_host(self.source_host)
        if host is None:
            self.choose_source_host()
            host = self.registry.find_host(self.source_host)
        return host

    def _new_job_id(self) -> int | None:
        if len(self.registry.jobs) >= MAX_JOBS:
            return None
        job_id = self.next_job_id
        self.next_job_id += 1
        return job_id

    # -- actions ------------------------------------------------------------

    def add_host(self):
        host_id = self.next_host_id
        self.next_host_id += 1
        # Poor man's normal distribution
        max_jobs = (self.random.randrange(MAX_HOST_JOBS // 2)
                    + self.random.randrange(MAX_HOST_JOBS // 2 - 1) + 1)
        no_remote = self.random.randrange(10) == 0
        self.dispatch(HostStats(host_id, {
            "Name": f"Host {host_id}",
            "MaxJobs": str(max_jobs),
            "NoRemote": "true" if no_remote else "false",
            "Platform": "x86_64",
            "Speed": "100.000",
        }))

    def choose_source_host(self):
        ids = sorted(self.registry.hosts)
        self.source_host = self.random.choice(ids) if ids else 0

    def add_pending_job(self):
        host = self.source()
        # No point queueing work nobody can pick up.
        if host is None or not self.available_hosts():
            return
        job_id = self._new_job_id()
        if job_id is None:
            return
        self.dispatch(JobAssignedClient(job_id, host.id, f"Job_{job_id}.c"))

    def activate_job(self):
        pending = sorted(self.registry.pending_jobs)
        if not pending:
            return
        job = self.registry.find_job(self.random.choice(pending))
        hosts = self.available_hosts(exclude=job.client_id)
        if hosts:
            self.dispatch(RemoteJobBegin(job.id, self.random.choice(hosts).id))

    def add_local_job(self):
        host = self.source()
        if host is None or self._running()[host.id] >= host.max_jobs:
            return
        job_id = self._new_job_id()
        if job_id is None:
            return
        self.dispatch(LocalJobBegin(job_id, host.id, f"Job_{job_id}.c"))

    def remove_job(self):
        active = sorted(self.registry.active_jobs)
        if active:
            job = self.registry.find_job(self.random.choice(active))
            if job.is_local:
                self.dispatch(LocalJobDone(job.id))
            else:
                self.dispatch(RemoteJobDone(job.id))

        # Hand the freed slot to a waiting job
        self.activate_job()
