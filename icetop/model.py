"""
Entity Registry
===============
Canonical in-memory store of compile jobs and worker hosts.

The registry is the only owner of Job and Host objects.  Everything else
holds ids and looks entities up again when it needs them; a lookup may
legitimately come back empty once the data source has removed the entity.
"""

from __future__ import annotations

import enum
import time
import zlib
from dataclasses import dataclass, field
from typing import Callable

UNASSIGNED_SLOT = -1

# Number of distinct host colours; colour id 0 is the terminal default.
HOST_COLOR_COUNT = 7


class JobClass(enum.Enum):
    PENDING = "pending"
    LOCAL = "local"
    REMOTE = "remote"


@dataclass
class Job:
    id: int
    client_id: int = 0
    host_id: int = 0
    active: bool = False
    is_local: bool = False
    filename: str = ""
    start_time: float = 0.0
    host_slot: int = UNASSIGNED_SLOT


def _parse_int(value: str | None, default: int = 0) -> int:
    if value is None:
        return default
    try:
        return int(value.strip())
    except ValueError:
        return default


def _parse_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    v = value.strip().lower()
    if v in ("true", "1", "yes"):
        return True
    if v in ("false", "0", "no"):
        return False
    return default


def color_for_name(name: str) -> int:
    """Stable colour id (1..HOST_COLOR_COUNT) for a host name."""
    return 1 + zlib.crc32(name.encode("utf-8")) % HOST_COLOR_COUNT


@dataclass
class Host:
    id: int
    attr: dict[str, str] = field(default_factory=dict)
    expanded: bool = False
    highlighted: bool = False
    current_position: int = 0
    total_in: int = 0
    total_out: int = 0
    total_local: int = 0

    @property
    def name(self) -> str:
        return self.attr.get("Name", "")

    @property
    def max_jobs(self) -> int:
        return max(0, _parse_int(self.attr.get("MaxJobs")))

    @property
    def no_remote(self) -> bool:
        return _parse_bool(self.attr.get("NoRemote"))

    @property
    def color_id(self) -> int:
        return color_for_name(self.name)


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

class Registry:
    def __init__(
        self,
        on_change: Callable[[], None] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.on_change = on_change
        self.clock = clock
        self.expand_new_hosts = False

        self._jobs: dict[int, Job] = {}
        self._hosts: dict[int, Host] = {}
        self._classes: dict[JobClass, dict[int, Job]] = {c: {} for c in JobClass}

        self.total_remote_jobs = 0
        self.total_local_jobs = 0

    def _changed(self):
        if self.on_change is not None:
            self.on_change()

    # -- read views ---------------------------------------------------------

    @property
    def jobs(self) -> dict[int, Job]:
        return self._jobs

    @property
    def hosts(self) -> dict[int, Host]:
        return self._hosts

    @property
    def pending_jobs(self) -> dict[int, Job]:
        return self._classes[JobClass.PENDING]

    @property
    def local_jobs(self) -> dict[int, Job]:
        return self._classes[JobClass.LOCAL]

    @property
    def remote_jobs(self) -> dict[int, Job]:
        return self._classes[JobClass.REMOTE]

    @property
    def active_jobs(self) -> dict[int, Job]:
        merged = dict(self.local_jobs)
        merged.update(self.remote_jobs)
        return merged

    def job_class(self, job_id: int) -> JobClass | None:
        for cls, members in self._classes.items():
            if job_id in members:
                return cls
        return None

    def find_job(self, job_id: int) -> Job | None:
        return self._jobs.get(job_id)

    def find_host(self, host_id: int) -> Host | None:
        return self._hosts.get(host_id)

    # -- jobs ---------------------------------------------------------------

    def create_job(self, job_id: int) -> Job:
        job = self._jobs.get(job_id)
        if job is None:
            job = Job(id=job_id)
            self._jobs[job_id] = job
            self._changed()
        return job

    def classify(self, job_id: int, job_class: JobClass | None):
        job = self._jobs.get(job_id)
        if job is None:
            return
        for members in self._classes.values():
            members.pop(job_id, None)

        if job_class is None:
            job.active = False
            job.is_local = False
        else:
            job.active = job_class is not JobClass.PENDING
            job.is_local = job_class is JobClass.LOCAL
            self._classes[job_class][job_id] = job
        self._changed()

    def create_pending(self, job_id: int, client_id: int, filename: str = "") -> Job:
        job = self.create_job(job_id)
        job.client_id = client_id
        job.host_id = 0
        if filename:
            job.filename = filename
        self.classify(job_id, JobClass.PENDING)
        return job

    def create_local(self, job_id: int, host_id: int, filename: str = "") -> Job:
        job = self.create_job(job_id)
        job.client_id = host_id
        job.host_id = host_id
        if filename:
            job.filename = filename
        job.start_time = self.clock()
        self.classify(job_id, JobClass.LOCAL)

        host = self.find_host(host_id)
        if host is not None:
            host.total_local += 1
        self.total_local_jobs += 1
        return job

    def create_remote(self, job_id: int, host_id: int) -> Job:
        job = self.create_job(job_id)
        job.host_id = host_id
        job.start_time = self.clock()
        self.classify(job_id, JobClass.REMOTE)

        executor = self.find_host(host_id)
        if executor is not None:
            executor.total_in += 1
        client = self.find_host(job.client_id)
        if client is not None:
            client.total_out += 1
        self.total_remote_jobs += 1
        return job

    def remove_job(self, job_id: int):
        job = self._jobs.pop(job_id, None)
        if job is None:
            return
        for members in self._classes.values():
            members.pop(job_id, None)
        self._changed()

    # -- hosts --------------------------------------------------------------

    def create_host(self, host_id: int) -> Host:
        host = self._hosts.get(host_id)
        if host is None:
            host = Host(id=host_id, expanded=self.expand_new_hosts)
            self._hosts[host_id] = host
            self._changed()
        return host

    def remove_host(self, host_id: int):
        if self._hosts.pop(host_id, None) is not None:
            self._changed()

    def update_host(self, host_id: int, attributes: dict[str, str]):
        """Apply a stats update; a missing Name means the host went away."""
        if "Name" not in attributes:
            self.remove_host(host_id)
            return
        host = self.create_host(host_id)
        host.attr.update(attributes)
        self._changed()

    def clear(self):
        self._jobs.clear()
        self._hosts.clear()
        for members in self._classes.values():
            members.clear()
        self.total_remote_jobs = 0
        self.total_local_jobs = 0
        self._changed()
