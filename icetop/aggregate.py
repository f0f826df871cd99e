"""
Aggregation Cache
=================
Per-frame projection of the registry: what each host is asking for, what
it is running, and cluster-wide totals.  Rebuilt from scratch for every
render pass and never written back to the registry.
"""

from __future__ import annotations

import hashlib
import os
from dataclasses import dataclass, field

from .model import Job, Registry


def _digest(value: str) -> str:
    return hashlib.sha1(value.encode("utf-8")).hexdigest()[:8]


def anonymize_name(name: str) -> str:
    return f"host-{_digest(name)}" if name else name


def anonymize_filename(filename: str) -> str:
    if not filename:
        return filename
    ext = os.path.splitext(filename)[1]
    return f"file-{_digest(filename)}{ext}"


@dataclass
class HostDisplayData:
    id: int = 0
    name: str = ""
    color: int = 0
    max_jobs: int = 0
    pending_jobs: int = 0
    active_jobs: int = 0
    total_in: int = 0
    total_out: int = 0
    total_local: int = 0
    no_remote: bool = False
    jobs: dict[int, Job] = field(default_factory=dict)


@dataclass
class ClusterSnapshot:
    hosts: dict[int, HostDisplayData] = field(default_factory=dict)
    all_jobs: dict[int, Job] = field(default_factory=dict)
    host_colors: dict[int, int] = field(default_factory=dict)
    host_count: int = 0
    available_servers: int = 0
    total_slots: int = 0
    active_hosts: int = 0
    active_jobs: int = 0
    local_jobs: int = 0
    pending_jobs: int = 0
    total_remote_jobs: int = 0
    total_local_jobs: int = 0
    anonymize: bool = False

    def color_of(self, job: Job) -> int:
        """Display colour of a job: its client's colour, default if gone."""
        return self.host_colors.get(job.client_id, 0)

    def filename_of(self, job: Job) -> str:
        if self.anonymize:
            return anonymize_filename(job.filename)
        return job.filename


def build_snapshot(registry: Registry, anonymize: bool = False) -> ClusterSnapshot:
    snap = ClusterSnapshot(
        host_count=len(registry.hosts),
        total_remote_jobs=registry.total_remote_jobs,
        total_local_jobs=registry.total_local_jobs,
        anonymize=anonymize,
    )

    for host_id, host in registry.hosts.items():
        name = host.name
        data = HostDisplayData(
            id=host_id,
            name=anonymize_name(name) if anonymize else name,
            color=host.color_id,
            max_jobs=host.max_jobs,
            total_in=host.total_in,
            total_out=host.total_out,
            total_local=host.total_local,
            no_remote=host.no_remote,
        )
        snap.hosts[host_id] = data
        snap.host_colors[host_id] = data.color

        if not data.no_remote:
            snap.available_servers += 1
            snap.total_slots += data.max_jobs

    used_hosts: set[int] = set()
    for job_id, job in registry.jobs.items():
        client = snap.hosts.get(job.client_id)
        if job.active:
            snap.active_jobs += 1
            if client is not None:
                client.active_jobs += 1
        else:
            snap.pending_jobs += 1
            if client is not None:
                client.pending_jobs += 1

        if job.is_local:
            snap.local_jobs += 1

        if job.host_id:
            executor = snap.hosts.get(job.host_id)
            if executor is not None:
                executor.jobs[job_id] = job
                used_hosts.add(job.host_id)

        snap.all_jobs[job_id] = job

    snap.active_hosts = len(used_hosts)
    return snap
