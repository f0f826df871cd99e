"""
Scheduler monitor events
========================
Typed events consumed from the cluster feed, and the decoder for the NDJSON
records the monitor bridge emits, one object per line:

    {"type": "JobAssignedClient", "jobId": 12, "clientId": 3, "filename": "a.c"}
    {"type": "RemoteJobBegin", "jobId": 12, "hostId": 7}
    {"type": "HostStats", "hostId": 7, "statmsg": "Name:build7\\nMaxJobs:8\\n"}
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Union

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LocalJobBegin:
    job_id: int
    host_id: int
    filename: str = ""


@dataclass(frozen=True)
class LocalJobDone:
    job_id: int


@dataclass(frozen=True)
class RemoteJobBegin:
    job_id: int
    host_id: int


@dataclass(frozen=True)
class RemoteJobDone:
    job_id: int


@dataclass(frozen=True)
class JobAssignedClient:
    job_id: int
    client_id: int
    filename: str = ""


@dataclass(frozen=True)
class HostStats:
    host_id: int
    attributes: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class FeedEnd:
    pass


Event = Union[
    LocalJobBegin,
    LocalJobDone,
    RemoteJobBegin,
    RemoteJobDone,
    JobAssignedClient,
    HostStats,
    FeedEnd,
]


def parse_stats(statmsg: str) -> dict[str, str]:
    """Decode ``Key:Value`` lines; lines without a key are skipped."""
    attrs: dict[str, str] = {}
    for line in statmsg.splitlines():
        key, sep, value = line.partition(":")
        key = key.strip()
        if not sep or not key:
            continue
        attrs[key] = value.strip()
    return attrs


def _attributes(data: dict[str, Any]) -> dict[str, str]:
    raw = data.get("attributes")
    if isinstance(raw, dict):
        return {str(k): str(v) for k, v in raw.items() if str(k)}
    statmsg = data.get("statmsg")
    if isinstance(statmsg, str):
        return parse_stats(statmsg)
    return {}


def parse_event(data: dict[str, Any]) -> Event | None:
    """Build an event from one decoded record, or ``None`` if unusable."""
    kind = data.get("type", "")
    try:
        if kind == "LocalJobBegin":
            return LocalJobBegin(int(data["jobId"]), int(data["hostId"]),
                                 str(data.get("filename") or ""))
        if kind == "LocalJobDone":
            return LocalJobDone(int(data["jobId"]))
        if kind == "RemoteJobBegin":
            return RemoteJobBegin(int(data["jobId"]), int(data["hostId"]))
        if kind == "RemoteJobDone":
            return RemoteJobDone(int(data["jobId"]))
        if kind == "JobAssignedClient":
            return JobAssignedClient(int(data["jobId"]), int(data["clientId"]),
                                     str(data.get("filename") or ""))
        if kind == "HostStats":
            return HostStats(int(data["hostId"]), _attributes(data))
        if kind == "FeedEnd":
            return FeedEnd()
    except (KeyError, TypeError, ValueError) as exc:
        logger.warning("Malformed %s event: %s", kind, exc)
        return None

    logger.info("Ignoring unknown event type %r", kind)
    return None
