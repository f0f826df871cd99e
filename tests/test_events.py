from __future__ import annotations

from icetop.events import (
    FeedEnd,
    HostStats,
    JobAssignedClient,
    LocalJobBegin,
    LocalJobDone,
    RemoteJobBegin,
    RemoteJobDone,
    parse_event,
    parse_stats,
)


def test_parse_job_events():
    assert parse_event({"type": "LocalJobBegin", "jobId": 1, "hostId": 2, "filename": "a.c"}) \
        == LocalJobBegin(1, 2, "a.c")
    assert parse_event({"type": "LocalJobDone", "jobId": 1}) == LocalJobDone(1)
    assert parse_event({"type": "RemoteJobBegin", "jobId": "3", "hostId": 4}) == RemoteJobBegin(3, 4)
    assert parse_event({"type": "RemoteJobDone", "jobId": 3}) == RemoteJobDone(3)
    assert parse_event({"type": "JobAssignedClient", "jobId": 5, "clientId": 6}) \
        == JobAssignedClient(5, 6, "")
    assert parse_event({"type": "FeedEnd"}) == FeedEnd()


def test_parse_host_stats_attributes():
    event = parse_event({"type": "HostStats", "hostId": 3,
                         "attributes": {"Name": "b3", "MaxJobs": 8}})
    assert event == HostStats(3, {"Name": "b3", "MaxJobs": "8"})


def test_parse_host_stats_statmsg():
    event = parse_event({"type": "HostStats", "hostId": 3,
                         "statmsg": "Name:b3\nIP:10.0.0.3\ngarbage\n:novalue\nMaxJobs:8\n"})
    assert event.attributes == {"Name": "b3", "IP": "10.0.0.3", "MaxJobs": "8"}


def test_parse_stats_keeps_colons_in_values():
    assert parse_stats("Addr:fe80::1") == {"Addr": "fe80::1"}


def test_unknown_and_malformed_events():
    assert parse_event({"type": "Bogus"}) is None
    assert parse_event({}) is None
    assert parse_event({"type": "RemoteJobBegin", "jobId": 1}) is None
    assert parse_event({"type": "LocalJobDone", "jobId": "x"}) is None
