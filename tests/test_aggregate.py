from __future__ import annotations

from conftest import add_host
from icetop.aggregate import anonymize_filename, anonymize_name, build_snapshot


def test_capacity_excludes_no_remote_hosts(registry):
    add_host(registry, 1, max_jobs=4)
    add_host(registry, 2, max_jobs=2)
    add_host(registry, 3, max_jobs=6, no_remote=True)

    snap = build_snapshot(registry)
    assert snap.host_count == 3
    assert snap.available_servers == 2
    assert snap.total_slots == 6


def test_per_host_job_subsets(registry):
    add_host(registry, 1)
    add_host(registry, 2)
    registry.create_pending(10, client_id=1)
    registry.create_pending(11, client_id=1)
    registry.create_remote(11, host_id=2)
    registry.create_local(12, 2)

    snap = build_snapshot(registry)
    h1, h2 = snap.hosts[1], snap.hosts[2]
    assert h1.pending_jobs == 1
    assert h1.active_jobs == 1
    assert h1.jobs == {}
    assert set(h2.jobs) == {11, 12}
    assert h2.active_jobs == 1          # its own local job
    assert snap.active_jobs == 2
    assert snap.local_jobs == 1
    assert snap.pending_jobs == 1
    assert snap.active_hosts == 1
    assert snap.total_remote_jobs == 1
    assert snap.total_local_jobs == 1


def test_jobs_on_vanished_hosts(registry):
    add_host(registry, 1)
    registry.create_pending(5, client_id=9)
    registry.create_remote(5, host_id=1)
    registry.create_remote(6, host_id=8)

    snap = build_snapshot(registry)
    assert list(snap.hosts) == [1]
    assert set(snap.hosts[1].jobs) == {5}
    assert snap.active_jobs == 2
    assert snap.color_of(registry.find_job(5)) == 0


def test_color_of_uses_client_host(registry):
    host = add_host(registry, 1)
    registry.create_local(3, 1)
    snap = build_snapshot(registry)
    assert snap.color_of(registry.find_job(3)) == host.color_id


def test_snapshot_is_fresh_each_time(registry):
    add_host(registry, 1)
    first = build_snapshot(registry)
    registry.create_local(1, 1)
    second = build_snapshot(registry)
    assert first.hosts[1].jobs == {}
    assert set(second.hosts[1].jobs) == {1}


def test_anonymize(registry):
    add_host(registry, 1, name="secret-box")
    registry.create_local(1, 1, "src/payroll.cpp")
    snap = build_snapshot(registry, anonymize=True)

    name = snap.hosts[1].name
    assert "secret" not in name
    assert name == anonymize_name("secret-box")
    assert snap.filename_of(registry.find_job(1)) == anonymize_filename("src/payroll.cpp")
    assert snap.filename_of(registry.find_job(1)).endswith(".cpp")
    assert anonymize_name("") == ""
