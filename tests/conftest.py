from __future__ import annotations

import pytest

from icetop.model import Registry


class FakeSurface:
    def __init__(self, width: int = 120, height: int = 40):
        self.size = (width, height)
        self.started = True
        self.suspended = False
        self.suspends = 0
        self.resumes = 0
        self.frames: list = []

    @property
    def visible(self) -> bool:
        return self.started and not self.suspended

    def start(self):
        self.started = True

    def stop(self):
        self.started = False

    def suspend(self):
        self.suspended = True
        self.suspends += 1

    def resume(self):
        self.suspended = False
        self.resumes += 1

    def show(self, renderable):
        self.frames.append(renderable)


class Clock:
    def __init__(self, now: float = 100.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


def add_host(registry: Registry, host_id: int, name: str | None = None,
             max_jobs: int = 4, no_remote: bool = False, **extra: str):
    attrs = {
        "Name": name or f"host{host_id}",
        "MaxJobs": str(max_jobs),
        "NoRemote": "true" if no_remote else "false",
    }
    attrs.update(extra)
    registry.update_host(host_id, attrs)
    return registry.find_host(host_id)


@pytest.fixture
def clock():
    return Clock()


@pytest.fixture
def registry(clock):
    return Registry(clock=clock)


@pytest.fixture
def surface():
    return FakeSurface()
