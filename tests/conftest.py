"""Shared fixtures for wslreclaim tests."""

import subprocess
import time

import pytest

from wslreclaim.models import SizeEntry

MB = 1024
GB = 1024 * 1024


class FakeDu:
    """In-memory disk usage query.

    tree maps a directory to its (child path, size in KB) pairs. Like du, each
    call returns the children followed by the directory itself.
    """

    def __init__(self, tree, delays=None, failing=None, broken=None):
        self.tree = tree
        self.delays = delays or {}
        self.failing = failing or set()
        self.broken = broken or set()
        self.calls = []

    def __call__(self, path, excludes):
        self.calls.append(path)
        if path in self.delays:
            time.sleep(self.delays[path])
        if path in self.failing:
            raise PermissionError(f"Permission denied: {path}")
        if path in self.broken:
            raise RuntimeError(f"query crashed on {path}")
        children = self.tree.get(path, [])
        entries = [SizeEntry(size_kb=kb, path=p) for p, kb in children]
        entries.append(SizeEntry(size_kb=sum(kb for _, kb in children), path=path))
        return entries


class FakeRunner:
    """Command runner returning canned output keyed by executable name.

    An output is a (stdout, returncode) pair or a callable taking the command.
    """

    def __init__(self, outputs=None, commands=None):
        self.outputs = outputs or {}
        self.commands = commands or set()
        self.calls = []

    def capture(self, cmd):
        self.calls.append(cmd)
        output = self.outputs.get(cmd[0], ("", 0))
        stdout, returncode = output(cmd) if callable(output) else output
        return subprocess.CompletedProcess(cmd, returncode, stdout=stdout, stderr="")

    def has_command(self, name):
        return name in self.commands


@pytest.fixture
def fake_du():
    return FakeDu


@pytest.fixture
def fake_runner():
    return FakeRunner
