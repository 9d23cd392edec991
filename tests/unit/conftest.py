import os
import sys
import socket

import pytest

# Get the directory of the current conftest.py file
current_dir = os.path.dirname(os.path.abspath(__file__))

# Calculate the project root (adjust the number of ".." if needed)
project_root = os.path.abspath(os.path.join(current_dir, '../../'))

# Insert the project root at the beginning of sys.path
if project_root not in sys.path:
    sys.path.insert(0, project_root)


class MessageSink:
    """Collects the status messages of a listener."""

    def __init__(self):
        self.messages = []

    def __call__(self, message):
        self.messages.append(message)

    def contains(self, text):
        return any(text in m for m in self.messages)


@pytest.fixture
def sink():
    return MessageSink()


@pytest.fixture
def free_port():
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(('127.0.0.1', 0))
        return s.getsockname()[1]


@pytest.fixture
def no_config(monkeypatch, tmp_path):
    """Point the config file lookup to a file that does not exist."""
    monkeypatch.setenv("AUTHSERVER_CONFIG_FILE", str(tmp_path / "missing.yaml"))
    monkeypatch.delenv("AUTHSERVER_PORT", raising=False)
