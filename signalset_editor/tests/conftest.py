import os
import sys

import pytest

# Ensure repo root is on sys.path for tests so `signalset_editor` imports resolve
repo_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..', '..'))
if repo_root not in sys.path:
    sys.path.insert(0, repo_root)

from signalset_editor.models import Signal, SignalFormat  # noqa: E402


RPM_TEXT = ('{"commands":[{"hdr":"7E0","freq":1,"fcm1":false,"signals":[{"id":"RPM","path":"",'
            '"fmt":{"bix":0,"len":16,"unit":"rpm"},"name":"Engine RPM"}]}]}')

RICH_TEXT = """
{"commands": [
  {"hdr": "7E0", "rax": "7E8", "cmd": {"22": "F40C"}, "freq": 0.5, "fcm1": true, "dbg": false,
   "signals": [
     {"id": "RPM", "path": "Engine", "fmt": {"bix": 0, "len": 16, "mul": 1, "div": 4, "unit": "rpm"},
      "name": "Engine speed", "suggestedMetric": "engineSpeed"},
     {"id": "LOAD", "path": "Engine", "fmt": {"bix": 16, "len": 8, "max": 100, "unit": "percent"},
      "name": "Engine load"}
   ]},
  {"hdr": "18DA10F1", "rax": "18DAF110", "eax": "", "cmd": {"22": "0101"}, "freq": 5,
   "signals": [
     {"id": "SOC", "path": "Battery", "fmt": {"bix": 4, "len": 12, "add": -40, "unit": "percent"},
      "name": "State of charge \\u00e9"}
   ]}
]}
"""


def _make_signal(signal_id, bix=None, length=None, **fmt):
    """Build a signal with the given bit range (None leaves the key out)."""
    entries = {}
    if bix is not None:
        entries['bix'] = bix
    if length is not None:
        entries['len'] = length
    entries.update(fmt)
    return Signal(id=signal_id, name=signal_id, path='', fmt=SignalFormat.from_dict(entries))


@pytest.fixture
def rpm_text():
    return RPM_TEXT


@pytest.fixture
def rich_text():
    return RICH_TEXT


@pytest.fixture
def no_user_config(monkeypatch, tmp_path):
    """Point HOME at an empty directory so no user config file is picked up."""
    monkeypatch.setenv('HOME', str(tmp_path))
    monkeypatch.delenv('LOG_LEVEL', raising=False)
    monkeypatch.delenv('SIGNALSET_ALIGN_COLUMNS', raising=False)
    return tmp_path


@pytest.fixture
def make_signal():
    return _make_signal
