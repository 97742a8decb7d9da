import sys
import os

# Ensure local `src/` package is importable when running tests without installation
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
SRC_PATH = os.path.join(PROJECT_ROOT, "src")
if SRC_PATH not in sys.path:
    sys.path.insert(0, SRC_PATH)

from eventmix.handler import MixingHandler
from eventmix.utils import log_message


def _handler(verbose):
    handler = MixingHandler("mixing", verbose=verbose)
    handler.add_mixing_variable(0, [0.0, 10.0, 20.0])
    handler.add_mixing_variable(1, [0.0, 5.0])
    return handler


def test_handler_logs_initialization(capsys):
    handler = _handler(verbose=1)
    handler.find_event_category([15.0, 2.0])

    captured = capsys.readouterr()
    assert "[EventMix]" in captured.out
    assert "mixing: initialized 2 mixing variable(s), 2 categories" in captured.out


def test_handler_is_silent_by_default(capsys):
    handler = _handler(verbose=0)
    handler.find_event_category([15.0, 2.0])
    handler.find_event_category([25.0, 2.0])

    captured = capsys.readouterr()
    assert captured.out == ""


def test_rejections_logged_only_in_debug(capsys):
    handler = _handler(verbose=1)
    handler.find_event_category([25.0, 2.0])
    assert "rejected" not in capsys.readouterr().out

    handler = _handler(verbose=2)
    handler.find_event_category([25.0, -1.0])
    out = capsys.readouterr().out
    assert "event rejected" in out
    assert "0=ABOVE" in out
    assert "1=BELOW" in out


def test_log_message_levels(capsys):
    log_message("lifecycle", verbose=1)
    log_message("debug", verbose=1, level=2)
    out = capsys.readouterr().out
    assert "[EventMix] lifecycle" in out
    assert "debug" not in out
