# Rev 0.2.0

# taskgraph – logging setup (Rev 0.2.0)
from __future__ import annotations
import logging, os, sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Dict

try:
    # Optional: pipe Qt messages into Python logging if Qt exists
    from PySide6.QtCore import qInstallMessageHandler, QtMsgType
    def _qt_handler(msg_type, context, message):
        lvl = {
            QtMsgType.QtDebugMsg: logging.DEBUG,
            QtMsgType.QtInfoMsg: logging.INFO,
            QtMsgType.QtWarningMsg: logging.WARNING,
            QtMsgType.QtCriticalMsg: logging.ERROR,
            QtMsgType.QtFatalMsg: logging.CRITICAL,
        }.get(msg_type, logging.INFO)
        logging.getLogger(f"{LOGGER_ROOT}.qt").log(lvl, message)
except ImportError:
    qInstallMessageHandler = None  # PySide6 not available at import time

APP_NAME = "taskgraph"
LOGGER_ROOT = "taskgraph"
FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
DATEFMT = "%Y-%m-%d %H:%M:%S"

# marks handlers we own so a second setup_logging() replaces them
_OWNED = "_taskgraph_handler"


def get_logger(name: str) -> logging.Logger:
    """Named logger under the taskgraph namespace."""
    if name == LOGGER_ROOT or name.startswith(LOGGER_ROOT + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{LOGGER_ROOT}.{name}")


def _state_dir(app: str = APP_NAME) -> Path:
    # read at call time so tests and wrappers can point XDG_STATE_HOME elsewhere
    base = os.environ.get("XDG_STATE_HOME", os.path.expanduser("~/.local/state"))
    d = Path(base) / app / "logs"
    d.mkdir(parents=True, exist_ok=True)
    return d


def _level(name: str, default: int = logging.INFO) -> int:
    value = getattr(logging, name.strip().upper(), None)
    return value if isinstance(value, int) else default


def parse_level_overrides(text: str) -> Dict[str, int]:
    """'DB=DEBUG,GanttService=WARNING' -> {'taskgraph.DB': 10, 'taskgraph.GanttService': 30}"""
    out: Dict[str, int] = {}
    for part in text.split(","):
        if "=" not in part:
            continue
        name, lvl = part.split("=", 1)
        if name.strip():
            out[get_logger(name.strip()).name] = _level(lvl)
    return out


def _own(handler: logging.Handler) -> logging.Handler:
    setattr(handler, _OWNED, True)
    handler.setFormatter(logging.Formatter(FORMAT, DATEFMT))
    return handler


def setup_logging(app_name: str = APP_NAME, *, console: bool = True) -> Path:
    """
    Configure the root logger once per process (repeat calls replace our handlers).

    Env:
      TASKGRAPH_LOG_LEVEL    DEBUG/INFO/WARNING/ERROR, default INFO
      TASKGRAPH_LOG_LEVELS   per-logger overrides, e.g. "DB=DEBUG,DependencyService=WARNING"
    """
    level_name = os.environ.get("TASKGRAPH_LOG_LEVEL", "INFO").upper()
    level = _level(level_name)
    logfile = _state_dir(app_name) / f"{app_name}.log"

    root = logging.getLogger()
    root.setLevel(level)
    for h in [h for h in root.handlers if getattr(h, _OWNED, False)]:
        root.removeHandler(h)
        h.close()

    # File: rotate at 5MB, keep 7 backups; handlers pass everything, loggers filter
    fh = _own(RotatingFileHandler(logfile, maxBytes=5_000_000, backupCount=7, encoding="utf-8"))
    root.addHandler(fh)

    if console:
        ch = _own(logging.StreamHandler(sys.stdout))
        root.addHandler(ch)

    for name, lvl in parse_level_overrides(os.environ.get("TASKGRAPH_LOG_LEVELS", "")).items():
        logging.getLogger(name).setLevel(lvl)

    # Uncaught exceptions → log as ERROR
    def _excepthook(exctype, value, tb):
        get_logger("unhandled").error("Uncaught exception", exc_info=(exctype, value, tb))
        sys.__excepthook__(exctype, value, tb)
    sys.excepthook = _excepthook

    if qInstallMessageHandler is not None:
        qInstallMessageHandler(_qt_handler)

    get_logger("logging").info("Logging initialized at %s; file: %s", level_name, logfile)
    return logfile
