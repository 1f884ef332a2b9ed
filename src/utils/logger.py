"""
Logging utilities for the Atomica engine and its scripts.

- ``configure_logging`` / ``get_logger``: single-line console logging for
  the engine (``atomica.*`` loggers)
- ``GameLogger``: one JSON line per finished game, for benchmarks
- ``MetricsTracker``: rolling statistics over recent games
"""
from typing import Dict, Any, Optional, List
from pathlib import Path
from collections import defaultdict, deque
from datetime import datetime
import json
import logging
import time
import numpy as np

ROOT_LOGGER_NAME = "atomica"
LOG_FORMAT = "%(asctime)s | %(levelname)-7s | %(name)s | %(message)s"
DATE_FORMAT = "%H:%M:%S"


def configure_logging(level: int = logging.INFO, log_file: Optional[str] = None) -> None:
    """
    Configure the ``atomica`` logger hierarchy.

    Args:
        level: Log level for all engine loggers
        log_file: Optional file to write the log to instead of stderr
    """
    if log_file is not None:
        handler: logging.Handler = logging.FileHandler(log_file)
    else:
        handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))

    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)
    root.propagate = False


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Return a logger below the ``atomica`` namespace.

    Module names such as ``atomica.engine`` are used as they are; anything
    else is nested under ``atomica``. No handler is installed here, so the
    engine stays quiet until a script calls :func:`configure_logging`.
    """
    if not name:
        return logging.getLogger(ROOT_LOGGER_NAME)
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def convert_to_serializable(obj):
    """Convert numpy types to Python types for JSON serialization."""
    if isinstance(obj, np.integer):
        return int(obj)
    if isinstance(obj, np.floating):
        return float(obj)
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    if isinstance(obj, dict):
        return {k: convert_to_serializable(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [convert_to_serializable(i) for i in obj]
    return obj


class GameLogger:
    """
    Appends one JSON record per game to ``<log_dir>/<name>_<timestamp>.jsonl``.
    """

    def __init__(self, log_dir: str, name: str = "games"):
        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)

        self.name = name
        self.start_time = time.time()

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        self.log_file = self.log_dir / f"{name}_{timestamp}.jsonl"

        self.history: Dict[str, List[float]] = defaultdict(list)
        self.games = 0

    def log_game(self, stats: Dict[str, Any]) -> None:
        """Record the statistics of a finished game."""
        self.games += 1
        record = convert_to_serializable({
            'game': self.games,
            'time': time.time() - self.start_time,
            **stats,
        })

        for key, value in stats.items():
            if isinstance(value, (int, float, np.integer, np.floating)) and not isinstance(value, bool):
                self.history[key].append(float(value))

        with open(self.log_file, 'a') as f:
            f.write(json.dumps(record) + '\n')

    def save_summary(self) -> Path:
        """Write mean/std/min/max of every numeric statistic next to the log."""
        summary = {
            'name': self.name,
            'games': self.games,
            'total_time': time.time() - self.start_time,
            'metrics': {
                key: {
                    'mean': float(np.mean(values)),
                    'std': float(np.std(values)),
                    'min': float(np.min(values)),
                    'max': float(np.max(values)),
                }
                for key, values in self.history.items() if values
            },
        }
        summary_file = self.log_dir / f"{self.name}_summary.json"
        with open(summary_file, 'w') as f:
            json.dump(summary, f, indent=2)
        return summary_file


class MetricsTracker:
    """Rolling statistics over the last ``window_size`` values of each metric."""

    def __init__(self, window_size: int = 100):
        self.window_size = window_size
        self.metrics: Dict[str, deque] = {}

    def add(self, name: str, value: float) -> None:
        if name not in self.metrics:
            self.metrics[name] = deque(maxlen=self.window_size)
        self.metrics[name].append(value)

    def get_summary(self, name: str) -> Dict[str, float]:
        values = list(self.metrics.get(name, ()))
        if not values:
            return {'mean': 0.0, 'std': 0.0, 'min': 0.0, 'max': 0.0, 'last': 0.0}
        return {
            'mean': float(np.mean(values)),
            'std': float(np.std(values)),
            'min': float(np.min(values)),
            'max': float(np.max(values)),
            'last': float(values[-1]),
        }

    def get_all_summaries(self) -> Dict[str, Dict[str, float]]:
        return {name: self.get_summary(name) for name in self.metrics}

    def reset(self) -> None:
        self.metrics.clear()
