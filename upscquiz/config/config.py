from __future__ import annotations

"""Configuration loading and validation.

Loads YAML configuration, applies section defaults, and validates that
enumerations and numeric limits are sane before the controller uses them.
"""

import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

ALLOWED_MODES = {"test", "learning"}
ALLOWED_PAPERS = {"gs1", "csat"}
MISTAKES_SUBJECT = "mistakes"


class ConfigError(Exception):
    pass


def _load_yaml(path: Path) -> Dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        raise ConfigError(f"Config file not found: {path}")
    except yaml.YAMLError as e:
        raise ConfigError(f"Config file {path} is not valid YAML: {e}")
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    return data


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """Load configuration from YAML or the package defaults.

    Args:
        path: Optional path to a YAML config. If None, use defaults.yml.
    """
    if path:
        return _load_yaml(Path(path))
    return _load_yaml(Path(__file__).with_name("defaults.yml"))


def _positive(section: Dict[str, Any], key: str, default: Any, cast=float) -> None:
    try:
        val = cast(section.get(key, default))
    except (TypeError, ValueError):
        val = None
    if val is None or val <= 0:
        print(f"WARNING: Invalid {key} '{section.get(key)}', using {default}.", file=sys.stderr)
        val = cast(default)
    section[key] = val


def validate_config(cfg: Dict[str, Any]) -> Dict[str, Any]:
    """Apply defaults and validate configuration values.

    Unknown enum values fall back to defaults with a warning rather than
    aborting; a config with no subjects at all is an error.
    """
    cfg.setdefault("quiz", {})
    cfg.setdefault("storage", {})
    cfg.setdefault("network", {})
    cfg.setdefault("subjects", {})

    quiz = cfg["quiz"]
    storage = cfg["storage"]
    network = cfg["network"]
    subjects = cfg["subjects"]

    quiz.setdefault("mode", "test")
    quiz.setdefault("paper", "gs1")
    quiz.setdefault("count", 10)
    quiz.setdefault("time_per_question_s", {})
    quiz["time_per_question_s"].setdefault("gs1", 72)
    quiz["time_per_question_s"].setdefault("csat", 90)
    quiz.setdefault("tick_interval_s", 0.25)
    quiz.setdefault("validate_sample", 10)

    storage.setdefault("path", "./upsc_store.json")
    storage.setdefault("namespace", "upsc_")
    storage.setdefault("quota_bytes", 5 * 1024 * 1024)
    storage.setdefault("history_cap", 50)
    storage.setdefault("mistakes_cap", 100)
    storage.setdefault("trim_history_to", 10)

    network.setdefault("data_dir", "./data")
    network.setdefault("base_url", None)
    network.setdefault("retries", 3)
    network.setdefault("backoff_s", 1.0)
    network.setdefault("timeout_s", 10.0)

    subjects.setdefault("fallback_file", "mix_test.json")
    subjects.setdefault("gs1", [])
    subjects.setdefault("csat", [])

    if quiz["mode"] not in ALLOWED_MODES:
        print(f"WARNING: Unsupported mode '{quiz['mode']}', using 'test'.", file=sys.stderr)
        quiz["mode"] = "test"
    if quiz["paper"] not in ALLOWED_PAPERS:
        print(f"WARNING: Unsupported paper '{quiz['paper']}', using 'gs1'.", file=sys.stderr)
        quiz["paper"] = "gs1"

    _positive(quiz, "count", 10, int)
    _positive(quiz, "tick_interval_s", 0.25)
    _positive(quiz, "validate_sample", 10, int)
    for paper, default in (("gs1", 72), ("csat", 90)):
        _positive(quiz["time_per_question_s"], paper, default, int)

    _positive(storage, "quota_bytes", 5 * 1024 * 1024, int)
    _positive(storage, "history_cap", 50, int)
    _positive(storage, "mistakes_cap", 100, int)
    _positive(storage, "trim_history_to", 10, int)

    try:
        network["retries"] = max(0, int(network["retries"]))
    except (TypeError, ValueError):
        network["retries"] = 3
    _positive(network, "backoff_s", 1.0)
    _positive(network, "timeout_s", 10.0)

    if not subjects["gs1"] and not subjects["csat"]:
        raise ConfigError("No subjects configured")
    for paper in ("gs1", "csat"):
        for s in subjects[paper]:
            if not isinstance(s, dict) or not s.get("id") or not s.get("file"):
                raise ConfigError(f"Subject entries need 'id' and 'file': {s!r}")
            s.setdefault("name", s["id"])
            s["id"] = str(s["id"])

    return cfg


def list_subjects(cfg: Dict[str, Any], paper: Optional[str] = None) -> List[Dict[str, Any]]:
    subjects = cfg.get("subjects", {})
    papers = [paper] if paper else ["gs1", "csat"]
    out: List[Dict[str, Any]] = []
    for p in papers:
        out.extend(dict(s, paper=p) for s in subjects.get(p, []) or [])
    return out


def find_subject(cfg: Dict[str, Any], subject: str) -> Optional[Dict[str, Any]]:
    """Match a subject by id or display name."""
    for s in list_subjects(cfg):
        if s.get("id") == subject or s.get("name") == subject:
            return s
    return None


def get_file_name(cfg: Dict[str, Any], subject: str) -> str:
    """Bank file for a subject id or name; unknown subjects get the mixed bank."""
    match = find_subject(cfg, subject)
    if match:
        return str(match["file"])
    return str(cfg.get("subjects", {}).get("fallback_file", "mix_test.json"))


def time_per_question(cfg: Dict[str, Any], paper: str) -> int:
    return int(cfg.get("quiz", {}).get("time_per_question_s", {}).get(paper, 90 if paper == "csat" else 72))
