from __future__ import annotations

"""Question bank loading: local data directory or static JSON over HTTP."""

import json
import sys
import time
from pathlib import Path
from typing import Any, Callable, Dict, Optional

import httpx

from ..app.explain import trace as xtrace
from ..config.config import get_file_name
from ..errors import NetworkError


def fetch_json(
    url: str,
    *,
    retries: int = 3,
    backoff_s: float = 1.0,
    timeout_s: float = 10.0,
    client: Optional[httpx.Client] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> Any:
    """GET a JSON document, retrying with doubling backoff.

    Makes at most `retries + 1` attempts and raises NetworkError with the URL
    and last reason once they are exhausted.
    """
    attempts = 0
    delay = backoff_s
    last_reason = "unknown error"
    own_client = client is None
    http = client or httpx.Client(timeout=timeout_s, headers={"Cache-Control": "no-cache"})
    try:
        while True:
            attempts += 1
            try:
                response = http.get(url, timeout=timeout_s)
                response.raise_for_status()
                return response.json()
            except httpx.HTTPStatusError as e:
                last_reason = f"HTTP {e.response.status_code}"
            except httpx.HTTPError as e:
                last_reason = f"{type(e).__name__}: {e}"
            except ValueError as e:
                last_reason = f"invalid JSON: {e}"
            xtrace("fetch_failed", {"url": url, "attempt": attempts, "reason": last_reason})
            if attempts > retries:
                raise NetworkError(url, last_reason, attempts)
            sleep(delay)
            delay *= 2
    finally:
        if own_client:
            http.close()


def read_json_file(path: Path) -> Any:
    try:
        with Path(path).open("r", encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError:
        raise NetworkError(str(path), "file not found")
    except (OSError, ValueError) as e:
        raise NetworkError(str(path), f"{type(e).__name__}: {e}")


class BankLoader:
    """Resolve a subject to its bank document and return the raw JSON."""

    def __init__(self, cfg: Dict[str, Any], client: Optional[httpx.Client] = None,
                 sleep: Callable[[float], None] = time.sleep) -> None:
        self.cfg = cfg
        net = cfg.get("network", {})
        self.base_url: Optional[str] = net.get("base_url")
        self.data_dir = Path(net.get("data_dir", "./data"))
        self.retries = int(net.get("retries", 3))
        self.backoff_s = float(net.get("backoff_s", 1.0))
        self.timeout_s = float(net.get("timeout_s", 10.0))
        self._client = client
        self._sleep = sleep

    def location(self, subject: str) -> str:
        file_name = get_file_name(self.cfg, subject)
        if self.base_url:
            return f"{self.base_url.rstrip('/')}/{file_name}"
        return str(self.data_dir / file_name)

    def load(self, subject: str) -> Any:
        loc = self.location(subject)
        xtrace("bank_load", {"subject": subject, "location": loc})
        if self.base_url:
            return fetch_json(
                loc,
                retries=self.retries,
                backoff_s=self.backoff_s,
                timeout_s=self.timeout_s,
                client=self._client,
                sleep=self._sleep,
            )
        data = read_json_file(Path(loc))
        if data is None:
            print(f"[WARN] Bank file {loc} is empty", file=sys.stderr)
        return data
