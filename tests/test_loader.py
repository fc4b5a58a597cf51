import json
import tempfile
import unittest
from pathlib import Path

import httpx

from upscquiz.bank.loader import BankLoader, fetch_json
from upscquiz.config.config import load_config, validate_config
from upscquiz.errors import NetworkError


def scripted_client(statuses):
    """Client whose transport replies with the given status codes in order."""
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(str(request.url))
        status = statuses[min(len(calls), len(statuses)) - 1]
        if status == 200:
            return httpx.Response(200, json={"questions": [{"id": "a"}]})
        return httpx.Response(status, text="nope")

    return httpx.Client(transport=httpx.MockTransport(handler)), calls


class FetchJsonTests(unittest.TestCase):
    def test_retries_then_succeeds(self) -> None:
        client, calls = scripted_client([500, 503, 200])
        delays = []
        data = fetch_json("https://bank.test/polity.json", client=client, sleep=delays.append)
        self.assertEqual(data, {"questions": [{"id": "a"}]})
        self.assertEqual(len(calls), 3)
        self.assertEqual(delays, [1.0, 2.0])

    def test_exhausted_retries_raise_network_error(self) -> None:
        client, calls = scripted_client([404])
        delays = []
        with self.assertRaises(NetworkError) as ctx:
            fetch_json("https://bank.test/missing.json", retries=3, backoff_s=0.5,
                       client=client, sleep=delays.append)
        self.assertEqual(len(calls), 4)
        self.assertEqual(delays, [0.5, 1.0, 2.0])
        self.assertEqual(ctx.exception.attempts, 4)
        self.assertIn("https://bank.test/missing.json", str(ctx.exception))
        self.assertIn("HTTP 404", str(ctx.exception))

    def test_invalid_json_counts_as_failure(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>")

        client = httpx.Client(transport=httpx.MockTransport(handler))
        with self.assertRaises(NetworkError) as ctx:
            fetch_json("https://bank.test/x.json", retries=0, client=client, sleep=lambda s: None)
        self.assertIn("invalid JSON", ctx.exception.reason)


class BankLoaderTests(unittest.TestCase):
    def setUp(self) -> None:
        self.cfg = validate_config(load_config())

    def test_local_data_dir(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            self.cfg["network"]["data_dir"] = d
            Path(d, "polity.json").write_text(json.dumps([{"id": "p1"}]), encoding="utf-8")
            loader = BankLoader(self.cfg)
            self.assertEqual(loader.load("polity"), [{"id": "p1"}])
            with self.assertRaises(NetworkError):
                loader.load("modern")

    def test_remote_base_url(self) -> None:
        self.cfg["network"]["base_url"] = "https://bank.test/data/"
        client, calls = scripted_client([200])
        loader = BankLoader(self.cfg, client=client, sleep=lambda s: None)
        self.assertEqual(loader.location("Reasoning"), "https://bank.test/data/csat_reasoning.json")
        loader.load("unknown subject")
        self.assertEqual(calls, ["https://bank.test/data/mix_test.json"])


if __name__ == "__main__":
    unittest.main()
