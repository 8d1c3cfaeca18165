from __future__ import annotations

import unittest
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
import sys

import requests

sys.path.insert(0, str(Path(__file__).resolve().parents[2]))
sys.path.insert(0, str(Path(__file__).resolve().parent))

from fakes import FakeResponse, FakeSession, render_text  # noqa: E402
from panel_core.collectors.modules import ModuleSource, collect  # noqa: E402
from panel_core.datasets import COMPLIANCE_MODULES, DORMANT_MODULES  # noqa: E402
from panel_core.errors import DecodeError  # noqa: E402
from panel_core.models import MODULE_STATUSES, ModuleRecord, decode_modules_payload  # noqa: E402
from panel_core.panels.modules import count_text, module_tiles, render, status_badge  # noqa: E402

ENDPOINT = "http://localhost:8000/api/dormant"

API_MODULES = [
    {"title": "Safe Deposit Dormancy", "count": "12", "status": "urgent", "statusText": "Escalated"},
    {"title": "Sleeping Beauty Accounts", "count": "3", "status": "critical", "statusText": "Now"},
]


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


def _fallback(raw: list[dict]) -> list[ModuleRecord]:
    return decode_modules_payload({"modules": raw})


def _source(session: FakeSession, raw=DORMANT_MODULES, **kwargs) -> ModuleSource:
    return ModuleSource(
        key="dormant",
        title="Dormant Analyser Dashboard",
        fallback=_fallback(raw),
        session=session,
        **kwargs,
    )


class DecodeTests(unittest.TestCase):
    def test_decodes_wire_payload(self):
        modules = decode_modules_payload({"modules": API_MODULES})
        self.assertEqual(modules[0], ModuleRecord("Safe Deposit Dormancy", "12", "urgent", "Escalated"))
        self.assertEqual(modules[1].to_dict(), API_MODULES[1])

    def test_rejects_unknown_status(self):
        bad = [dict(API_MODULES[0], status="archived")]
        with self.assertRaises(DecodeError) as ctx:
            decode_modules_payload({"modules": bad})
        self.assertIn("archived", str(ctx.exception))

    def test_rejects_missing_modules_key(self):
        with self.assertRaises(DecodeError):
            decode_modules_payload({"items": []})

    def test_rejects_non_list_modules(self):
        with self.assertRaises(DecodeError):
            decode_modules_payload({"modules": "nope"})

    def test_rejects_missing_status_text(self):
        entry = {"title": "x", "count": "1", "status": "pending"}
        with self.assertRaises(DecodeError):
            decode_modules_payload({"modules": [entry]})

    def test_record_constructor_guards_status(self):
        with self.assertRaises(DecodeError):
            ModuleRecord("x", "1", "done", "Done")

    def test_builtin_datasets_are_valid(self):
        self.assertEqual(len(_fallback(COMPLIANCE_MODULES)), 11)
        self.assertEqual(len(_fallback(DORMANT_MODULES)), 10)


class ModuleSourceTests(unittest.TestCase):
    def test_disconnected_never_fetches_and_uses_fallback(self):
        session = FakeSession()
        source = ModuleSource(
            key="compliance",
            title="Compliance Analyser Dashboard",
            fallback=_fallback(COMPLIANCE_MODULES),
            session=session,
        )
        self.assertFalse(source.refetch())
        self.assertEqual(session.calls, [])
        self.assertEqual(source.state, "disconnected")
        self.assertIsNone(source.data)

        data = collect(source)
        self.assertEqual(len(data.items), 11)
        self.assertEqual(data.items, COMPLIANCE_MODULES)
        self.assertIn(
            {"title": "Record Retention Compliance", "count": "98%", "status": "complete", "statusText": "Compliant"},
            data.items,
        )
        self.assertEqual(data.meta["source"], "fallback")

    def test_connect_requires_non_empty_endpoint(self):
        session = FakeSession()
        source = _source(session)
        self.assertFalse(source.connect("   "))
        self.assertEqual(source.state, "disconnected")
        self.assertEqual(session.calls, [])

    def test_connect_uses_api_modules(self):
        session = FakeSession({ENDPOINT: FakeResponse({"modules": API_MODULES})})
        source = _source(session)
        self.assertTrue(source.connect(ENDPOINT))
        self.assertEqual(source.state, "connected")
        self.assertIsNone(source.error)
        data = collect(source)
        self.assertEqual(data.items, API_MODULES)
        self.assertEqual(data.meta["source"], "api")
        self.assertEqual(data.status, "ok")

    def test_server_error_keeps_fallback_and_reports(self):
        session = FakeSession({ENDPOINT: FakeResponse({"detail": "boom"}, status_code=500)})
        source = _source(session)
        source.connect(ENDPOINT)
        self.assertEqual(source.state, "errored")
        self.assertIn("500", source.error)
        data = collect(source)
        self.assertEqual(data.items, DORMANT_MODULES)
        self.assertEqual(data.status, "warn")
        self.assertTrue(data.errors)

    def test_network_failure_keeps_fallback(self):
        session = FakeSession({ENDPOINT: requests.ConnectionError("connection refused")})
        source = _source(session)
        source.connect(ENDPOINT)
        self.assertEqual(source.state, "errored")
        self.assertEqual(collect(source).items, DORMANT_MODULES)

    def test_malformed_payload_is_a_decode_failure(self):
        session = FakeSession({ENDPOINT: FakeResponse({"modules": [{"title": "x"}]})})
        source = _source(session)
        source.connect(ENDPOINT)
        self.assertEqual(source.state, "errored")
        self.assertIsNone(source.data)
        self.assertEqual(collect(source).items, DORMANT_MODULES)

    def test_invalid_json_body_is_a_decode_failure(self):
        session = FakeSession({ENDPOINT: FakeResponse(invalid_json=True)})
        source = _source(session)
        source.connect(ENDPOINT)
        self.assertEqual(source.state, "errored")

    def test_failed_refetch_keeps_cached_data(self):
        responses = iter(
            [
                FakeResponse({"modules": API_MODULES}),
                FakeResponse({"detail": "down"}, status_code=503),
            ]
        )
        session = FakeSession({ENDPOINT: lambda: next(responses)})
        source = _source(session)
        source.connect(ENDPOINT)
        self.assertTrue(source.refetch())
        self.assertEqual(source.state, "errored")
        self.assertEqual([m.to_dict() for m in source.modules], API_MODULES)

    def test_refetch_repeats_same_request(self):
        session = FakeSession({ENDPOINT: FakeResponse({"modules": API_MODULES})})
        source = _source(session)
        source.connect(ENDPOINT)
        source.refetch()
        self.assertEqual(session.calls, [("GET", ENDPOINT, None), ("GET", ENDPOINT, None)])
        self.assertEqual(source.endpoint, ENDPOINT)

    def test_superseded_response_is_dropped(self):
        newer = [dict(API_MODULES[0], count="99")]
        session = FakeSession()
        source = _source(session)
        calls = {"n": 0}

        def respond():
            calls["n"] += 1
            if calls["n"] == 1:
                # a second refresh is issued and completes while this one is in flight
                self.assertTrue(source.refetch())
                return FakeResponse({"modules": API_MODULES})
            return FakeResponse({"modules": newer})

        session.routes[ENDPOINT] = respond
        source.connect(ENDPOINT)
        self.assertEqual([m.to_dict() for m in source.modules], newer)
        self.assertFalse(source.is_loading)
        self.assertEqual(source.state, "connected")

    def test_disconnect_discards_data_and_in_flight_response(self):
        session = FakeSession()
        source = _source(session)

        def respond():
            source.disconnect()
            return FakeResponse({"modules": API_MODULES})

        session.routes[ENDPOINT] = respond
        source.connect(ENDPOINT)
        self.assertEqual(source.state, "disconnected")
        self.assertIsNone(source.data)
        self.assertEqual(collect(source).items, DORMANT_MODULES)

    def test_disconnect_after_connect_returns_to_fallback(self):
        session = FakeSession({ENDPOINT: FakeResponse({"modules": API_MODULES})})
        source = _source(session)
        source.connect(ENDPOINT)
        source.disconnect()
        self.assertEqual(source.state, "disconnected")
        self.assertEqual(collect(source).items, DORMANT_MODULES)
        self.assertFalse(source.refetch())

    def test_staleness_window(self):
        clock = FakeClock()
        session = FakeSession({ENDPOINT: FakeResponse({"modules": API_MODULES})})
        source = _source(session, clock=clock, stale_seconds=300)
        self.assertTrue(source.is_stale())
        source.connect(ENDPOINT)
        self.assertFalse(source.is_stale())
        clock.now += 299
        self.assertFalse(source.is_stale())
        self.assertFalse(source.refetch_if_stale())
        clock.now += 1
        self.assertTrue(source.is_stale())
        self.assertTrue(source.refetch_if_stale())
        self.assertEqual(len(session.calls), 2)

    def test_errored_source_is_not_refetched_when_stale(self):
        clock = FakeClock()
        session = FakeSession({ENDPOINT: FakeResponse({"detail": "down"}, status_code=503)})
        source = _source(session, clock=clock, stale_seconds=300)
        source.connect(ENDPOINT)
        self.assertEqual(source.state, "errored")
        self.assertTrue(source.is_stale())
        for _ in range(3):
            self.assertFalse(source.refetch_if_stale())
        self.assertEqual(len(session.calls), 1)

        self.assertTrue(source.refetch())
        self.assertEqual(len(session.calls), 2)

    def test_failed_refetch_after_success_is_not_retried(self):
        clock = FakeClock()
        responses = iter(
            [
                FakeResponse({"modules": API_MODULES}),
                FakeResponse({"detail": "down"}, status_code=503),
            ]
        )
        session = FakeSession({ENDPOINT: lambda: next(responses)})
        source = _source(session, clock=clock, stale_seconds=300)
        source.connect(ENDPOINT)
        clock.now += 300
        self.assertTrue(source.refetch_if_stale())
        self.assertEqual(source.state, "errored")
        clock.now += 600
        self.assertFalse(source.refetch_if_stale())
        self.assertEqual(len(session.calls), 2)

    def test_refetch_async_runs_on_executor(self):
        session = FakeSession({ENDPOINT: FakeResponse({"modules": API_MODULES})})
        source = _source(session)
        source.enabled = True
        source.endpoint = ENDPOINT
        with ThreadPoolExecutor(max_workers=1) as executor:
            self.assertTrue(source.refetch_async(executor).result(timeout=5))
        self.assertEqual(source.state, "connected")


class DetailFetchTests(unittest.TestCase):
    def test_detail_url_encodes_title(self):
        source = _source(FakeSession(), endpoint=ENDPOINT)
        self.assertEqual(
            source.detail_url("High Value Dormant (≥25K AED)"),
            ENDPOINT + "/details/High%20Value%20Dormant%20(%E2%89%A525K%20AED)",
        )

    def test_fetch_details_when_connected(self):
        session = FakeSession({ENDPOINT: FakeResponse({"modules": API_MODULES})})
        source = _source(session)
        source.connect(ENDPOINT)
        detail_url = source.detail_url("Safe Deposit Dormancy")
        session.routes[detail_url] = FakeResponse({"accounts": [1, 2]})
        self.assertEqual(source.fetch_details("Safe Deposit Dormancy"), {"accounts": [1, 2]})
        self.assertEqual(session.calls[-1], ("GET", detail_url, None))

    def test_fetch_details_failure_is_logged_not_raised(self):
        session = FakeSession({ENDPOINT: FakeResponse({"modules": API_MODULES})})
        source = _source(session)
        source.connect(ENDPOINT)
        session.routes[source.detail_url("Safe Deposit Dormancy")] = requests.ConnectionError("reset")
        with self.assertLogs("panel_core.collectors.modules", level="WARNING") as logs:
            self.assertIsNone(source.fetch_details("Safe Deposit Dormancy"))
        self.assertIn("Failed to fetch detailed data", logs.output[0])

    def test_fetch_details_without_api_only_logs(self):
        session = FakeSession()
        source = _source(session)
        with self.assertLogs("panel_core.collectors.modules", level="INFO") as logs:
            self.assertIsNone(source.fetch_details("Safe Deposit Dormancy"))
        self.assertEqual(session.calls, [])
        self.assertIn("Opening detailed view for: Safe Deposit Dormancy", logs.output[0])


class ModulePanelTests(unittest.TestCase):
    def test_count_colour_by_status(self):
        self.assertEqual(count_text({"count": "1", "status": "complete"}).style, "bold green")
        self.assertEqual(count_text({"count": "1", "status": "flagged"}).style, "bold cyan")
        for status in ("pending", "urgent", "critical"):
            self.assertEqual(count_text({"count": "1", "status": status}).style, "bold yellow")

    def test_badge_shows_status_text(self):
        badge = status_badge({"status": "pending", "statusText": "Due Soon"})
        self.assertEqual(badge.plain.strip(), "Due Soon")

    def test_every_status_renders(self):
        items = [
            {"title": f"Module {status}", "count": "1", "status": status, "statusText": status.title()}
            for status in MODULE_STATUSES
        ]
        source = _source(FakeSession(), raw=items)
        output = render_text(render(collect(source)))
        for status in MODULE_STATUSES:
            self.assertIn(f"Module {status}", output)

    def test_one_tile_per_module(self):
        self.assertEqual(len(module_tiles(COMPLIANCE_MODULES)), 11)

    def test_fallback_panel_lists_all_tiles(self):
        source = ModuleSource(
            key="compliance",
            title="Compliance Analyser Dashboard",
            fallback=_fallback(COMPLIANCE_MODULES),
            session=FakeSession(),
        )
        output = render_text(render(collect(source)))
        self.assertIn("Record Retention Compliance", output)
        self.assertIn("98%", output)
        self.assertIn("Expected API response format", output)

    def test_error_banner_when_fetch_fails(self):
        session = FakeSession({ENDPOINT: FakeResponse({}, status_code=502)})
        source = _source(session)
        source.connect(ENDPOINT)
        output = render_text(render(collect(source)))
        self.assertIn("Failed to connect to API", output)
        self.assertIn("Connection Error", output)
        self.assertIn("Safe Deposit Dormancy", output)

    def test_narrow_layout_renders(self):
        source = _source(FakeSession())
        output = render_text(render(collect(source), "narrow"), width=80)
        self.assertIn("Dormant to Active Transitions", output)


if __name__ == "__main__":
    unittest.main()
