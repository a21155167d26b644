import asyncio
import unittest

from src.application.services.asset_catalog import AssetCatalog
from src.application.services.market_dashboard import MarketDashboard
from src.application.services.selection_controller import SelectionController
from src.domain.entities.asset import CurrencyCode
from src.domain.entities.fetch_state import Error, Idle, Loading, Success
from src.domain.entities.market_data import Selection
from src.domain.exceptions import ProviderError, UnknownAssetError
from tests.fakes import SNAPSHOT, FakeMarketDataProvider, points


class TestMarketDashboard(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.provider = FakeMarketDataProvider()
        self.catalog = AssetCatalog.from_ids(["bitcoin", "ethereum", "ripple", "litecoin"])
        self.selection = SelectionController(Selection("bitcoin", CurrencyCode.USD))
        self.dashboard = MarketDashboard(self.catalog, self.provider, self.selection)
        self.views = []
        self.dashboard.subscribe(self.views.append)

    async def asyncTearDown(self):
        await self.dashboard.settle()
        self.dashboard.close()

    async def test_initial_view_is_idle_with_full_catalog(self):
        view = self.dashboard.view

        self.assertEqual(view.snapshot_state, Idle())
        self.assertEqual(view.history_state, Idle())
        self.assertEqual([a.id for a in view.filtered_assets], self.catalog.ids())
        self.assertEqual(view.selection, Selection("bitcoin", CurrencyCode.USD))

    async def test_start_loads_snapshot_and_default_history(self):
        self.provider.history_outcomes["bitcoin"] = [points(100.0, 101.0, 102.0)]

        self.dashboard.start()
        self.assertEqual(self.dashboard.view.snapshot_state, Loading())
        self.assertEqual(self.dashboard.view.history_state, Loading())
        await self.dashboard.settle()

        view = self.dashboard.view
        self.assertEqual(view.snapshot_state, Success(SNAPSHOT))
        self.assertIsInstance(view.history_state, Success)
        series = view.history_state.value
        self.assertEqual(series.values, [100.0, 101.0, 102.0])
        self.assertEqual(series.label, "Bitcoin (USD)")
        self.assertEqual(self.provider.snapshot_calls, [(self.catalog.ids(), CurrencyCode.USD)])
        self.assertEqual(self.provider.history_calls, [("bitcoin", CurrencyCode.USD, 7)])
        self.assertEqual(view.generation, 1)

    async def test_late_result_of_superseded_selection_is_never_observed(self):
        self.provider.history_gates["ethereum"] = asyncio.Event()
        self.provider.history_outcomes["ethereum"] = [points(1.0)]
        self.provider.history_outcomes["ripple"] = [points(2.0, 3.0)]

        self.assertEqual(self.dashboard.select_asset("ethereum"), 1)
        self.assertEqual(self.dashboard.select_asset("ripple"), 2)
        await asyncio.sleep(0)
        await asyncio.sleep(0)
        self.assertEqual(self.dashboard.view.history_state.value.values, [2.0, 3.0])

        self.provider.history_gates["ethereum"].set()
        await self.dashboard.settle()

        history = self.dashboard.view.history_state
        self.assertEqual(history.value.values, [2.0, 3.0])
        self.assertEqual(history.value.label, "Ripple (USD)")
        observed = [
            v.history_state.value.label for v in self.views if isinstance(v.history_state, Success)
        ]
        self.assertNotIn("Ethereum (USD)", observed)

    async def test_failed_history_then_reselect_recovers(self):
        self.provider.history_outcomes["ethereum"] = [
            ProviderError("/coins/ethereum/market_chart returned HTTP 429"),
            points(5.0, 6.0),
        ]

        self.dashboard.select_asset("ethereum")
        await self.dashboard.settle()
        self.assertEqual(
            self.dashboard.view.history_state,
            Error("/coins/ethereum/market_chart returned HTTP 429"),
        )

        self.dashboard.select_asset("ethereum")
        await self.dashboard.settle()

        history = self.dashboard.view.history_state
        self.assertIsInstance(history, Success)
        self.assertEqual(history.value.values, [5.0, 6.0])
        self.assertFalse(hasattr(history, "message"))

    async def test_snapshot_failure_leaves_history_untouched(self):
        self.dashboard.select_asset("bitcoin")
        await self.dashboard.settle()
        history_before = self.dashboard.view.history_state

        self.provider.snapshot_outcomes = [ProviderError("timeout")]
        await self.dashboard.reload_snapshot()

        self.assertEqual(self.dashboard.view.snapshot_state, Error("timeout"))
        self.assertEqual(self.dashboard.view.history_state, history_before)

    async def test_history_failure_leaves_snapshot_untouched(self):
        await self.dashboard.reload_snapshot()
        self.provider.history_outcomes["litecoin"] = [ProviderError("HTTP 500")]

        self.dashboard.select_asset("litecoin")
        await self.dashboard.settle()

        self.assertEqual(self.dashboard.view.history_state, Error("HTTP 500"))
        self.assertEqual(self.dashboard.view.snapshot_state, Success(SNAPSHOT))

    async def test_change_currency_refetches_both_concerns(self):
        generation = self.dashboard.change_currency(CurrencyCode.PLN)
        await self.dashboard.settle()

        self.assertEqual(generation, 1)
        self.assertEqual(self.dashboard.view.selection, Selection("bitcoin", CurrencyCode.PLN))
        self.assertEqual(self.provider.snapshot_calls[-1][1], CurrencyCode.PLN)
        self.assertEqual(self.provider.history_calls[-1], ("bitcoin", CurrencyCode.PLN, 7))
        self.assertEqual(self.dashboard.view.history_state.value.label, "Bitcoin (PLN)")

    async def test_select_unknown_asset_raises_without_side_effects(self):
        with self.assertRaises(UnknownAssetError):
            self.dashboard.select_asset("dogecoin")

        self.assertEqual(self.selection.generation, 0)
        self.assertEqual(self.provider.history_calls, [])

    async def test_select_normalizes_asset_id(self):
        self.dashboard.select_asset("  Ethereum ")
        await self.dashboard.settle()

        self.assertEqual(self.dashboard.view.selection.asset_id, "ethereum")

    async def test_search_updates_filtered_assets_and_publishes(self):
        result = self.dashboard.search("coin")

        self.assertEqual([a.id for a in result], ["bitcoin", "litecoin"])
        self.assertEqual([a.id for a in self.views[-1].filtered_assets], ["bitcoin", "litecoin"])

        self.dashboard.search("nothing-matches")
        self.assertEqual(len(self.dashboard.view.filtered_assets), 4)

    async def test_view_is_published_after_every_transition(self):
        self.dashboard.select_asset("ripple")
        await self.dashboard.settle()

        statuses = [v.history_state.status for v in self.views]
        self.assertEqual(statuses, ["loading", "success"])

    async def test_custom_history_window(self):
        dashboard = MarketDashboard(
            self.catalog, self.provider, SelectionController(Selection("ripple", CurrencyCode.EUR)),
            history_days=30,
        )
        dashboard.start()
        await dashboard.settle()
        dashboard.close()

        self.assertEqual(self.provider.history_calls[-1], ("ripple", CurrencyCode.EUR, 30))

    async def test_rejects_non_positive_history_window(self):
        with self.assertRaises(ValueError):
            MarketDashboard(self.catalog, self.provider, self.selection, history_days=0)

    async def test_raising_subscriber_does_not_block_fetch_or_other_subscribers(self):
        failures = []

        def broken(view):
            if not failures:
                failures.append(view)
                raise RuntimeError("subscriber bug")

        dashboard = MarketDashboard(
            self.catalog, self.provider, SelectionController(Selection("bitcoin", CurrencyCode.USD))
        )
        received = []
        dashboard.subscribe(broken)
        dashboard.subscribe(received.append)

        self.assertEqual(dashboard.select_asset("ethereum"), 1)
        await dashboard.settle()
        dashboard.close()

        self.assertEqual(len(failures), 1)
        self.assertIsInstance(dashboard.view.history_state, Success)
        self.assertEqual(self.provider.history_calls, [("ethereum", CurrencyCode.USD, 7)])
        self.assertEqual([v.history_state.status for v in received], ["loading", "success"])

    async def test_validating_controller_rejects_unknown_asset_before_any_change(self):
        selection = SelectionController(
            Selection("bitcoin", CurrencyCode.USD), validate_asset=self.catalog.get
        )
        dashboard = MarketDashboard(self.catalog, self.provider, selection)
        dashboard.start()
        await dashboard.settle()
        history_before = dashboard.view.history_state

        with self.assertRaises(UnknownAssetError):
            selection.select("dogecoin", CurrencyCode.USD)
        dashboard.close()

        self.assertEqual(selection.selection, Selection("bitcoin", CurrencyCode.USD))
        self.assertEqual(selection.generation, 1)
        self.assertEqual(dashboard.view.history_state, history_before)

    async def test_unvalidated_unknown_selection_ends_in_error_state(self):
        with self.assertLogs("src.application.services.fetch_state_machine", level="ERROR"):
            generation = self.selection.select("dogecoin", CurrencyCode.USD)
            await self.dashboard.settle()

        self.assertEqual(generation, 1)
        state = self.dashboard.view.history_state
        self.assertIsInstance(state, Error)
        self.assertIn("dogecoin", state.message)
        self.assertEqual(self.provider.history_calls, [])


if __name__ == "__main__":
    unittest.main()
