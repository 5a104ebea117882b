"""
Provider adapters with mocked HTTP: request shape, parsing, soft-fail rules.

requests.get is patched where settlement_engine.providers.http looks it up.
"""
from __future__ import annotations

from dataclasses import replace
from unittest.mock import MagicMock, patch

import pytest
import requests

from settlement_engine.core.errors import ProviderUnavailableError
from settlement_engine.providers.aggregators.coingecko import CoinGeckoPriceProvider
from settlement_engine.providers.aggregators.cryptocompare import CryptoComparePriceProvider
from settlement_engine.providers.base import PriceProvider, ProviderName, RetryPolicy
from settlement_engine.providers.cex.binance import BinancePriceProvider, binance_pair
from settlement_engine.providers.cex.coinbase import CoinbasePriceProvider
from settlement_engine.providers.cex.kraken import KrakenPriceProvider, kraken_pair
from settlement_engine.providers.settings import get_provider_config

HTTP_GET = "settlement_engine.providers.http.requests.get"

_FAST_RETRY = RetryPolicy(max_retries=2, min_delay_s=0.0, max_delay_s=0.0)


def _fast(name: ProviderName):
    return replace(get_provider_config(name), retry=_FAST_RETRY)


def _resp(payload, status=200):
    resp = MagicMock()
    resp.status_code = status
    resp.json.return_value = payload
    return resp


class TestProtocol:
    @pytest.mark.parametrize(
        "cls",
        [CoinGeckoPriceProvider, KrakenPriceProvider, CryptoComparePriceProvider, CoinbasePriceProvider, BinancePriceProvider],
    )
    def test_adapters_satisfy_protocol(self, cls):
        assert isinstance(cls(), PriceProvider)


class TestCoinGecko:
    @patch(HTTP_GET)
    def test_parses_price_by_lowercase_id(self, mock_get):
        mock_get.return_value = _resp({"ethereum": {"usd": 3150.25}})
        price = CoinGeckoPriceProvider(_fast(ProviderName.COINGECKO)).fetch_price("Ethereum")
        assert price == 3150.25
        _, kwargs = mock_get.call_args
        assert kwargs["params"] == {"ids": "ethereum", "vs_currencies": "usd"}
        assert kwargs["timeout"] == 30.0
        assert "x-cg-demo-api-key" not in kwargs["headers"]

    @patch(HTTP_GET)
    def test_api_key_headers(self, mock_get):
        mock_get.return_value = _resp({"bitcoin": {"usd": 60000}})
        CoinGeckoPriceProvider(_fast(ProviderName.COINGECKO)).fetch_price("bitcoin", api_key="k1")
        headers = mock_get.call_args.kwargs["headers"]
        assert headers["x-cg-demo-api-key"] == "k1"
        assert headers["X-CG-API-KEY"] == "k1"

    @patch(HTTP_GET)
    def test_missing_id_is_none(self, mock_get):
        mock_get.return_value = _resp({})
        assert CoinGeckoPriceProvider(_fast(ProviderName.COINGECKO)).fetch_price("nope") is None


class TestKraken:
    def test_pair_remaps(self):
        assert kraken_pair("btc") == "XBTUSD"
        assert kraken_pair("DOGE") == "XDGUSD"
        assert kraken_pair("ETH") == "ETHUSD"

    @patch(HTTP_GET)
    def test_last_trade_price(self, mock_get):
        mock_get.return_value = _resp({"error": [], "result": {"XXBTZUSD": {"c": ["64000.1", "0.01"]}}})
        assert KrakenPriceProvider(_fast(ProviderName.KRAKEN)).fetch_price("BTC") == 64000.1
        assert mock_get.call_args.kwargs["params"] == {"pair": "XBTUSD"}

    @patch(HTTP_GET)
    def test_error_list_is_soft_fail(self, mock_get):
        mock_get.return_value = _resp({"error": ["EQuery:Unknown asset pair"], "result": {}})
        assert KrakenPriceProvider(_fast(ProviderName.KRAKEN)).fetch_price("ZZZ") is None
        assert mock_get.call_count == 1


class TestCryptoCompare:
    @patch(HTTP_GET)
    def test_price_and_auth_header(self, mock_get):
        mock_get.return_value = _resp({"USD": 2.5})
        price = CryptoComparePriceProvider(_fast(ProviderName.CRYPTOCOMPARE)).fetch_price("matic", api_key="abc")
        assert price == 2.5
        kwargs = mock_get.call_args.kwargs
        assert kwargs["params"] == {"fsym": "MATIC", "tsyms": "USD"}
        assert kwargs["headers"]["authorization"] == "Apikey abc"


class TestCoinbase:
    @patch(HTTP_GET)
    def test_exchange_rates_usd(self, mock_get):
        mock_get.return_value = _resp({"data": {"currency": "ETH", "rates": {"USD": "3001.5", "EUR": "2800"}}})
        assert CoinbasePriceProvider(_fast(ProviderName.COINBASE)).fetch_price("eth") == 3001.5
        assert mock_get.call_args.kwargs["params"] == {"currency": "ETH"}

    @patch(HTTP_GET)
    def test_zero_rate_is_none(self, mock_get):
        mock_get.return_value = _resp({"data": {"rates": {"USD": "0"}}})
        assert CoinbasePriceProvider(_fast(ProviderName.COINBASE)).fetch_price("ETH") is None


class TestBinance:
    def test_pair_rules(self):
        assert binance_pair("eth") == "ETHUSDT"
        assert binance_pair("BTCUSDC") == "BTCUSDC"
        assert binance_pair("BUSD") == "BUSD"

    @patch(HTTP_GET)
    def test_ticker_price_and_key_header(self, mock_get):
        mock_get.return_value = _resp({"symbol": "BNBUSDT", "price": "580.12"})
        price = BinancePriceProvider(_fast(ProviderName.BINANCE)).fetch_price("BNB", api_key="bk")
        assert price == 580.12
        kwargs = mock_get.call_args.kwargs
        assert kwargs["params"] == {"symbol": "BNBUSDT"}
        assert kwargs["headers"]["X-MBX-APIKEY"] == "bk"
        assert kwargs["timeout"] == 10.0


class TestHttpFailures:
    @patch(HTTP_GET)
    def test_5xx_retried_then_succeeds(self, mock_get):
        mock_get.side_effect = [_resp({}, status=502), _resp({"USD": 10.0})]
        assert CryptoComparePriceProvider(_fast(ProviderName.CRYPTOCOMPARE)).fetch_price("X") == 10.0
        assert mock_get.call_count == 2

    @patch(HTTP_GET)
    def test_retries_exhausted_raise_provider_unavailable(self, mock_get):
        mock_get.side_effect = requests.ConnectionError("connection reset")
        with pytest.raises(ProviderUnavailableError) as exc_info:
            KrakenPriceProvider(_fast(ProviderName.KRAKEN)).fetch_price("ETH")
        assert exc_info.value.provider == "kraken"
        assert isinstance(exc_info.value.__cause__, requests.ConnectionError)
        assert mock_get.call_count == 3  # 1 + max_retries

    @patch(HTTP_GET)
    def test_4xx_not_retried(self, mock_get):
        mock_get.return_value = _resp({}, status=404)
        with pytest.raises(ProviderUnavailableError):
            CoinbasePriceProvider(_fast(ProviderName.COINBASE)).fetch_price("NOPE")
        assert mock_get.call_count == 1

    @patch(HTTP_GET)
    def test_malformed_json_raises_without_retry(self, mock_get):
        resp = _resp(None)
        resp.json.side_effect = ValueError("Expecting value")
        mock_get.return_value = resp
        with pytest.raises(ProviderUnavailableError):
            BinancePriceProvider(_fast(ProviderName.BINANCE)).fetch_price("ETH")
        assert mock_get.call_count == 1
