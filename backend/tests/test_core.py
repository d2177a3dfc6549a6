import json

import pytest

from conftest import run
from nftfight.api import websocket_routes
from nftfight.core import clock as clock_module
from nftfight.core.clock import ManualClock, SystemClock, get_clock
from nftfight.core.errors import GameError, InsufficientPayment, NotFound
from nftfight.core.utils import to_wei, format_ether
from nftfight.services.websocket_service import WebSocketManager


class FakeWebSocket:
    def __init__(self, fail=False, receive_error=None):
        self.fail = fail
        self.receive_error = receive_error
        self.accepted = False
        self.sent = []

    async def accept(self):
        self.accepted = True

    async def send_text(self, text):
        if self.fail:
            raise RuntimeError("connection closed")
        self.sent.append(json.loads(text))

    async def receive_text(self):
        raise self.receive_error


def test_to_wei():
    assert to_wei("0.05") == 50_000_000_000_000_000
    assert to_wei(1) == 10**18
    assert to_wei(None) == 0
    with pytest.raises(ValueError):
        to_wei("0.0000000000000000001")
    with pytest.raises(ValueError):
        to_wei("-1")
    with pytest.raises(ValueError):
        to_wei("abc")


def test_format_ether():
    assert format_ether(0) == "0"
    assert format_ether(10**17) == "0.1"
    assert format_ether(10_000 * 10**18) == "10000"


def test_manual_clock_advances():
    clock = ManualClock(100)
    assert clock.advance(86400) == 86500
    assert clock.now() == 86500
    with pytest.raises(ValueError):
        clock.advance(-1)


def test_get_clock_uses_configured_mode(monkeypatch):
    monkeypatch.setattr(clock_module, "_clock", None)
    monkeypatch.setattr(clock_module.settings, "CLOCK_MODE", "manual")
    clock = get_clock()
    assert isinstance(clock, ManualClock)
    assert get_clock() is clock

    monkeypatch.setattr(clock_module, "_clock", None)
    monkeypatch.setattr(clock_module.settings, "CLOCK_MODE", "system")
    assert isinstance(get_clock(), SystemClock)


def test_error_code_is_string_value():
    error = InsufficientPayment()
    assert str(error) == "purchaseNFT__MintPriceNotMet"
    assert isinstance(error, GameError)
    assert NotFound("游戏不存在").message == "游戏不存在"


def test_broadcast_drops_failed_connections():
    manager = WebSocketManager()
    good, bad = FakeWebSocket(), FakeWebSocket(fail=True)
    run(manager.connect(good, 1))
    run(manager.connect(bad, 1))

    sent = run(manager.broadcast_to_game({"type": "nft_purchased", "token_id": 0}, 1))

    assert sent == 1
    assert good.accepted
    assert good.sent == [{"type": "nft_purchased", "token_id": 0}]
    assert manager.game_connections[1] == [good]
    assert run(manager.broadcast_to_game({"type": "noop"}, 2)) == 0


def test_websocket_error_releases_connection(monkeypatch):
    manager = WebSocketManager()
    monkeypatch.setattr(websocket_routes, "_manager", manager)
    websocket = FakeWebSocket(receive_error=RuntimeError("boom"))

    run(websocket_routes.websocket_game_endpoint(websocket, 1, db=None))

    assert websocket.accepted
    assert websocket.sent[0]["type"] == "connected"
    assert manager.game_connections[1] == []
