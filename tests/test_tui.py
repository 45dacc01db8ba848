import asyncio
import socket

import pytest

from udping import AddressParseError
from udping.tui import ProbeTable, UdpingApp, parse_targets


def test_parse_targets():
    assert parse_targets("127.0.0.1:1, 127.0.0.1:2 127.0.0.1:1") == [
        ("127.0.0.1", 1),
        ("127.0.0.1", 2),
    ]
    assert parse_targets("  ") == []
    with pytest.raises(AddressParseError):
        parse_targets("127.0.0.1")


def test_monitor_fills_table(echo_server):
    async def scenario():
        app = UdpingApp(targets=[echo_server], count=2, timeout=1.0)
        async with app.run_test() as pilot:
            await pilot.pause(0.2)
            await app.workers.wait_for_complete()
            await pilot.pause()
            table = app.query_one(ProbeTable)
            key = f"{echo_server[0]}:{echo_server[1]}"
            return (
                len(table.columns),
                table.get_cell(key, "success"),
                table.get_cell(key, "loss"),
                table.get_cell(key, "status"),
            )

    columns, success, loss, status = asyncio.run(scenario())
    assert loss == "0.0"
    assert columns == 8
    assert success == "2"
    assert status == "done"


def test_address_families_run_side_by_side(responder_factory):
    slow = responder_factory("silent").address
    fast = responder_factory("echo", socket.AF_INET6).address
    fast_key = f"[::1]:{fast[1]}"
    slow_key = f"{slow[0]}:{slow[1]}"

    async def scenario():
        app = UdpingApp(targets=[slow, ("::1", fast[1])], count=3, timeout=0.5)
        async with app.run_test() as pilot:
            await pilot.pause(0.6)
            table = app.query_one(ProbeTable)
            during = (
                table.get_cell(fast_key, "success"),
                table.get_cell(slow_key, "sent"),
            )
            await app.workers.wait_for_complete()
            await pilot.pause()
            after = (
                table.get_cell(fast_key, "status"),
                table.get_cell(slow_key, "loss"),
            )
            return during, after

    (fast_success, slow_sent), (fast_status, slow_loss) = asyncio.run(scenario())
    assert fast_success == "3"
    assert int(slow_sent) < 3
    assert fast_status == "done"
    assert slow_loss == "100.0"
