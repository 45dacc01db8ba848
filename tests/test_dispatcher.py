import asyncio
import time

from udping import AsyncClient, Dispatcher, PingResult, RequestTable

A = ("127.0.0.1", 9000)
B = ("127.0.0.1", 9001)


class ScriptedEndpoint:
    """Replays scripted receive results, then idles like a quiet socket."""

    def __init__(self, script=()):
        self.script = list(script)
        self.polls = 0

    async def receive(self, timeout):
        self.polls += 1
        if self.script:
            item = self.script.pop(0)
            if isinstance(item, Exception):
                raise item
            return item
        await asyncio.sleep(timeout)
        return None


def test_routes_replies_by_source_address():
    async def scenario():
        table = RequestTable()
        loop = asyncio.get_running_loop()
        sa, sb = loop.create_future(), loop.create_future()
        table.register(A, sa)
        table.register(B, sb)
        endpoint = ScriptedEndpoint([(b"j-wy", A), (b"\x00\x01", B)])
        dispatcher = Dispatcher(endpoint, table, poll_interval=0.01)
        await asyncio.wait_for(dispatcher.run(), 1)
        assert sa.result() is True
        assert sb.result() is False
        assert table.is_empty()

    asyncio.run(scenario())


def test_reply_from_unknown_peer_leaves_pending_entry():
    async def scenario():
        table = RequestTable()
        signal = asyncio.get_running_loop().create_future()
        table.register(A, signal)
        endpoint = ScriptedEndpoint([(b"j-wy", B)])
        dispatcher = Dispatcher(endpoint, table, poll_interval=0.01)
        dispatcher.start()
        await asyncio.sleep(0.1)
        assert not signal.done()
        assert A in table
        await dispatcher.close()

    asyncio.run(scenario())


def test_idle_shutdown_within_one_poll():
    async def scenario():
        endpoint = ScriptedEndpoint()
        dispatcher = Dispatcher(endpoint, RequestTable(), poll_interval=0.05)
        dispatcher.start()
        assert dispatcher.running
        begin = time.monotonic()
        await asyncio.wait_for(dispatcher.wait_closed(), 1)
        assert time.monotonic() - begin < 0.5
        assert not dispatcher.running
        assert endpoint.polls == 1

    asyncio.run(scenario())


def test_keeps_polling_while_requests_pending():
    async def scenario():
        table = RequestTable()
        table.register(A, asyncio.get_running_loop().create_future())
        endpoint = ScriptedEndpoint()
        dispatcher = Dispatcher(endpoint, table, poll_interval=0.02)
        dispatcher.start()
        await asyncio.sleep(0.15)
        assert dispatcher.running
        assert endpoint.polls > 1

        table.unregister(A)
        await asyncio.wait_for(dispatcher.wait_closed(), 1)
        assert not dispatcher.running

    asyncio.run(scenario())


def test_stop_request_honoured_on_poll_timeout():
    async def scenario():
        table = RequestTable()
        table.register(A, asyncio.get_running_loop().create_future())
        dispatcher = Dispatcher(
            ScriptedEndpoint(), table, poll_interval=0.02, idle_shutdown=False
        )
        dispatcher.start()
        await asyncio.sleep(0.05)
        assert dispatcher.running
        dispatcher.stop()
        await asyncio.wait_for(dispatcher.wait_closed(), 1)
        assert not dispatcher.running
        assert not dispatcher.failed

    asyncio.run(scenario())


def test_socket_error_stops_for_good():
    async def scenario():
        table = RequestTable()
        signal = asyncio.get_running_loop().create_future()
        table.register(A, signal)
        dispatcher = Dispatcher(
            ScriptedEndpoint([OSError("socket gone")]), table, poll_interval=0.01
        )
        dispatcher.start()
        await asyncio.wait_for(dispatcher.wait_closed(), 1)
        assert dispatcher.failed
        assert str(dispatcher.error) == "socket gone"
        assert not signal.done()

        dispatcher.start()
        assert not dispatcher.running

    asyncio.run(scenario())


def test_socket_closed_under_running_dispatcher(echo_server):
    async def scenario():
        async with AsyncClient(
            timeout=0.3, poll_interval=0.05, idle_shutdown=False
        ) as client:
            dispatcher = client.dispatcher
            assert dispatcher.running
            client.endpoint.sock.close()
            await asyncio.wait_for(dispatcher.wait_closed(), 1)
            assert dispatcher.failed
            assert isinstance(dispatcher.error, OSError)
            assert not dispatcher.running

            result = await client.ping_once(echo_server)
            assert result is PingResult.SEND_FAILED
            assert not dispatcher.running
            assert client.requests.is_empty()

    asyncio.run(scenario())
