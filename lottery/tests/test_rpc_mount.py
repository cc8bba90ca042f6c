"""
HTTP mount for the lottery: REST routes plus the JSON-RPC endpoint, exercised
through FastAPI's TestClient against a local network.
"""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from lottery.adapters.rpc_mount import mount_lottery_routes


@pytest.fixture
def client(net):
    app = FastAPI()
    mount_lottery_routes(app, net.lottery)
    net.fund("alice")
    net.fund("bob")
    return TestClient(app)


def rpc(client, method, params=None, req_id=1):
    body = {"jsonrpc": "2.0", "id": req_id, "method": method, "params": params or []}
    r = client.post("/lottery/rpc", json=body)
    assert r.status_code == 200
    return r.json()


def test_routes_are_mounted(net):
    app = FastAPI()
    mount_lottery_routes(app, net.lottery, prefix="/games/raffle")
    paths = set(app.openapi()["paths"])
    assert {"/games/raffle/status", "/games/raffle/rpc", "/games/raffle/enter"} <= paths
    assert TestClient(app).get("/games/raffle/status").status_code == 200


def test_status(client, net):
    r = client.get("/lottery/status")
    assert r.status_code == 200
    body = r.json()
    assert body["state"] == "open"
    assert body["entrance_fee"] == net.lottery.entrance_fee
    assert body["recent_winner"] is None


def test_enter_and_read_players(client, net):
    fee = net.lottery.entrance_fee
    r = client.post("/lottery/enter", json={"caller": "alice", "amount": fee})
    assert r.status_code == 200
    assert r.json() == {"accepted": True, "caller": "alice", "number_of_players": 1}

    assert client.get("/lottery/players/0").json() == {"index": 0, "player": "alice"}
    assert client.get("/lottery/players/1").status_code == 404


def test_domain_errors_map_to_4xx_with_payload(client, net):
    fee = net.lottery.entrance_fee

    r = client.post("/lottery/enter", json={"caller": "alice", "amount": fee - 1})
    assert r.status_code == 400
    assert r.json()["detail"]["error"] == "InsufficientPayment"
    assert r.json()["detail"]["required"] == fee

    r = client.post("/lottery/enter", json={"caller": "pauper", "amount": fee})
    assert r.status_code == 400
    assert r.json()["detail"]["error"] == "InsufficientBalance"

    r = client.post("/lottery/enter", json={"caller": "alice"})
    assert r.status_code == 422

    r = client.post("/lottery/upkeep")
    assert r.status_code == 409
    detail = r.json()["detail"]
    assert detail["error"] == "UpkeepNotNeeded"
    assert (detail["balance"], detail["participant_count"], detail["state"]) == (0, 0, "open")


def test_upkeep_flow(client, net):
    fee = net.lottery.entrance_fee
    client.post("/lottery/enter", json={"caller": "alice", "amount": fee})
    client.post("/lottery/enter", json={"caller": "bob", "amount": fee})

    assert client.get("/lottery/upkeep").json()["upkeep_needed"] is False
    net.advance_past_interval()
    check = client.get("/lottery/upkeep", params={"perform_data": "0xbeef"}).json()
    assert check == {"upkeep_needed": True, "perform_data": "0xbeef"}

    r = client.post("/lottery/upkeep", json={"perform_data": "0xbeef"})
    assert r.status_code == 200
    assert r.json() == {"request_id": 1, "state": "resolving"}

    r = client.post("/lottery/enter", json={"caller": "alice", "amount": fee})
    assert r.status_code == 409
    assert r.json()["detail"]["error"] == "RoundNotOpen"

    assert client.get("/lottery/upkeep", params={"perform_data": "zz"}).status_code == 422


def test_jsonrpc_methods(client, net):
    fee = net.lottery.entrance_fee

    res = rpc(client, "lottery.enter", [{"caller": "bob", "amount": str(fee)}], req_id=9)
    assert res["id"] == 9
    assert res["result"]["number_of_players"] == 1

    assert rpc(client, "lottery.getPlayer", {"index": 0})["result"]["player"] == "bob"
    assert rpc(client, "lottery.getStatus")["result"]["balance"] == fee
    assert rpc(client, "lottery.checkUpkeep")["result"] == {
        "upkeep_needed": False,
        "perform_data": "0x",
    }


def test_jsonrpc_errors(client, net):
    assert rpc(client, "lottery.nope")["error"]["code"] == -32601
    assert rpc(client, "lottery.getPlayer", [{"index": -1}])["error"]["code"] == -32602
    assert rpc(client, "lottery.getPlayer", [{"index": 3}])["error"]["code"] == -32602
    assert rpc(client, "lottery.checkUpkeep", [{"perform_data": "0xz"}])["error"]["code"] == -32602
    assert rpc(client, "lottery.getStatus", [1, 2])["error"]["code"] == -32602

    err = rpc(client, "lottery.performUpkeep")["error"]
    assert err["code"] == -32000
    assert err["data"]["error"] == "UpkeepNotNeeded"

    r = client.post("/lottery/rpc", json={"jsonrpc": "2.0", "id": 1})
    assert r.json()["error"]["code"] == -32600
