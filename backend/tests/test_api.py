"""
HTTP接口测试：从部署、购买、投票到领取奖池的完整流程
"""

from nftfight.core.clock import SystemClock, get_clock
from main import app

from conftest import MINT_PRICE, EPOCH

OWNER = "0x0wner"
OTHER = "0x07her"
THIRD = "0x7h1rd"


def deploy(client):
    response = client.post("/api/games/")
    assert response.status_code == 200
    return response.json()["id"]


def purchase(client, game_id, caller=OWNER, value="0.05"):
    body = {"caller": caller}
    if value is not None:
        body["value"] = value
    return client.post(f"/api/games/{game_id}/purchase", json=body)


def vote(client, game_id, token_id, caller=OWNER, survivor_index=0):
    return client.post(
        f"/api/games/{game_id}/vote",
        json={"caller": caller, "survivor_index": survivor_index, "token_id": token_id},
    )


def advance(client, seconds=EPOCH):
    response = client.post("/api/clock/advance", json={"seconds": seconds})
    assert response.status_code == 200
    return response.json()["now"]


def nft_id(client, game_id):
    return client.get(f"/api/games/{game_id}/nft-id").json()["nft_id"]


def test_starts_with_100_nfts(client):
    game_id = deploy(client)
    assert client.get(f"/api/games/{game_id}/total-nfts").json()["total_nfts"] == 100
    assert client.get(f"/api/games/{game_id}/total-eth").json()["total_eth"] == 0


def test_purchase_nft(client):
    game_id = deploy(client)
    response = purchase(client, game_id)
    assert response.status_code == 200

    assert client.get(f"/api/games/{game_id}/total-eth").json()["total_eth"] == MINT_PRICE

    token_id = nft_id(client, game_id)
    assert token_id == response.json()["token_id"]
    owner = client.get(f"/api/games/{game_id}/purchased/{token_id}").json()["owner"]
    assert owner == OWNER
    assert client.get(f"/api/games/{game_id}/survivors/0").json()["token_id"] == token_id


def test_purchase_without_minimum_eth(client):
    game_id = deploy(client)

    response = purchase(client, game_id, value=None)
    assert response.status_code == 400
    assert response.json()["detail"] == "purchaseNFT__MintPriceNotMet"

    response = purchase(client, game_id, value="0.049")
    assert response.json()["detail"] == "purchaseNFT__MintPriceNotMet"
    assert client.get(f"/api/games/{game_id}/total-eth").json()["total_eth"] == 0


def test_vote_on_nft_to_burn(client):
    game_id = deploy(client)
    purchase(client, game_id)
    token_id = nft_id(client, game_id)

    advance(client)
    response = vote(client, game_id, token_id)
    assert response.status_code == 200
    assert response.json()["recorded"] is True

    epoch = client.get(f"/api/games/{game_id}/epoch").json()["epoch"]
    voted = client.get(f"/api/games/{game_id}/votes/{epoch}/{OWNER}").json()["voted"]
    assert voted is True
    tally = client.get(f"/api/games/{game_id}/tally/{epoch}/{token_id}").json()["tally"]
    assert tally == 1


def test_vote_without_nft_or_twice(client):
    game_id = deploy(client)

    response = vote(client, game_id, 0)
    assert response.status_code == 400
    assert response.json()["detail"] == "vote__IneligibleToVote"

    purchase(client, game_id)
    token_id = nft_id(client, game_id)
    advance(client)
    assert vote(client, game_id, token_id).status_code == 200

    response = vote(client, game_id, token_id)
    assert response.json()["detail"] == "vote__IneligibleToVote"


def test_vote_on_voted_out_nft(client):
    game_id = deploy(client)
    purchase(client, game_id, caller=OWNER)
    first = nft_id(client, game_id)
    purchase(client, game_id, caller=OTHER)
    purchase(client, game_id, caller=OTHER)
    purchase(client, game_id, caller=THIRD)

    advance(client)
    vote(client, game_id, first, caller=OWNER)
    advance(client)
    response = vote(client, game_id, first + 1, caller=OTHER)
    assert response.json()["eliminated"]["token_id"] == first

    response = vote(client, game_id, first, caller=OWNER)
    assert response.status_code == 400
    # 持有者唯一的NFT已被淘汰
    assert response.json()["detail"] == "vote__IneligibleToVote"

    response = vote(client, game_id, first, caller=THIRD)
    assert response.status_code == 400
    assert response.json()["detail"] == "vote__NFTAlreadyVotedOut"

    eliminations = client.get(f"/api/games/{game_id}/eliminations").json()
    assert [e["token_id"] for e in eliminations] == [first]


def test_vote_on_negative_token_id(client):
    game_id = deploy(client)
    purchase(client, game_id)
    advance(client)

    response = vote(client, game_id, -1)
    assert response.status_code == 400
    assert response.json()["detail"] == "vote__NFTAlreadyVotedOut"


def test_failed_vote_still_applies_rollover(client):
    game_id = deploy(client)
    purchase(client, game_id, caller=OWNER)
    first = nft_id(client, game_id)
    purchase(client, game_id, caller=OTHER)
    purchase(client, game_id, caller=THIRD)

    advance(client)
    vote(client, game_id, first, caller=OWNER)
    vote(client, game_id, first, caller=OTHER)
    advance(client)

    response = vote(client, game_id, first, caller=THIRD)
    assert response.json()["detail"] == "vote__NFTAlreadyVotedOut"

    survivors = client.get(f"/api/games/{game_id}/survivors").json()
    assert first not in [nft["token_id"] for nft in survivors]
    assert client.get(f"/api/games/{game_id}/epoch").json()["epoch"] == 2


def test_last_survivor_claims_eth(client):
    game_id = deploy(client)
    purchase(client, game_id)
    first = nft_id(client, game_id)
    purchase(client, game_id)
    second = nft_id(client, game_id)

    advance(client)
    vote(client, game_id, first)
    advance(client)
    response = vote(client, game_id, second)
    assert response.json()["game_over"] is True

    survivors = client.get(f"/api/games/{game_id}/survivors").json()
    assert [nft["token_id"] for nft in survivors] == [second]

    balance_before = client.get(f"/api/accounts/{OWNER}").json()["balance"]
    response = client.post(f"/api/games/{game_id}/claim", json={"caller": OWNER})
    assert response.status_code == 200
    balance_after = client.get(f"/api/accounts/{OWNER}").json()["balance"]

    assert balance_after - balance_before == 2 * MINT_PRICE

    response = client.post(f"/api/games/{game_id}/claim", json={"caller": OWNER})
    assert response.json()["detail"] == "claimEth__AlreadyClaimed"


def test_claim_before_game_over(client):
    game_id = deploy(client)
    purchase(client, game_id)

    response = client.post(f"/api/games/{game_id}/claim", json={"caller": OWNER})
    assert response.status_code == 400
    assert response.json()["detail"] == "claimEth__GameNotOver"

    status = client.get(f"/api/games/{game_id}").json()
    assert status["escrow_balance"] == MINT_PRICE
    assert status["game_over"] is False


def test_resolve_epoch_endpoint(client):
    game_id = deploy(client)
    purchase(client, game_id)

    response = client.post(f"/api/games/{game_id}/epoch/resolve")
    assert response.json()["detail"] == "epoch__NotElapsed"

    advance(client)
    response = client.post(f"/api/games/{game_id}/epoch/resolve")
    assert response.status_code == 200
    assert response.json()["current_epoch"] == 1


def test_unknown_game_and_positions(client):
    assert client.get("/api/games/999").status_code == 404
    assert client.get("/api/games/999/total-eth").status_code == 404

    game_id = deploy(client)
    assert client.get(f"/api/games/{game_id}/survivors/0").status_code == 404
    assert client.get(f"/api/games/{game_id}/purchased/5").status_code == 404


def test_list_games(client):
    first = deploy(client)
    second = deploy(client)
    games = client.get("/api/games/").json()
    assert [game["id"] for game in games] == [first, second]
    assert games[0]["mint_price"] == MINT_PRICE


def test_accounts(client):
    response = client.post("/api/accounts/", json={"address": "0xfeed", "balance": "1.5"})
    assert response.status_code == 200
    assert response.json()["balance"] == 15 * 10**17
    assert response.json()["balance_ether"] == "1.5"

    response = client.post("/api/accounts/", json={"address": "0xfeed"})
    assert response.status_code == 400


def test_clock_advance_requires_manual_clock(client):
    app.dependency_overrides[get_clock] = lambda: SystemClock()
    response = client.post("/api/clock/advance", json={"seconds": 10})
    assert response.status_code == 409
    assert client.get("/api/clock/").json()["mode"] == "system"


def test_manual_clock_endpoint(client):
    start = client.get("/api/clock/").json()
    assert start["mode"] == "manual"
    assert advance(client, 60) == start["now"] + 60


def test_websocket_connection(client):
    game_id = deploy(client)
    with client.websocket_connect(f"/api/ws/games/{game_id}") as websocket:
        assert websocket.receive_json()["type"] == "connected"

        websocket.send_json({"type": "ping", "timestamp": 1})
        assert websocket.receive_json() == {"type": "pong", "timestamp": 1}

        websocket.send_json({"type": "get_game_status"})
        message = websocket.receive_json()
        assert message["type"] == "game_status"
        assert message["status"]["total_nfts"] == 100
