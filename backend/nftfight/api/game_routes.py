"""
游戏账本API路由

每个合约调用/查询对应一个路由。
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List
from nftfight.api.websocket_routes import get_websocket_manager
from nftfight.core.clock import get_clock
from nftfight.core.database import get_db
from nftfight.core.errors import GameError, NotFound
from nftfight.core.utils import to_wei
from nftfight.services.ledger_service import LedgerService
from nftfight.schemas.game_schemas import (
    GameResponse, GameStatus, NftInfo, EliminationInfo, PurchaseRequest,
    PurchaseResponse, VoteRequest, VoteReceipt, ResolveResponse, ClaimRequest,
    ClaimResponse
)

router = APIRouter()

def get_ledger_service(
    db: Session = Depends(get_db),
    clock=Depends(get_clock)
) -> LedgerService:
    """为每个请求创建账本服务"""
    return LedgerService(db, clock, get_websocket_manager())

def _http_error(e: GameError) -> HTTPException:
    if isinstance(e, NotFound):
        return HTTPException(status_code=404, detail=e.message)
    return HTTPException(status_code=400, detail=str(e))

@router.post("/", response_model=GameResponse)
async def deploy_game(ledger: LedgerService = Depends(get_ledger_service)):
    """部署新游戏"""
    return await ledger.deploy()

@router.get("/", response_model=List[GameResponse])
async def list_games(
    skip: int = 0,
    limit: int = 10,
    ledger: LedgerService = Depends(get_ledger_service)
):
    """获取游戏列表"""
    return await ledger.list_games(skip=skip, limit=limit)

@router.get("/{game_id}", response_model=GameStatus)
async def get_game_status(
    game_id: int,
    ledger: LedgerService = Depends(get_ledger_service)
):
    """获取游戏状态"""
    status = await ledger.get_game_status(game_id)
    if not status:
        raise HTTPException(status_code=404, detail="游戏不存在")
    return status

@router.post("/{game_id}/purchase", response_model=PurchaseResponse)
async def purchase_nft(
    game_id: int,
    request: PurchaseRequest,
    ledger: LedgerService = Depends(get_ledger_service)
):
    """购买NFT"""
    try:
        payment = to_wei(request.value)
        return await ledger.purchase_nft(game_id, request.caller, payment)
    except GameError as e:
        raise _http_error(e)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

@router.post("/{game_id}/vote", response_model=VoteReceipt)
async def vote(
    game_id: int,
    request: VoteRequest,
    ledger: LedgerService = Depends(get_ledger_service)
):
    """投票淘汰一个幸存NFT"""
    try:
        return await ledger.vote(game_id, request.caller, request.survivor_index, request.token_id)
    except GameError as e:
        raise _http_error(e)

@router.post("/{game_id}/epoch/resolve", response_model=ResolveResponse)
async def resolve_epoch(
    game_id: int,
    ledger: LedgerService = Depends(get_ledger_service)
):
    """结算已结束的纪元"""
    try:
        return await ledger.resolve_epoch(game_id)
    except GameError as e:
        raise _http_error(e)

@router.post("/{game_id}/claim", response_model=ClaimResponse)
async def claim_eth(
    game_id: int,
    request: ClaimRequest,
    ledger: LedgerService = Depends(get_ledger_service)
):
    """最后幸存者领取奖池"""
    try:
        return await ledger.claim_eth(game_id, request.caller)
    except GameError as e:
        raise _http_error(e)

@router.get("/{game_id}/total-nfts")
async def total_nfts(game_id: int, ledger: LedgerService = Depends(get_ledger_service)):
    try:
        return {"total_nfts": await ledger.total_nfts(game_id)}
    except GameError as e:
        raise _http_error(e)

@router.get("/{game_id}/total-eth")
async def total_eth(game_id: int, ledger: LedgerService = Depends(get_ledger_service)):
    try:
        return {"total_eth": await ledger.total_eth(game_id)}
    except GameError as e:
        raise _http_error(e)

@router.get("/{game_id}/nft-id")
async def last_minted_id(game_id: int, ledger: LedgerService = Depends(get_ledger_service)):
    """最近铸造的NFT编号"""
    try:
        return {"nft_id": await ledger.last_minted_id(game_id)}
    except GameError as e:
        raise _http_error(e)

@router.get("/{game_id}/purchased/{token_id}")
async def purchased_nft(game_id: int, token_id: int, ledger: LedgerService = Depends(get_ledger_service)):
    """NFT的购买者"""
    try:
        return {"token_id": token_id, "owner": await ledger.purchased_nft_owner(game_id, token_id)}
    except GameError as e:
        raise _http_error(e)

@router.get("/{game_id}/survivors", response_model=List[NftInfo])
async def list_survivors(game_id: int, ledger: LedgerService = Depends(get_ledger_service)):
    try:
        return await ledger.list_survivors(game_id)
    except GameError as e:
        raise _http_error(e)

@router.get("/{game_id}/survivors/{index}")
async def surviving_nft(game_id: int, index: int, ledger: LedgerService = Depends(get_ledger_service)):
    """按位置获取幸存NFT"""
    try:
        return {"index": index, "token_id": await ledger.surviving_nft(game_id, index)}
    except GameError as e:
        raise _http_error(e)

@router.get("/{game_id}/epoch")
async def current_epoch(game_id: int, ledger: LedgerService = Depends(get_ledger_service)):
    try:
        return {"epoch": await ledger.current_epoch(game_id)}
    except GameError as e:
        raise _http_error(e)

@router.get("/{game_id}/votes/{epoch}/{address}")
async def has_voted(game_id: int, epoch: int, address: str, ledger: LedgerService = Depends(get_ledger_service)):
    """地址在指定纪元是否已投票"""
    try:
        return {"epoch": epoch, "address": address, "voted": await ledger.has_voted(game_id, epoch, address)}
    except GameError as e:
        raise _http_error(e)

@router.get("/{game_id}/tally/{epoch}/{token_id}")
async def vote_tally(game_id: int, epoch: int, token_id: int, ledger: LedgerService = Depends(get_ledger_service)):
    """指定纪元某个NFT的得票数"""
    try:
        return {"epoch": epoch, "token_id": token_id, "tally": await ledger.vote_tally(game_id, epoch, token_id)}
    except GameError as e:
        raise _http_error(e)

@router.get("/{game_id}/eliminations", response_model=List[EliminationInfo])
async def list_eliminations(game_id: int, ledger: LedgerService = Depends(get_ledger_service)):
    try:
        return await ledger.list_eliminations(game_id)
    except GameError as e:
        raise _http_error(e)
