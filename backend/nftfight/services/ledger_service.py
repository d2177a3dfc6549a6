"""
淘汰游戏账本服务

生命周期：购买NFT -> 每个纪元投票淘汰一个幸存NFT -> 最后幸存者的持有者领取奖池。

每个写操作都在一个数据库事务中完成：先校验、再修改、最后提交；
任何 GameError 都会回滚会话，不留下部分修改。
投票触发的纪元结算例外：它先单独提交，之后的投票失败不会撤销结算。
"""

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from typing import List, Optional, Tuple
from nftfight.core.clock import get_clock
from nftfight.core.config import settings
from nftfight.core.errors import (
    GameError, NotFound, InsufficientPayment, SoldOut, MintingClosed,
    IneligibleVoter, VotingNotOpen, VotingClosed, TargetAlreadyEliminated,
    EpochNotElapsed, GameNotOver, NotSurvivorOwner, AlreadyClaimed
)
from nftfight.core.utils import format_ether
from nftfight.models.game import Game
from nftfight.models.nft import Nft
from nftfight.models.vote import Vote
from nftfight.models.elimination import Elimination
from nftfight.schemas.game_schemas import (
    GameResponse, GameStatus, NftInfo, EliminationInfo, PurchaseResponse,
    VoteReceipt, ResolveResponse, ClaimResponse
)
from nftfight.services.account_service import AccountService
from nftfight.services.websocket_service import WebSocketManager

FINISHED_STATUSES = ("game_over", "claimed")

class LedgerService:
    """淘汰游戏账本服务"""

    def __init__(self, db: Session, clock=None, websocket_manager: Optional[WebSocketManager] = None):
        self.db = db
        self.clock = clock or get_clock()
        self.websocket_manager = websocket_manager
        self.account_service = AccountService(db)

    # ------------------------------------------------------------------
    # 部署
    # ------------------------------------------------------------------

    async def deploy(self) -> GameResponse:
        """部署一个新的游戏实例"""
        game = Game(
            total_nft_supply=settings.TOTAL_NFT_SUPPLY,
            mint_price=settings.MINT_PRICE_WEI,
            epoch_duration=settings.EPOCH_DURATION,
            current_epoch=0,
            epoch_started_at=self.clock.now(),
            total_eth_collected=0,
            escrow_balance=0,
            minted_count=0,
            status="minting"
        )
        self.db.add(game)
        self.db.commit()
        self.db.refresh(game)

        print(f"🚀 已部署游戏 {game.id}：供应量 {game.total_nft_supply}，铸造价格 {format_ether(game.mint_price)} ETH")
        return GameResponse.model_validate(game)

    # ------------------------------------------------------------------
    # 写操作
    # ------------------------------------------------------------------

    async def purchase_nft(self, game_id: int, caller: str, payment: int) -> PurchaseResponse:
        """购买下一个编号的NFT，payment 单位为wei"""
        game = self._get_game(game_id, for_update=True)
        try:
            if payment < game.mint_price:
                raise InsufficientPayment()
            if game.status in FINISHED_STATUSES:
                raise MintingClosed()
            if game.minted_count >= game.total_nft_supply:
                raise SoldOut()

            self.account_service.debit(caller, payment)

            token_id = game.minted_count
            self.db.add(Nft(
                game_id=game.id,
                token_id=token_id,
                owner=caller,
                alive=True,
                purchase_price=payment
            ))
            game.minted_count = token_id + 1
            game.last_minted_id = token_id
            game.total_eth_collected = game.total_eth_collected + payment
            game.escrow_balance = game.escrow_balance + payment
            self.db.commit()
        except GameError:
            self.db.rollback()
            raise

        print(f"🪙 游戏 {game_id}: {caller} 购买了 NFT #{token_id}，奖池 {format_ether(game.escrow_balance)} ETH")
        await self._publish(game_id, [{
            "type": "nft_purchased",
            "game_id": game_id,
            "token_id": token_id,
            "owner": caller,
            "price": payment
        }])

        return PurchaseResponse(
            game_id=game_id,
            token_id=token_id,
            owner=caller,
            paid=payment,
            total_eth=game.total_eth_collected
        )

    async def vote(self, game_id: int, caller: str, survivor_index: int, token_id: int) -> VoteReceipt:
        """在当前纪元投票淘汰一个幸存NFT

        当前纪元窗口已结束时，先结算该纪元并单独提交，再校验和记录本次投票；
        投票失败只回滚投票本身，结算结果保留。
        如果结算使游戏结束，本次投票不再记录。
        """
        game = self._get_game(game_id, for_update=True)
        now = self.clock.now()
        was_finished = game.status in FINISHED_STATUSES
        rollover = None
        if not was_finished and self._window_elapsed(game, now):
            rollover = self._resolve(game, now)
            rollover_events = self._resolution_events(game, rollover)
            self.db.commit()
            await self._publish(game_id, rollover_events)
            game = self._get_game(game_id, for_update=True)

        try:
            if not self._owns_alive_nft(game.id, caller):
                raise IneligibleVoter()
            if game.current_epoch == 0:
                raise VotingNotOpen()
            if was_finished:
                raise VotingClosed()
        except GameError:
            self.db.rollback()
            raise

        if game.status in FINISHED_STATUSES:
            print(f"🏁 游戏 {game_id} 在第{rollover[0]}纪元结算后结束，{caller} 的投票未记录")
            return VoteReceipt(
                game_id=game_id,
                epoch=game.current_epoch,
                recorded=False,
                eliminated=rollover[1],
                game_over=True
            )

        epoch = game.current_epoch
        try:
            if self._has_voted(game.id, epoch, caller):
                raise IneligibleVoter()
            if self._get_alive_nft(game.id, token_id) is None:
                raise TargetAlreadyEliminated()

            self.db.add(Vote(
                game_id=game.id,
                epoch=epoch,
                voter=caller,
                target_token_id=token_id,
                survivor_index=survivor_index
            ))
            self.db.flush()
            tally = self._tally(game.id, epoch, token_id)
            self.db.commit()
        except IntegrityError:
            # 同一纪元的重复投票被唯一约束拦下
            self.db.rollback()
            raise IneligibleVoter()
        except GameError:
            self.db.rollback()
            raise

        print(f"🗳️ 游戏 {game_id} 第{epoch}纪元: {caller} 投票淘汰 NFT #{token_id}（当前 {tally} 票）")
        await self._publish(game_id, [{
            "type": "vote_cast",
            "game_id": game_id,
            "epoch": epoch,
            "voter": caller,
            "token_id": token_id,
            "tally": tally
        }])

        return VoteReceipt(
            game_id=game_id,
            epoch=epoch,
            recorded=True,
            tally=tally,
            eliminated=rollover[1] if rollover else None,
            game_over=False
        )

    async def resolve_epoch(self, game_id: int) -> ResolveResponse:
        """手动结算已结束的纪元（任何人都可以调用）"""
        game = self._get_game(game_id, for_update=True)
        now = self.clock.now()
        try:
            if game.status in FINISHED_STATUSES:
                raise VotingClosed()
            if not self._window_elapsed(game, now):
                raise EpochNotElapsed()
            resolved_epoch, eliminated, game_over = self._resolve(game, now)
            events = self._resolution_events(game, (resolved_epoch, eliminated, game_over))
            self.db.commit()
        except GameError:
            self.db.rollback()
            raise

        await self._publish(game_id, events)
        return ResolveResponse(
            game_id=game_id,
            resolved_epoch=resolved_epoch,
            current_epoch=game.current_epoch,
            eliminated=eliminated,
            game_over=game_over
        )

    async def claim_eth(self, game_id: int, caller: str) -> ClaimResponse:
        """最后幸存NFT的持有者领取全部奖池"""
        game = self._get_game(game_id, for_update=True)
        try:
            if game.status == "claimed":
                raise AlreadyClaimed()
            if game.status != "game_over":
                raise GameNotOver()
            survivor = self._survivor_query(game.id).first()
            if survivor is None or survivor.owner != caller:
                raise NotSurvivorOwner()

            amount = game.escrow_balance
            self.account_service.credit(caller, amount)
            game.escrow_balance = 0
            game.status = "claimed"
            self.db.commit()
        except GameError:
            self.db.rollback()
            raise

        print(f"💰 游戏 {game_id}: {caller} 领取了奖池 {format_ether(amount)} ETH")
        await self._publish(game_id, [{
            "type": "eth_claimed",
            "game_id": game_id,
            "winner": caller,
            "amount": amount
        }])

        return ClaimResponse(
            game_id=game_id,
            winner=caller,
            amount=amount,
            amount_ether=format_ether(amount)
        )

    # ------------------------------------------------------------------
    # 只读查询
    # ------------------------------------------------------------------

    async def total_nfts(self, game_id: int) -> int:
        return self._get_game(game_id).total_nft_supply

    async def total_eth(self, game_id: int) -> int:
        return self._get_game(game_id).total_eth_collected

    async def last_minted_id(self, game_id: int) -> Optional[int]:
        return self._get_game(game_id).last_minted_id

    async def current_epoch(self, game_id: int) -> int:
        return self._get_game(game_id).current_epoch

    async def purchased_nft_owner(self, game_id: int, token_id: int) -> str:
        """获取NFT的购买者地址"""
        self._get_game(game_id)
        nft = self.db.query(Nft).filter(Nft.game_id == game_id, Nft.token_id == token_id).first()
        if not nft:
            raise NotFound(f"NFT #{token_id} 尚未售出")
        return nft.owner

    async def surviving_nft(self, game_id: int, index: int) -> int:
        """按位置获取幸存NFT编号"""
        self._get_game(game_id)
        nft = self._survivor_query(game_id).offset(index).first() if index >= 0 else None
        if not nft:
            raise NotFound(f"幸存者位置 {index} 不存在")
        return nft.token_id

    async def has_voted(self, game_id: int, epoch: int, address: str) -> bool:
        self._get_game(game_id)
        return self._has_voted(game_id, epoch, address)

    async def vote_tally(self, game_id: int, epoch: int, token_id: int) -> int:
        self._get_game(game_id)
        return self._tally(game_id, epoch, token_id)

    async def list_survivors(self, game_id: int) -> List[NftInfo]:
        self._get_game(game_id)
        return [NftInfo.model_validate(nft) for nft in self._survivor_query(game_id).all()]

    async def list_eliminations(self, game_id: int) -> List[EliminationInfo]:
        self._get_game(game_id)
        eliminations = self.db.query(Elimination).filter(
            Elimination.game_id == game_id
        ).order_by(Elimination.epoch).all()
        return [EliminationInfo.model_validate(e) for e in eliminations]

    async def get_game(self, game_id: int) -> Optional[GameResponse]:
        """根据ID获取游戏信息"""
        game = self.db.query(Game).filter(Game.id == game_id).first()
        if game:
            return GameResponse.model_validate(game)
        return None

    async def list_games(self, skip: int = 0, limit: int = 10) -> List[GameResponse]:
        """获取游戏列表"""
        games = self.db.query(Game).order_by(Game.id).offset(skip).limit(limit).all()
        return [GameResponse.model_validate(game) for game in games]

    async def get_game_status(self, game_id: int) -> Optional[GameStatus]:
        """获取游戏状态"""
        game = self.db.query(Game).filter(Game.id == game_id).first()
        if not game:
            return None

        nfts = self.db.query(Nft).filter(Nft.game_id == game_id).order_by(Nft.token_id).all()
        status = getattr(game, 'status', '')

        return GameStatus(
            game_id=game_id,
            status=status,
            current_epoch=game.current_epoch,
            epoch_ends_at=game.epoch_started_at + game.epoch_duration,
            total_nfts=game.total_nft_supply,
            minted_count=game.minted_count,
            total_eth=game.total_eth_collected,
            total_eth_ether=format_ether(game.total_eth_collected),
            escrow_balance=game.escrow_balance,
            survivors=[nft.token_id for nft in nfts if nft.alive],
            eliminated=[nft.token_id for nft in nfts if not nft.alive],
            game_over=status in FINISHED_STATUSES,
            claimed=status == "claimed",
            winner_address=game.winner_address
        )

    # ------------------------------------------------------------------
    # 内部方法
    # ------------------------------------------------------------------

    def _get_game(self, game_id: int, for_update: bool = False) -> Game:
        query = self.db.query(Game).filter(Game.id == game_id)
        if for_update:
            query = query.with_for_update()
        game = query.first()
        if not game:
            raise NotFound("游戏不存在")
        return game

    def _window_elapsed(self, game: Game, now: int) -> bool:
        return now >= game.epoch_started_at + game.epoch_duration

    def _survivor_query(self, game_id: int):
        return self.db.query(Nft).filter(
            Nft.game_id == game_id,
            Nft.alive == True  # noqa: E712
        ).order_by(Nft.token_id)

    def _get_alive_nft(self, game_id: int, token_id: int) -> Optional[Nft]:
        return self._survivor_query(game_id).filter(Nft.token_id == token_id).first()

    def _owns_alive_nft(self, game_id: int, address: str) -> bool:
        return self._survivor_query(game_id).filter(Nft.owner == address).first() is not None

    def _has_voted(self, game_id: int, epoch: int, address: str) -> bool:
        return self.db.query(Vote).filter(
            Vote.game_id == game_id,
            Vote.epoch == epoch,
            Vote.voter == address
        ).first() is not None

    def _tally(self, game_id: int, epoch: int, token_id: int) -> int:
        return self.db.query(func.count(Vote.id)).filter(
            Vote.game_id == game_id,
            Vote.epoch == epoch,
            Vote.target_token_id == token_id
        ).scalar() or 0

    def _resolve(self, game: Game, now: int) -> Tuple[int, Optional[EliminationInfo], bool]:
        """结算当前纪元：淘汰得票最多的NFT，然后进入下一纪元或结束游戏

        平票时淘汰编号最小的NFT；没有投票时不淘汰；永远不会淘汰最后一个幸存者。
        """
        epoch = game.current_epoch
        tallies = self.db.query(
            Vote.target_token_id, func.count(Vote.id).label("votes")
        ).filter(
            Vote.game_id == game.id,
            Vote.epoch == epoch
        ).group_by(Vote.target_token_id).all()

        alive_count = self._survivor_query(game.id).count()
        eliminated = None

        if tallies and alive_count > 1:
            max_votes = max(row.votes for row in tallies)
            target_id = min(row.target_token_id for row in tallies if row.votes == max_votes)
            nft = self._get_alive_nft(game.id, target_id)
            if nft is not None:
                nft.alive = False
                nft.eliminated_epoch = epoch
                self.db.add(Elimination(
                    game_id=game.id,
                    epoch=epoch,
                    token_id=target_id,
                    vote_count=max_votes
                ))
                self.db.flush()
                alive_count -= 1
                eliminated = EliminationInfo(epoch=epoch, token_id=target_id, vote_count=max_votes)
                print(f"⚰️ 游戏 {game.id} 第{epoch}纪元结算：NFT #{target_id} 以 {max_votes} 票被淘汰")

        if eliminated is not None and alive_count == 1:
            survivor = self._survivor_query(game.id).first()
            game.status = "game_over"
            game.winner_address = survivor.owner
            print(f"🏆 游戏 {game.id} 结束：NFT #{survivor.token_id} 是最后的幸存者，持有者 {survivor.owner}")
            return epoch, eliminated, True

        game.current_epoch = epoch + 1
        game.epoch_started_at = now
        game.status = "voting"
        print(f"⏭️ 游戏 {game.id} 进入第{game.current_epoch}纪元，剩余幸存者 {alive_count} 个")
        return epoch, eliminated, False

    def _resolution_events(self, game: Game, result: Tuple[int, Optional[EliminationInfo], bool]) -> List[dict]:
        resolved_epoch, eliminated, game_over = result
        events = [{
            "type": "epoch_resolved",
            "game_id": game.id,
            "epoch": resolved_epoch,
            "next_epoch": None if game_over else game.current_epoch
        }]
        if eliminated is not None:
            events.append({
                "type": "nft_eliminated",
                "game_id": game.id,
                "epoch": eliminated.epoch,
                "token_id": eliminated.token_id,
                "vote_count": eliminated.vote_count
            })
        if game_over:
            events.append({
                "type": "game_over",
                "game_id": game.id,
                "winner": game.winner_address
            })
        return events

    async def _publish(self, game_id: int, events: List[dict]):
        """事务提交后广播账本事件"""
        if not self.websocket_manager:
            return
        for event in events:
            await self.websocket_manager.broadcast_to_game(event, game_id)
