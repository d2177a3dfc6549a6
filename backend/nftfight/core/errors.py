"""
账本错误定义

每个错误都带有一个 code（对应合约的 revert 原因），str(error) 即为 code。
"""


class GameError(Exception):
    """账本操作失败的基类"""
    code = "gameError"

    def __init__(self, message: str = None):
        super().__init__(self.code)
        self.message = message or self.code


class NotFound(GameError):
    """游戏、NFT 或幸存者位置不存在"""
    code = "notFound"


# 购买
class InsufficientPayment(GameError):
    code = "purchaseNFT__MintPriceNotMet"


class SoldOut(GameError):
    code = "purchaseNFT__SoldOut"


class MintingClosed(GameError):
    code = "purchaseNFT__GameOver"


class InsufficientFunds(GameError):
    code = "account__InsufficientFunds"


# 投票
class IneligibleVoter(GameError):
    code = "vote__IneligibleToVote"


class VotingNotOpen(GameError):
    code = "vote__VotingNotOpen"


class VotingClosed(GameError):
    code = "vote__GameOver"


class TargetAlreadyEliminated(GameError):
    code = "vote__NFTAlreadyVotedOut"


class EpochNotElapsed(GameError):
    code = "epoch__NotElapsed"


# 领取奖池
class GameNotOver(GameError):
    code = "claimEth__GameNotOver"


class NotSurvivorOwner(GameError):
    code = "claimEth__NotSurvivorOwner"


class AlreadyClaimed(GameError):
    code = "claimEth__AlreadyClaimed"
