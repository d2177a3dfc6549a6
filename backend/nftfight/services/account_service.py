"""
账户管理服务
"""

from sqlalchemy.orm import Session
from nftfight.core.config import settings
from nftfight.core.errors import InsufficientFunds
from nftfight.core.utils import to_wei, format_ether
from nftfight.models.account import Account
from nftfight.schemas.account_schemas import AccountCreate, AccountResponse

class AccountService:
    """账户管理服务

    debit/credit 只修改会话中的对象，提交由调用方负责，
    这样购买和领取可以在同一个事务里完成。
    """

    def __init__(self, db: Session):
        self.db = db

    def get_or_create(self, address: str) -> Account:
        """获取账户，不存在时以默认余额创建"""
        account = self.db.query(Account).filter(Account.address == address).first()
        if account is None:
            account = Account(address=address, balance=settings.DEFAULT_ACCOUNT_BALANCE_WEI)
            self.db.add(account)
            self.db.flush()
        return account

    def debit(self, address: str, amount: int) -> Account:
        account = self.get_or_create(address)
        if account.balance < amount:
            raise InsufficientFunds()
        account.balance = account.balance - amount
        return account

    def credit(self, address: str, amount: int) -> Account:
        account = self.get_or_create(address)
        account.balance = account.balance + amount
        return account

    async def get_account(self, address: str) -> AccountResponse:
        """获取账户信息"""
        account = self.get_or_create(address)
        self.db.commit()
        return self._to_response(account)

    async def create_account(self, data: AccountCreate) -> AccountResponse:
        """创建账户"""
        existing = self.db.query(Account).filter(Account.address == data.address).first()
        if existing:
            raise ValueError("账户已存在")

        balance = to_wei(data.balance) if data.balance is not None else settings.DEFAULT_ACCOUNT_BALANCE_WEI
        account = Account(address=data.address, balance=balance)
        self.db.add(account)
        self.db.commit()
        self.db.refresh(account)
        print(f"👤 已创建账户 {data.address}，余额 {format_ether(balance)} ETH")
        return self._to_response(account)

    def _to_response(self, account: Account) -> AccountResponse:
        return AccountResponse(
            address=account.address,
            balance=account.balance,
            balance_ether=format_ether(account.balance)
        )
