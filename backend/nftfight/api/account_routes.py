"""
账户与时钟API路由
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from nftfight.core.clock import get_clock, ManualClock
from nftfight.core.database import get_db
from nftfight.services.account_service import AccountService
from nftfight.schemas.account_schemas import AccountCreate, AccountResponse, ClockAdvance, ClockResponse

router = APIRouter()
clock_router = APIRouter()

@router.post("/", response_model=AccountResponse)
async def create_account(
    data: AccountCreate,
    db: Session = Depends(get_db)
):
    """创建账户"""
    account_service = AccountService(db)
    try:
        return await account_service.create_account(data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

@router.get("/{address}", response_model=AccountResponse)
async def get_account(
    address: str,
    db: Session = Depends(get_db)
):
    """获取账户余额（不存在时自动创建）"""
    account_service = AccountService(db)
    return await account_service.get_account(address)

def _clock_info(clock) -> ClockResponse:
    mode = "manual" if isinstance(clock, ManualClock) else "system"
    return ClockResponse(mode=mode, now=clock.now())

@clock_router.get("/", response_model=ClockResponse)
async def get_clock_info(clock=Depends(get_clock)):
    """获取当前时间"""
    return _clock_info(clock)

@clock_router.post("/advance", response_model=ClockResponse)
async def advance_clock(
    request: ClockAdvance,
    clock=Depends(get_clock)
):
    """推进时钟（仅手动时钟可用）"""
    if not isinstance(clock, ManualClock):
        raise HTTPException(status_code=409, detail="当前使用系统时钟，无法推进")
    clock.advance(request.seconds)
    print(f"⏩ 时钟推进 {request.seconds} 秒，当前时间 {clock.now()}")
    return _clock_info(clock)
