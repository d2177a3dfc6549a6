"""
工具函数模块
"""

from typing import Union
from decimal import Decimal, InvalidOperation

WEI_PER_ETHER = 10**18


def to_wei(ether: Union[str, int, Decimal, None]) -> int:
    """把以ether为单位的金额转换为wei，例如 "0.05" -> 50000000000000000"""
    if ether is None:
        return 0
    try:
        amount = Decimal(str(ether)) * WEI_PER_ETHER
    except InvalidOperation:
        raise ValueError(f"无效的金额: {ether}")
    if amount < 0:
        raise ValueError(f"金额不能为负: {ether}")
    if amount != amount.to_integral_value():
        raise ValueError(f"金额精度超过wei: {ether}")
    return int(amount)


def format_ether(wei: int) -> str:
    """把wei格式化为ether字符串，去掉多余的0"""
    ether = Decimal(int(wei)) / WEI_PER_ETHER
    text = format(ether, 'f')
    if '.' in text:
        text = text.rstrip('0').rstrip('.')
    return text
