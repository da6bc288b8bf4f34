"""
금액 변환 유틸리티

금융 데이터는 정확성이 중요하므로 float 대신 Decimal만 사용한다.
- to_decimal(): 문자열/숫자 → Decimal (변환 불가 시 기본값 0)
- round2(): 소수점 2자리 반올림 (ROUND_HALF_UP)

반올림은 결과를 저장/표시하는 시점에 한 번만 한다.
중간 계산에서 반올림하면 반복 재계산 시 오차가 누적된다.
"""
import logging
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from .exceptions import StrictModeError

logger = logging.getLogger(__name__)

ZERO = Decimal('0')
CENT = Decimal('0.01')


def to_decimal(value, default=ZERO, strict=False, field=''):
    """
    값을 Decimal로 변환 (반올림하지 않음)

    Args:
        value: int, float, Decimal, str ("12,50" 같은 쉼표 소수점 허용)
        default: 변환 불가(None, 빈 문자열, NaN, 잘못된 문자열) 시 반환값
        strict: True면 기본값으로 대체하지 않고 StrictModeError 발생
        field: 로그/예외 메시지용 필드명

    Returns:
        Decimal (NaN/Infinity는 절대 반환하지 않음)
    """
    if isinstance(value, bool):
        # True/False가 1/0으로 계산되는 것 방지
        return _fallback(value, default, strict, field)

    if isinstance(value, Decimal):
        decimal_value = value
    elif isinstance(value, int):
        return Decimal(value)
    elif isinstance(value, float):
        # 부동소수점 오차 방지를 위해 문자열 경유
        decimal_value = _parse(str(value))
    elif isinstance(value, str):
        decimal_value = _parse(value.strip().replace(',', '.'))
    else:
        decimal_value = None

    if decimal_value is None or not decimal_value.is_finite():
        return _fallback(value, default, strict, field)

    return decimal_value


def _parse(text):
    if not text:
        return None
    try:
        return Decimal(text)
    except (InvalidOperation, ValueError):
        return None


def _fallback(value, default, strict, field):
    if strict:
        raise StrictModeError(f"숫자로 변환할 수 없는 값: {field or 'value'}={value!r}")
    if value not in (None, ''):
        logger.warning(f"숫자 변환 실패, {default}으로 대체: {field or 'value'}={value!r}")
    return default


def round2(value):
    """소수점 2자리 반올림 (0.005 → 0.01)"""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def to_money(value, strict=False, field=''):
    """변환 + 반올림 (입력값 정규화용)"""
    return round2(to_decimal(value, strict=strict, field=field))


def jsonable(value):
    """응답 직렬화용: Decimal → float (dict/list 재귀)"""
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, dict):
        return {key: jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [jsonable(item) for item in value]
    return value
