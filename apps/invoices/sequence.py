"""
송장 번호 연속성 검사 (numeración de facturas)

번호는 자유 형식 문자열이지만 보통 끝에 0으로 채운 일련번호가 붙는다.
    "F-2023-001" → 접두사 "F-2023-", 일련번호 1

같은 접두사를 가진 이전 번호들 중 최대값 + 1 이어야 올바른 번호로 본다.
(같은 접두사의 이전 번호가 없으면 1)

이 검사는 권고용이다: False여도 송장 생성을 막지 않고,
경고 메시지로 사용자에게 확인만 받는다.
"""
import re
from typing import Iterable, NamedTuple, Optional, Tuple

TRAILING_NUMBER = re.compile(r'^(.*?)(\d+)$')

DEFAULT_WIDTH = 3


class SequenceCheck(NamedTuple):
    is_valid: bool
    message: str = ''
    expected: Optional[str] = None


def split_number(number) -> Optional[Tuple[str, int, int]]:
    """
    "F-2023-001" → ("F-2023-", 1, 3)  (접두사, 일련번호, 자릿수)

    끝에 숫자가 없으면 None (순서 없는 별도 시리즈)
    """
    if not isinstance(number, str):
        return None
    match = TRAILING_NUMBER.match(number.strip())
    if not match:
        return None
    prefix, digits = match.groups()
    return prefix, int(digits), len(digits)


def _series(prefix: str, prior_numbers: Iterable[str]):
    parsed = (split_number(n) for n in prior_numbers or [])
    return [p for p in parsed if p is not None and p[0] == prefix]


def check_sequence(candidate: str, prior_numbers: Iterable[str]) -> SequenceCheck:
    """
    후보 번호가 같은 시리즈의 다음 번호인지 검사

    - 접두사가 같은 이전 번호가 없으면 일련번호 1이어야 함
    - 중복 번호(같은 일련번호 재사용)는 올바르지 않음
    - 끝에 숫자가 없는 번호는 비교 대상에서 제외 (항상 통과)
    """
    prior_numbers = [n for n in prior_numbers or [] if n]
    parsed = split_number(candidate)

    if parsed is None:
        return SequenceCheck(True)

    prefix, ordinal, width = parsed
    series = _series(prefix, prior_numbers)
    ordinals = [p[1] for p in series]
    expected_ordinal = max(ordinals) + 1 if ordinals else 1
    expected = _format(prefix, expected_ordinal, series, width)

    if ordinal in ordinals or candidate.strip() in (n.strip() for n in prior_numbers):
        return SequenceCheck(
            False,
            f"El número de factura {candidate} ya existe en la serie '{prefix}'. "
            f"El siguiente número sería {expected}.",
            expected,
        )

    if ordinal != expected_ordinal:
        return SequenceCheck(
            False,
            f"El número de factura {candidate} no sigue la numeración correlativa "
            f"de la serie '{prefix}'. Se esperaba {expected}.",
            expected,
        )

    return SequenceCheck(True, '', expected)


def is_valid_sequence(candidate: str, prior_numbers: Iterable[str]) -> bool:
    return check_sequence(candidate, prior_numbers).is_valid


def _format(prefix, ordinal, series, fallback_width=DEFAULT_WIDTH):
    width = max((p[2] for p in series), default=fallback_width)
    return f"{prefix}{ordinal:0{width}d}"


def suggest_next_number(prior_numbers: Iterable[str], prefix: str, width: int = DEFAULT_WIDTH) -> str:
    """
    시리즈의 다음 번호 제안 (check_sequence가 통과시키는 번호)

    >>> suggest_next_number(["F-2023-001", "F-2023-002"], "F-2023-")
    'F-2023-003'
    """
    series = _series(prefix, prior_numbers)
    next_ordinal = max((p[1] for p in series), default=0) + 1
    return _format(prefix, next_ordinal, series, width)
