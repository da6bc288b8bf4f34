"""
기간 토큰 해석기

토큰 형식: "<연도>-<구간>"
    "2025-all"   → [2025-01-01, 2026-01-01)
    "2025-q2"    → [2025-04-01, 2025-07-01)
    "2025-3"     → [2025-03-01, 2025-04-01)

모든 구간은 반열린 구간 [start, end) 이다.
경계 자정(예: 2025-04-01 00:00)에 발생한 거래는 항상 뒤 기간에 속한다.

기간 문자열 해석은 이 모듈에서만 한다 (뷰/집계기는 여기 함수만 호출).
"""
import logging
import re
from datetime import date, datetime, time
from typing import NamedTuple

from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

from apps.core.exceptions import InvalidPeriodToken

logger = logging.getLogger(__name__)

ALL = 'all'
GRANULARITIES = ('month', 'quarter', 'all')

TOKEN_PATTERN = re.compile(r'^(?P<year>[^-]+)-(?P<segment>[^-]+)$')
QUARTER_PATTERN = re.compile(r'^q(?P<quarter>\d)$')
MONTH_PATTERN = re.compile(r'^\d{1,2}$')

# datetime 범위 안에서 다음 해 1월 1일을 만들 수 있는 연도
MIN_YEAR = 1
MAX_YEAR = 9998


class Period(NamedTuple):
    start: datetime
    end: datetime
    token: str

    def contains(self, value):
        moment = to_local_naive(value)
        if moment is None:
            return False
        return self.start <= moment < self.end

    @property
    def year(self):
        return self.start.year


def to_local_naive(value):
    """
    비교용 시각 정규화

    - aware datetime → 현지 시간(TIME_ZONE)으로 변환 후 tzinfo 제거
    - naive datetime → 그대로 (현지 시간으로 간주)
    - date → 그 날 00:00
    - ISO 문자열 → 위 규칙 적용
    - 해석 불가 → None
    """
    if isinstance(value, str):
        try:
            value = parse_datetime(value) or parse_date(value)
        except ValueError:
            # 형식은 맞지만 존재하지 않는 날짜 ("2025-13-01", "2025-02-30")
            return None
    if isinstance(value, datetime):
        if timezone.is_aware(value):
            value = timezone.localtime(value).replace(tzinfo=None)
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    return None


def parse_token(token):
    """
    토큰 → (연도, 구간)

    구간은 'all', 'q1'~'q4', '1'~'12' 중 하나로 정규화된다 ("Q2" → "q2", "03" → "3").

    Raises:
        TypeError: 문자열이 아닌 경우
        InvalidPeriodToken: 형식 오류
    """
    if not isinstance(token, str):
        raise TypeError(f"기간 토큰은 문자열이어야 합니다: {type(token).__name__}")

    match = TOKEN_PATTERN.match(token.strip().lower())
    if not match:
        raise InvalidPeriodToken(token, "'<연도>-<구간>' 형식이 아닙니다")

    year_text = match.group('year')
    if not year_text.isdigit():
        raise InvalidPeriodToken(token, '연도가 숫자가 아닙니다')
    year = int(year_text)
    if not MIN_YEAR <= year <= MAX_YEAR:
        raise InvalidPeriodToken(token, '연도 범위 초과')

    return year, _normalize_segment(match.group('segment'), token)


def _normalize_segment(segment, token):
    if segment == ALL:
        return ALL

    quarter = QUARTER_PATTERN.match(segment)
    if quarter:
        if not 1 <= int(quarter.group('quarter')) <= 4:
            raise InvalidPeriodToken(token, '분기는 q1~q4만 가능합니다')
        return segment

    if MONTH_PATTERN.match(segment):
        month = int(segment)
        if not 1 <= month <= 12:
            raise InvalidPeriodToken(token, '월은 1~12만 가능합니다')
        return str(month)

    raise InvalidPeriodToken(token, f"알 수 없는 구간: {segment!r}")


def make_token(year, segment):
    """(2025, 'Q1') → '2025-q1', (2025, 3) → '2025-3' (검증 포함)"""
    token = f"{year}-{str(segment).strip().lower()}"
    parsed_year, parsed_segment = parse_token(token)
    return f"{parsed_year}-{parsed_segment}"


def _first_of_month(year, month):
    # month가 13이면 다음 해 1월
    if month > 12:
        return datetime(year + 1, 1, 1)
    return datetime(year, month, 1)


def resolve_period(token):
    """
    토큰 → Period(start, end, token)

    Raises:
        TypeError: 문자열이 아닌 토큰
        InvalidPeriodToken: 잘못된 연도/구간
    """
    year, segment = parse_token(token)

    if segment == ALL:
        start_month, months = 1, 12
    elif segment.startswith('q'):
        quarter = int(segment[1])
        start_month, months = (quarter - 1) * 3 + 1, 3
    else:
        start_month, months = int(segment), 1

    start = datetime(year, start_month, 1)
    end = _first_of_month(year, start_month + months)
    return Period(start=start, end=end, token=f"{year}-{segment}")


def default_token(today=None):
    today = today or timezone.localdate()
    return f"{today.year}-{ALL}"


def resolve_period_or_default(token, today=None):
    """
    잘못된 토큰이면 올해 전체("<올해>-all")로 대체

    대체가 일어나면 경고 로그를 남긴다 (조용히 틀린 데이터를 보여주지 않도록).
    """
    try:
        return resolve_period(token)
    except (InvalidPeriodToken, TypeError) as e:
        fallback = default_token(today)
        logger.warning(f"기간 토큰 오류로 {fallback} 사용: {e}")
        return resolve_period(fallback)


def period_from_params(year=None, period=None, today=None):
    """
    API 쿼리 파라미터 → Period

    - period가 완전한 토큰("2025-q1")이면 그대로 사용
    - period가 구간만("Q1", "3", "all") 있으면 year와 합친다
    - year가 없으면 올해, 둘 다 없으면 올해 전체
    """
    today = today or timezone.localdate()
    year_text = str(year).strip() if year not in (None, '') else str(today.year)
    segment = str(period).strip() if period not in (None, '') else ALL

    token = segment if '-' in segment else f"{year_text}-{segment}"
    return resolve_period_or_default(token, today=today)


def classify(value, year, granularity='month'):
    """
    날짜 → 해당 연도 안에서 속하는 기간 토큰

    Args:
        value: datetime / date / ISO 문자열
        year: 기준 연도 (다른 해의 날짜면 None)
        granularity: 'month' → '2025-3', 'quarter' → '2025-q1', 'all' → '2025-all'

    Returns:
        토큰 문자열 또는 None
    """
    if granularity not in GRANULARITIES:
        raise ValueError(f"granularity는 {GRANULARITIES} 중 하나여야 합니다: {granularity!r}")

    moment = to_local_naive(value)
    if moment is None or moment.year != year:
        return None

    if granularity == 'month':
        return f"{year}-{moment.month}"
    if granularity == 'quarter':
        return f"{year}-q{(moment.month - 1) // 3 + 1}"
    return f"{year}-{ALL}"


def period_contains(token, value):
    """토큰이 가리키는 구간에 value가 포함되는지 (잘못된 토큰은 예외)"""
    return resolve_period(token).contains(value)
