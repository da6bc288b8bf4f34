"""
추가 세금 항목 (AdditionalTax)

문서(factura, presupuesto, movimiento)마다 붙는 이름 있는 세금 조정 항목.
- IVA +21 (%)  → 합계 증가
- IRPF -15 (%) → 합계 감소 (원천징수)
- 고정 금액 항목 (isPercentage=False) → 소계와 무관하게 1회 적용

DB에는 [{"name", "amount", "isPercentage"}] 형태의 JSON 배열로 저장된다.
이미 파싱된 list 또는 JSON 문자열 둘 다 들어올 수 있으므로
parse_additional_taxes()에서 경계 검증을 끝내고, 계산기는 검증된 값만 받는다.
"""
import json
import logging
import re
from dataclasses import dataclass
from decimal import Decimal

from django.conf import settings

from apps.core.exceptions import InvalidAdditionalTax, StrictModeError
from apps.core.utils import to_decimal, ZERO

logger = logging.getLogger(__name__)

HUNDRED = Decimal('100')

DEFAULT_VAT_TAX_NAMES = ('iva', 'vat')
DEFAULT_IRPF_TAX_NAMES = ('irpf',)

LETTER = '[a-záéíóúüñç]'


def _names_setting(name, default):
    return tuple(n.lower() for n in getattr(settings, name, default))


@dataclass(frozen=True)
class AdditionalTax:
    name: str
    amount: Decimal
    is_percentage: bool = True

    def __post_init__(self):
        if not isinstance(self.name, str) or not self.name.strip():
            raise InvalidAdditionalTax("세금 이름은 비어 있을 수 없습니다")
        if not isinstance(self.amount, Decimal) or not self.amount.is_finite():
            raise InvalidAdditionalTax(f"세금 금액이 숫자가 아닙니다: {self.amount!r}")

    @classmethod
    def from_dict(cls, data, strict=False):
        """
        JSON 객체 하나를 검증된 AdditionalTax로 변환

        - name: 필수, 공백 불가
        - amount: 숫자 또는 숫자 문자열 ("-15", "21,5"). 변환 불가 시
          lenient 모드는 0 (세금 효과 없음), strict 모드는 예외
        - isPercentage: 없으면 True (원본 데이터 대부분이 %)
        """
        if not isinstance(data, dict):
            raise InvalidAdditionalTax(f"세금 항목은 객체여야 합니다: {data!r}")

        name = data.get('name')
        if not isinstance(name, str) or not name.strip():
            raise InvalidAdditionalTax(f"세금 이름이 없습니다: {data!r}")

        amount = to_decimal(data.get('amount'), strict=strict, field=f"{name}.amount")

        is_percentage = data.get('isPercentage', data.get('is_percentage', True))
        if is_percentage is None:
            is_percentage = True
        elif isinstance(is_percentage, str):
            is_percentage = is_percentage.strip().lower() in ('true', '1', 'yes')

        return cls(name=name.strip(), amount=amount, is_percentage=bool(is_percentage))

    def to_dict(self):
        # JSONField 저장용: Decimal은 JSON 직렬화가 안 되므로 float 변환
        return {
            'name': self.name,
            'amount': float(self.amount),
            'isPercentage': self.is_percentage,
        }

    def contribution(self, subtotal):
        """소계에 대한 실제 기여액 (반올림 전)"""
        if self.is_percentage:
            return subtotal * self.amount / HUNDRED
        return self.amount

    @property
    def is_withholding(self):
        return self.amount < ZERO

    @property
    def is_vat(self):
        return _matches(self.name, _names_setting('FISCAL_VAT_TAX_NAMES', DEFAULT_VAT_TAX_NAMES))

    @property
    def is_irpf(self):
        return _matches(self.name, _names_setting('FISCAL_IRPF_TAX_NAMES', DEFAULT_IRPF_TAX_NAMES))


def _matches(name, keywords):
    # 글자로 둘러싸이지 않은 키워드만 인정 ("IVA 21%", "iva21" O / "equivalencia" X)
    lowered = name.lower()
    return any(
        re.search(rf"(?<!{LETTER}){re.escape(keyword)}(?!{LETTER})", lowered)
        for keyword in keywords
    )


def parse_additional_taxes(value, strict=False):
    """
    저장된 추가 세금 값 → AdditionalTax 리스트

    허용 입력:
        None / '' → []
        JSON 문자열 '[{"name": "IVA", "amount": 21, "isPercentage": true}]'
        list[dict] 또는 list[AdditionalTax]

    잘못된 항목은 lenient 모드에서 경고 로그 후 건너뛰고,
    strict 모드에서는 예외를 그대로 올린다.
    """
    if value is None:
        return []

    if isinstance(value, (bytes, bytearray)):
        value = value.decode('utf-8')

    if isinstance(value, str):
        if not value.strip():
            return []
        try:
            value = json.loads(value)
        except json.JSONDecodeError as e:
            if strict:
                raise InvalidAdditionalTax(f"추가 세금 JSON 파싱 실패: {e}") from e
            logger.warning(f"추가 세금 JSON 파싱 실패, 무시합니다: {value[:80]!r}")
            return []
        if value is None:
            return []

    if isinstance(value, dict):
        # 단일 객체로 저장된 과거 데이터
        value = [value]

    if not isinstance(value, (list, tuple)):
        if strict:
            raise InvalidAdditionalTax(f"추가 세금은 배열이어야 합니다: {type(value).__name__}")
        logger.warning(f"추가 세금 형식 오류, 무시합니다: {value!r}")
        return []

    taxes = []
    for entry in value:
        if isinstance(entry, AdditionalTax):
            taxes.append(entry)
            continue
        try:
            taxes.append(AdditionalTax.from_dict(entry, strict=strict))
        except (InvalidAdditionalTax, StrictModeError):
            if strict:
                raise
            logger.warning(f"잘못된 세금 항목 건너뜀: {entry!r}")
    return taxes


def dump_additional_taxes(taxes):
    """AdditionalTax 리스트 → JSON 저장용 list[dict]"""
    return [tax.to_dict() for tax in taxes]
