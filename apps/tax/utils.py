"""
문서 합계 계산 / 지출 세금 분리 유틸리티

- compute_totals(): 품목 + 추가 세금 → 소계/세금/합계
- recompute(): 문서의 품목/세금이 바뀔 때마다 호출하는 전체 재계산
- split_gross_amount(): IVA 포함 총액 → 과세표준(base imponible) + IVA + IRPF
- split_net_amount(): IRPF까지 차감된 총액 → base + IVA + IRPF
- base_from_amounts(): 총액과 세액을 알 때 base 역산
- looks_like_irpf_total(): IRPF가 적용된 총액인지 추정 (검토 표시용)

모든 함수는 순수 함수다 (DB 접근 없음, 부작용 없음).
"""
import logging
from dataclasses import dataclass
from decimal import Decimal

from apps.core.exceptions import InvalidTaxRate, StrictModeError
from apps.core.utils import to_decimal, round2, ZERO
from .additional_taxes import parse_additional_taxes, HUNDRED

logger = logging.getLogger(__name__)

ONE = Decimal('1')


@dataclass(frozen=True)
class LineItem:
    description: str
    quantity: Decimal
    unit_price: Decimal
    tax_rate: Decimal = ZERO

    @property
    def subtotal(self):
        # 라인 단위 세금은 적용하지 않는다 (IVA는 문서 단위 AdditionalTax)
        return self.quantity * self.unit_price

    @classmethod
    def coerce(cls, item, strict=False):
        """
        dict (API 본문: unitPrice / unit_price) 또는 InvoiceItem 같은 객체 → LineItem

        변환 불가 숫자는 0, 음수 수량/단가는 0으로 보정한다 (strict 모드는 예외).
        """
        if isinstance(item, cls):
            return item

        if isinstance(item, dict):
            get = item.get
        else:
            def get(key, default=None):
                return getattr(item, key, default)

        description = get('description') or ''
        unit_price = get('unit_price')
        if unit_price is None:
            unit_price = get('unitPrice')
        tax_rate = get('tax_rate')
        if tax_rate is None:
            tax_rate = get('taxRate')

        quantity = _non_negative(get('quantity'), 'quantity', strict)
        unit_price = _non_negative(unit_price, 'unitPrice', strict)
        tax_rate = _non_negative(tax_rate, 'taxRate', strict)

        return cls(
            description=str(description),
            quantity=quantity,
            unit_price=unit_price,
            tax_rate=tax_rate,
        )


def _non_negative(value, field, strict):
    number = to_decimal(value, strict=strict, field=field)
    if number < ZERO:
        if strict:
            raise StrictModeError(f"{field}는 음수일 수 없습니다: {number}")
        logger.warning(f"음수 {field}({number})를 0으로 보정")
        return ZERO
    return number


@dataclass(frozen=True)
class DocumentTotals:
    """
    문서 합계 (항상 계산 결과, 직접 수정 금지)

    불변식: total == subtotal + tax_total
    """
    subtotal: Decimal = ZERO
    tax_total: Decimal = ZERO
    total: Decimal = ZERO

    def to_dict(self):
        return {
            'subtotal': self.subtotal,
            'taxTotal': self.tax_total,
            'total': self.total,
        }


def compute_totals(items, additional_taxes, base_amount=None, strict=False):
    """
    품목과 추가 세금으로 문서 합계 계산

    Args:
        items: LineItem / dict / InvoiceItem 목록 (없으면 단일 금액 문서)
        additional_taxes: AdditionalTax 목록, list[dict], JSON 문자열 또는 None
        base_amount: 품목이 없는 간이 문서에서 사용자가 입력한 과세표준
        strict: True면 변환 불가 값이 있을 때 0 대체 대신 예외

    Returns:
        DocumentTotals

    계산:
        subtotal = round2(Σ quantity × unit_price)
        tax_total = round2(Σ (isPercentage ? subtotal × amount / 100 : amount))
        total = subtotal + tax_total  (하한 없음: IRPF가 커서 total < subtotal 가능)
    """
    line_items = [LineItem.coerce(item, strict=strict) for item in (items or [])]

    if line_items:
        subtotal = round2(sum((item.subtotal for item in line_items), ZERO))
    elif base_amount is not None:
        subtotal = round2(to_decimal(base_amount, strict=strict, field='subtotal'))
    else:
        subtotal = round2(ZERO)

    taxes = parse_additional_taxes(additional_taxes, strict=strict)
    tax_total = round2(sum((tax.contribution(subtotal) for tax in taxes), ZERO))

    return DocumentTotals(
        subtotal=subtotal,
        tax_total=tax_total,
        total=round2(subtotal + tax_total),
    )


def recompute(document, items=None, strict=False):
    """
    문서 전체 재계산 (부분 패치 없음)

    품목 수량/단가 수정, 품목 삭제, 세금 추가/삭제/수정 후 매번 호출한다.
    품목이 없으면 문서에 저장된 subtotal을 사용자 입력 과세표준으로 본다.

    문서에 apply_totals()가 있으면 그것으로, 없으면 subtotal/tax/total 속성에 기록.
    """
    items = list(items or [])
    base_amount = None if items else getattr(document, 'subtotal', None)

    totals = compute_totals(
        items,
        getattr(document, 'additional_taxes', None),
        base_amount=base_amount,
        strict=strict,
    )

    if hasattr(document, 'apply_totals'):
        document.apply_totals(totals)
    else:
        document.subtotal = totals.subtotal
        document.tax = totals.tax_total
        document.total = totals.total
    return totals


@dataclass(frozen=True)
class SplitAmounts:
    """총액 분리 결과 (base + vat_amount ≈ gross, ±0.01)"""
    base: Decimal
    vat_amount: Decimal
    irpf_amount: Decimal

    def to_dict(self):
        return {
            'base': self.base,
            'vatAmount': self.vat_amount,
            'irpfAmount': self.irpf_amount,
        }


def _checked_denominator(denominator, rates, strict):
    """
    분모가 0 이하(IVA -100% 등)이면 나눗셈 불가

    strict: InvalidTaxRate 발생
    lenient: 경고 후 None 반환 → 호출부에서 "세금 효과 없음"으로 처리
    """
    if denominator > ZERO:
        return denominator
    if strict:
        raise InvalidTaxRate(f"세율 조합으로 계산할 수 없습니다: {rates}")
    logger.warning(f"세율 조합 {rates}의 분모가 {denominator}, 세금 효과 없음으로 처리")
    return None


def split_gross_amount(gross, vat_rate, irpf_rate=None, strict=False):
    """
    IVA 포함 총액에서 과세표준과 세액 분리 (지출 등록용)

    Example:
        >>> split_gross_amount('121.00', 21)
        SplitAmounts(base=Decimal('100.00'), vat_amount=Decimal('21.00'), irpf_amount=Decimal('0.00'))

    round2(base + vat_amount)는 gross와 최대 0.01 차이날 수 있다.
    """
    gross = to_decimal(gross, strict=strict, field='gross')
    vat_rate = to_decimal(vat_rate, strict=strict, field='vatRate')
    irpf = None if irpf_rate is None else to_decimal(irpf_rate, strict=strict, field='irpfRate')

    denominator = _checked_denominator(ONE + vat_rate / HUNDRED, {'iva': vat_rate}, strict)
    if denominator is None:
        vat_rate = ZERO
        denominator = ONE

    base = round2(gross / denominator)
    vat_amount = round2(base * vat_rate / HUNDRED)
    irpf_amount = round2(base * irpf / HUNDRED) if irpf is not None else round2(ZERO)

    return SplitAmounts(base=base, vat_amount=vat_amount, irpf_amount=irpf_amount)


def split_net_amount(total, vat_rate, irpf_rate=ZERO, strict=False):
    """
    IRPF 원천징수까지 반영된 총액에서 base 역산

    total = base + base×IVA% - base×IRPF%
    → base = total / (1 + IVA/100 - IRPF/100)

    Example:
        106 (IVA 21%, IRPF 15%) → base 100, IVA 21, IRPF 15
    """
    total = to_decimal(total, strict=strict, field='total')
    vat_rate = to_decimal(vat_rate, strict=strict, field='vatRate')
    irpf_rate = abs(to_decimal(irpf_rate, strict=strict, field='irpfRate'))

    denominator = _checked_denominator(
        ONE + vat_rate / HUNDRED - irpf_rate / HUNDRED,
        {'iva': vat_rate, 'irpf': irpf_rate},
        strict,
    )
    if denominator is None:
        vat_rate = irpf_rate = ZERO
        denominator = ONE

    base = round2(total / denominator)
    return SplitAmounts(
        base=base,
        vat_amount=round2(base * vat_rate / HUNDRED),
        irpf_amount=round2(base * irpf_rate / HUNDRED),
    )


def base_from_amounts(total, vat_amount, irpf_amount=ZERO):
    """base = 총액 - IVA + IRPF (세액을 금액으로 알고 있을 때)"""
    return round2(to_decimal(total) - to_decimal(vat_amount) + abs(to_decimal(irpf_amount)))


# IVA 21% - IRPF 15% 총액의 전형적인 끝자리
IRPF_ENDING_RANGES = ((5, 10), (30, 35), (55, 60), (80, 85))


def looks_like_irpf_total(amount):
    """
    IRPF가 적용된 총액처럼 보이는지 추정 (자동 판정 아님, 검토 표시용)

    센트가 있으면 센트 두 자리, 없으면 정수부 끝 두 자리로 판단한다.
    예: 106 → 06, 530 → 30, 318.32 → 32
    """
    cents = int(round2(abs(to_decimal(amount))) * 100)
    ending = cents % 100 or (cents // 100) % 100
    return any(low <= ending <= high for low, high in IRPF_ENDING_RANGES)
