"""
Tax 앱은 자체 모델을 가지지 않습니다.
송장(Invoice)과 거래(Transaction)의 additional_taxes 값을 계산에 사용합니다.

주요 기능:
- 추가 세금 항목 파싱/검증 (additional_taxes.py)
- 문서 합계 계산: 소계 + IVA - IRPF (utils.py)
- 지출 총액 분리: 과세표준 / IVA / IRPF (utils.py)
"""
