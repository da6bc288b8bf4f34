"""
Dashboard 앱은 자체 모델을 가지지 않습니다.
기존 모델(Transaction, Invoice)의 데이터를 매 조회마다 다시 집계합니다.

주요 기능:
- 기간 토큰 해석 (periods.py)
- 세무 요약: 수입/지출, IVA 신고액, IRPF 원천징수 (utils.py)
- 카테고리별 지출 분석
"""
