"""
공통 추상 모델 테스트 (소프트 삭제 / 사용자 소유)

Transaction(SoftDeleteModel) 구현체로 검증한다.
"""
from decimal import Decimal

import pytest
from django.contrib.auth.models import User
from django.utils import timezone

from apps.transactions.models import Transaction


@pytest.fixture
def test_user(db):
    return User.objects.create_user(username='tester', password='pass')


@pytest.fixture
def other_user(db):
    return User.objects.create_user(username='other', password='pass')


@pytest.fixture
def expense(test_user):
    return Transaction.objects.create(
        user=test_user,
        type='expense',
        description='Papel',
        amount=Decimal('10.00'),
        date=timezone.now(),
    )


@pytest.mark.django_db
class TestSoftDelete:
    def test_soft_delete_hides_from_active(self, expense):
        """소프트 삭제 후 active 매니저에서 제외, objects에는 남음"""
        expense.soft_delete()

        assert not Transaction.active.filter(pk=expense.pk).exists()
        assert Transaction.objects.filter(pk=expense.pk).exists()

    def test_restore(self, expense):
        expense.soft_delete()
        expense.restore()

        assert Transaction.active.filter(pk=expense.pk).exists()

    def test_active_queryset_method(self, expense):
        assert list(Transaction.objects.active()) == [expense]


@pytest.mark.django_db
class TestUserOwned:
    def test_for_user(self, expense, other_user):
        assert list(Transaction.objects.for_user(expense.user)) == [expense]
        assert not Transaction.objects.for_user(other_user).exists()

    def test_is_owner(self, expense, other_user):
        assert expense.is_owner(expense.user)
        assert not expense.is_owner(other_user)
