"""
transactions 앱 테스트용 공통 fixture
"""
import pytest
from django.contrib.auth.models import User

from apps.transactions.models import Category


@pytest.fixture
def test_user(db):
    """테스트용 사용자"""
    return User.objects.create_user(username='tester', password='pass')


@pytest.fixture
def other_user(db):
    """다른 사용자 (권한 테스트용)"""
    return User.objects.create_user(username='other', password='pass')


@pytest.fixture
def income_category(db):
    """수입 카테고리 (시스템 기본값)"""
    return Category.objects.get(name='Ventas', is_system=True)


@pytest.fixture
def expense_category(db):
    """지출 카테고리 (시스템 기본값)"""
    return Category.objects.get(name='Material de oficina', is_system=True)


@pytest.fixture
def auth_client(client, test_user):
    """로그인된 클라이언트"""
    client.login(username='tester', password='pass')
    return client
