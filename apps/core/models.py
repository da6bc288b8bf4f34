"""
프로젝트 공통 추상 모델

- TimeStampedModel: 생성/수정 시간 자동 추적
- UserOwnedModel: 사용자 소유 + 타임스탬프 (facturas, presupuestos)
- SoftDeleteModel: 사용자 소유 + 소프트 삭제 (movimientos)
"""

from django.conf import settings
from django.db import models


class TimeStampedModel(models.Model):
    """생성/수정 시간 자동 추적"""

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class UserOwnedQuerySet(models.QuerySet):
    def for_user(self, user):
        return self.filter(user=user)


class UserOwnedModel(TimeStampedModel):
    """사용자 소유 리소스 (타임스탬프 포함)"""

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='%(class)s_set',
        db_index=True
    )

    objects = UserOwnedQuerySet.as_manager()

    class Meta:
        abstract = True

    def is_owner(self, user):
        return self.user_id == getattr(user, 'pk', None)


class ActiveQuerySet(UserOwnedQuerySet):
    def active(self):
        return self.filter(is_active=True)


class SoftDeleteManager(models.Manager.from_queryset(ActiveQuerySet)):
    """활성 데이터만 조회하는 Manager"""

    def get_queryset(self):
        return super().get_queryset().filter(is_active=True)


class SoftDeleteModel(UserOwnedModel):
    """
    소프트 삭제 지원 추상 모델

    삭제된 거래도 과거 신고 내역 재현을 위해 DB에 남긴다.
    집계(대시보드/신고)는 항상 active 매니저로 조회한다.

    Managers:
        objects: 모든 레코드 (삭제 포함)
        active: 활성 레코드만 (is_active=True)
    """
    is_active = models.BooleanField(default=True, db_index=True)

    objects = ActiveQuerySet.as_manager()
    active = SoftDeleteManager()

    class Meta:
        abstract = True

    def soft_delete(self):
        self.is_active = False
        self.save(update_fields=['is_active', 'updated_at'])

    def restore(self):
        self.is_active = True
        self.save(update_fields=['is_active', 'updated_at'])
