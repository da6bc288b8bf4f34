from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/', include('apps.invoices.urls')),
    path('api/transactions/', include('apps.transactions.urls')),
    path('api/stats/', include('apps.dashboard.urls')),
]
