from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.urls import include, path
from django.views.generic import RedirectView

urlpatterns = [
    path("admin/", admin.site.urls),
    path("", RedirectView.as_view(pattern_name="corecode:dashboard", permanent=False)),
    path("core/", include("apps.corecode.urls")),
    path("admissions/", include("apps.admissions.urls")),
    path("students/", include("apps.students.urls")),
    path("staffs/", include("apps.staffs.urls")),
    path("finance/", include("apps.finance.urls")),
]

if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
