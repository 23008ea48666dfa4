from django.urls import path

from . import views, views_auth

app_name = "corecode"

urlpatterns = [
    path("", views.dashboard, name="dashboard"),
    path("settings/", views.site_settings, name="site_settings"),
    path("logs/", views.user_logs, name="user_logs"),

    # Auth
    path("login/", views_auth.login_view, name="login"),
    path("logout/", views_auth.logout_view, name="logout"),
    path("signup/", views_auth.signup_view, name="signup"),
]
