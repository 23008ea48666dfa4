from django.contrib.auth.signals import user_logged_in, user_logged_out
from django.dispatch import receiver

from .utils import log_user_action


@receiver(user_logged_in)
def log_login(sender, request, user, **kwargs):
    log_user_action('Login', 'User signed in', request=request, user=user)


@receiver(user_logged_out)
def log_logout(sender, request, user, **kwargs):
    # user is None when the session had already expired
    if user is not None:
        log_user_action('Logout', 'User signed out', request=request, user=user)
