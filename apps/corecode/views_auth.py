from django.contrib.auth import authenticate, login, logout
from django.http import JsonResponse
from django.views.decorators.http import require_POST

from .forms import EmailLoginForm, SignUpForm
from .utils import form_errors, log_user_action


def _user_payload(user):
    return {
        'id': user.pk,
        'username': user.get_username(),
        'email': user.email,
        'full_name': user.get_full_name(),
    }


@require_POST
def login_view(request):
    """Session login; user_logged_in writes the audit entry"""
    form = EmailLoginForm(request, data=request.POST)
    if not form.is_valid():
        return JsonResponse({'success': False, 'errors': form_errors(form)}, status=400)

    login(request, form.get_user())
    return JsonResponse({'success': True, 'user': _user_payload(form.get_user())})


@require_POST
def logout_view(request):
    logout(request)
    return JsonResponse({'success': True})


@require_POST
def signup_view(request):
    form = SignUpForm(request.POST)
    if not form.is_valid():
        return JsonResponse({'success': False, 'errors': form_errors(form)}, status=400)

    user = form.save()
    log_user_action('Sign Up', f"Account created for {user.email}", request=request, user=user)

    user = authenticate(
        request,
        username=user.get_username(),
        password=form.cleaned_data['password1'],
    )
    if user is not None:
        login(request, user)
    return JsonResponse({'success': True, 'user': _user_payload(form.instance)}, status=201)
