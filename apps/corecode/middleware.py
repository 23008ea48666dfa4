from django.conf import settings

from .models import SiteConfig


class SiteWideConfigs:
    """Attach the school name and currency symbol to every request"""

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        request.school_name = SiteConfig.get_value(SiteConfig.SCHOOL_NAME, settings.SCHOOL_NAME)
        request.currency_symbol = SiteConfig.get_value(SiteConfig.CURRENCY_SYMBOL, settings.CURRENCY_SYMBOL)

        response = self.get_response(request)

        return response
