"""
Currency rate endpoint.
"""
import logging

from rest_framework.decorators import api_view
from rest_framework.response import Response

from core.job_roles.decorators import require_active_user
from .services import get_currency_rates

logger = logging.getLogger(__name__)


@api_view(['GET', 'POST'])
@require_active_user
def currency_rates(request):
    """
    GET /finance/currency-rates/
    - Query: refresh=true forces a new fetch
    - Returns cached rates with cache metadata

    POST /finance/currency-rates/
    - Forces a refresh
    """
    force = request.method == 'POST' or request.query_params.get('refresh') == 'true'
    if force:
        logger.info("Currency rates refresh requested by %s", request.user.email)

    data = get_currency_rates(force_refresh=force)
    body = {'success': True}
    if request.method == 'POST':
        body['message'] = 'Currency rates refreshed'
    body.update(data)
    return Response(body)
