from django.utils import timezone
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from garment.core.permissions import IsFinanceViewer
from garment.core.utils import success_response
from . import services


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsFinanceViewer])
def financial_summary(request):
    """
    Revenue, payroll and profit overview, optionally limited to
    ``start_date``/``end_date`` (inclusive, YYYY-MM-DD)
    """
    start_date, end_date = services.parse_period(
        request.query_params.get('start_date'),
        request.query_params.get('end_date'),
    )
    return success_response(financial_summary=services.financial_summary(start_date, end_date))


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsFinanceViewer])
def monthly_finance(request):
    return success_response(monthly_data=services.monthly_finance(timezone.localdate()))


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsFinanceViewer])
def financial_kpis(request):
    return success_response(kpis=services.financial_kpis())
