"""
Finance dashboard loader.

KPIs, the monthly trend and the period summary are fetched concurrently;
each piece is stored as soon as its own call returns.
"""
import logging
import threading
from concurrent.futures import ThreadPoolExecutor

from .http import ApiClient
from .results import ApiResult

logger = logging.getLogger('garment.client')

DASHBOARD_PIECES = ('kpis', 'monthly', 'summary')


class FinanceService:
    def __init__(self, client: ApiClient):
        self.client = client

    def get_kpis(self) -> ApiResult:
        return self.client.get('/api/finance/kpis/', 'Failed to fetch financial KPIs')

    def get_monthly(self) -> ApiResult:
        return self.client.get('/api/finance/monthly/', 'Failed to fetch monthly financial data')

    def get_summary(self, start_date=None, end_date=None) -> ApiResult:
        params = {}
        if start_date:
            params['start_date'] = str(start_date)
        if end_date:
            params['end_date'] = str(end_date)
        return self.client.get('/api/finance/summary/', 'Failed to fetch financial summary', params=params)


class FinanceDashboard:
    """
    Holds ``kpis``, ``monthly`` and ``summary`` plus per-piece ``errors``.

    ``loading`` stays true while any of the three calls is outstanding.
    ``on_update(name, dashboard)`` is called after each piece resolves.
    """

    def __init__(self, service: FinanceService, on_update=None):
        self.service = service
        self.on_update = on_update
        self.kpis = None
        self.monthly = []
        self.summary = None
        self.errors = {}
        self.unauthorized = False
        self._pending = set()
        self._lock = threading.Lock()

    @property
    def loading(self):
        with self._lock:
            return bool(self._pending)

    def _store(self, name, result, key):
        with self._lock:
            if result.success:
                setattr(self, name, result.get(key))
                self.errors.pop(name, None)
            else:
                self.errors[name] = result.message
                if result.is_unauthorized:
                    self.unauthorized = True
            self._pending.discard(name)
        if not result.success:
            logger.warning(f"Finance dashboard {name} failed: {result.message}")
        if self.on_update:
            self.on_update(name, self)

    def load(self, start_date=None, end_date=None):
        """Fetch all three pieces; returns once every call has finished"""
        calls = {
            'kpis': (self.service.get_kpis, (), 'kpis'),
            'monthly': (self.service.get_monthly, (), 'monthly_data'),
            'summary': (self.service.get_summary, (start_date, end_date), 'financial_summary'),
        }
        with self._lock:
            self._pending = set(DASHBOARD_PIECES)
            self.errors = {}
            self.unauthorized = False

        def fetch(name):
            func, args, key = calls[name]
            try:
                result = func(*args)
            except Exception as e:
                logger.exception(f"Finance dashboard {name} raised")
                result = ApiResult.fail(str(e))
            self._store(name, result, key)

        with ThreadPoolExecutor(max_workers=len(DASHBOARD_PIECES), thread_name_prefix='finance-dashboard') as pool:
            list(pool.map(fetch, DASHBOARD_PIECES))
        return self
