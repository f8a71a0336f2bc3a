import pytest

from backoffice import create_app
from backoffice.deductions import DeductionOverrides
from backoffice.extensions import db
from backoffice.models import Company, Employee
from backoffice.services import init_services
from backoffice.store import SqlRecordStore, StoreError


class ManualTimer:
    """Заменитель threading.Timer: срабатывает только по fire()."""

    def __init__(self, interval, function, args=(), kwargs=None):
        self.interval = interval
        self.function = function
        self.args = args
        self.kwargs = kwargs or {}
        self.daemon = False
        self.started = False
        self.cancelled = False
        self.fired = False

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        if self.started and not self.cancelled and not self.fired:
            self.fired = True
            self.function(*self.args, **self.kwargs)


class ManualClock:
    def __init__(self):
        self.timers: list[ManualTimer] = []

    def __call__(self, interval, function, args=(), kwargs=None):
        t = ManualTimer(interval, function, args, kwargs)
        self.timers.append(t)
        return t

    def live(self):
        return [t for t in self.timers if t.started and not t.cancelled and not t.fired]

    def fire_all(self):
        for t in self.live():
            t.fire()


class FlakyStore(SqlRecordStore):
    """SqlRecordStore, который падает на выбранных операциях."""

    def __init__(self, fail_on=()):
        super().__init__()
        self.fail_on = set(fail_on)

    def _maybe_fail(self, op):
        if op in self.fail_on:
            raise StoreError(f"{op}: connection reset")

    def add(self, collection, data):
        self._maybe_fail("add")
        return super().add(collection, data)

    def update(self, collection, record_id, partial):
        self._maybe_fail("update")
        return super().update(collection, record_id, partial)

    def delete(self, collection, record_id):
        self._maybe_fail("delete")
        return super().delete(collection, record_id)

    def query(self, collection, conditions=(), order_by=None, direction="asc", limit=None):
        self._maybe_fail("query")
        return super().query(collection, conditions, order_by, direction, limit)


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def app(clock):
    app = create_app({
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": "sqlite://",
        "PAYROLL_EXCLUDED_COMPANIES": ("DELIFOOD",),
    })
    with app.app_context():
        db.create_all()
        init_services(app, overrides=DeductionOverrides(delay=1.0, timer_factory=clock))
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def svc(app):
    return app.extensions["backoffice"]


@pytest.fixture
def store(app):
    return SqlRecordStore()


@pytest.fixture
def companies(app):
    db.session.add_all([
        Company(key="PALMARES", name="Palmares Centro", is_active=True),
        Company(key="SANRAMON", name="San Ramón", is_active=True),
        Company(key="DELIFOOD", name="Delifood", is_active=True),
    ])
    db.session.add_all([
        Employee(company_key="PALMARES", name="Ana Mora", ccss_type="MT", hours_per_shift=8, extra_amount=0),
        Employee(company_key="PALMARES", name="Luis Soto", ccss_type="TC", hours_per_shift=6, extra_amount=2500),
        Employee(company_key="SANRAMON", name="María Vargas", ccss_type="TC", hours_per_shift=8, extra_amount=0),
        Employee(company_key="DELIFOOD", name="Pedro Ruiz", ccss_type="TC", hours_per_shift=8, extra_amount=0),
    ])
    db.session.commit()
