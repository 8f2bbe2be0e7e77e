"""Shared fixtures: an in-memory app and members of each role with bearer tokens"""
from collections import namedtuple
from datetime import date, timedelta
from decimal import Decimal
import pytest
from shg import create_app, db
from shg.models import User, LoanType, Role
from shg.utils.tokens import create_access_token

Member = namedtuple('Member', ['id', 'headers'])


@pytest.fixture
def app():
    app = create_app('testing')
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def add_member(app, name, email, role=Role.MEMBER, joining_date=None, inactive_date=None,
               is_active=True, password='secret123'):
    """Insert a member and return its id with ready-made auth headers"""
    with app.app_context():
        user = User(
            name=name,
            email=email,
            username=email,
            role=role.value,
            joining_date=joining_date or date.today() - timedelta(days=365),
            inactive_date=inactive_date,
            is_active=is_active
        )
        user.set_password(password)
        db.session.add(user)
        db.session.commit()
        token, _ = create_access_token(user)
        return Member(user.id, {'Authorization': f'Bearer {token}'})


@pytest.fixture
def secretary(app):
    return add_member(app, 'Sita Secretary', 'secretary@example.com', Role.SECRETARY)


@pytest.fixture
def treasurer(app):
    return add_member(app, 'Tara Treasurer', 'treasurer@example.com', Role.TREASURER)


@pytest.fixture
def member(app):
    return add_member(app, 'Mala Member', 'mala@example.com')


@pytest.fixture
def other_member(app):
    return add_member(app, 'Nila Member', 'nila@example.com')


@pytest.fixture
def loan_type(app):
    with app.app_context():
        loan_type = LoanType(name='Standard', interest_rate=Decimal('2.00'))
        db.session.add(loan_type)
        db.session.commit()
        return loan_type.id


@pytest.fixture
def make_member(app):
    def make(name, email, **kwargs):
        return add_member(app, name, email, **kwargs)
    return make
