from datetime import date

import pytest

from financeflow.backend import MockBackend, SQLiteBackend, create_backend
from financeflow.exceptions import AuthenticationError, NotFoundError
from financeflow.models import TransactionDraft, TransactionType


def draft(amount, when, description='Lunch', category='food', txn_type='expense'):
    return TransactionDraft(amount=amount, category=category, description=description, date=when, type=txn_type)


@pytest.fixture(params=['sqlite', 'mock'])
def backend(request, tmp_path):
    if request.param == 'sqlite':
        return SQLiteBackend(db_path=tmp_path / 'contract.db')
    return MockBackend(auth_delay=0, seed_demo_user=False)


@pytest.fixture
def user_id(backend):
    return backend.sign_up('asha@example.com', 'secret1', 'Asha Rao').user.id


def test_sign_up_then_sign_in(backend):
    session = backend.sign_up('asha@example.com', 'secret1', 'Asha Rao')
    assert session.user.email == 'asha@example.com'
    assert not session.user.onboarding_complete
    backend.sign_out()
    assert backend.get_session() is None

    again = backend.sign_in('ASHA@example.com', 'secret1')
    assert again.user.id == session.user.id
    assert backend.get_session().user.id == session.user.id


def test_sign_in_rejects_bad_credentials(backend, user_id):
    with pytest.raises(AuthenticationError, match='Invalid login credentials'):
        backend.sign_in('asha@example.com', 'nope')
    with pytest.raises(AuthenticationError):
        backend.sign_in('nobody@example.com', 'secret1')


def test_sign_up_rejects_duplicates_and_short_passwords(backend, user_id):
    with pytest.raises(AuthenticationError, match='already registered'):
        backend.sign_up('asha@example.com', 'secret1', 'Again')
    with pytest.raises(AuthenticationError):
        backend.sign_up('new@example.com', '123', 'Short')


def test_auth_state_handlers(backend):
    events = []
    unsubscribe = backend.on_auth_state_change(events.append)
    session = backend.sign_up('asha@example.com', 'secret1', 'Asha Rao')
    backend.sign_out()
    unsubscribe()
    backend.sign_in('asha@example.com', 'secret1')
    assert events == [session, None]


def test_update_profile(backend, user_id):
    updated = backend.update_profile(
        user_id, monthly_budget=2500, selected_categories=['food', 'bills'], onboarding_complete=True,
    )
    assert updated.monthly_budget == 2500
    assert updated.selected_categories == ('food', 'bills')
    assert updated.onboarding_complete
    assert backend.get_profile(user_id) == updated


def test_update_profile_rejects_unknown_fields(backend, user_id):
    with pytest.raises(ValueError):
        backend.update_profile(user_id, email='other@example.com')


def test_missing_profile(backend):
    with pytest.raises(NotFoundError):
        backend.get_profile('missing')


def test_transactions_are_listed_newest_first(backend, user_id):
    backend.insert_transactions(user_id, [
        draft(100, date(2024, 3, 1), 'First'),
        draft(200, date(2024, 3, 5), 'Second'),
        draft(300, date(2024, 2, 1), 'Third'),
    ])
    same_day = backend.insert_transaction(user_id, draft(50, date(2024, 3, 5), 'Later same day'))
    listed = backend.list_transactions(user_id)
    assert [t.description for t in listed] == ['Later same day', 'Second', 'First', 'Third']
    assert listed[0] == same_day


def test_update_and_delete_transaction(backend, user_id):
    created = backend.insert_transaction(user_id, draft(100, date(2024, 3, 1)))
    updated = backend.update_transaction(user_id, created.id, amount=150, type='income')
    assert updated.amount == 150
    assert updated.type is TransactionType.INCOME
    assert updated.description == 'Lunch'
    assert backend.get_transaction(user_id, created.id) == updated

    backend.delete_transaction(user_id, created.id)
    assert backend.list_transactions(user_id) == []
    with pytest.raises(NotFoundError):
        backend.delete_transaction(user_id, created.id)
    with pytest.raises(NotFoundError):
        backend.update_transaction(user_id, created.id, amount=1)


def test_transactions_are_scoped_to_user(backend, user_id):
    other = backend.sign_up('other@example.com', 'secret1', 'Other').user.id
    created = backend.insert_transaction(user_id, draft(100, date(2024, 3, 1)))
    assert backend.list_transactions(other) == []
    assert backend.get_transaction(other, created.id) is None


def test_delete_all_transactions(backend, user_id):
    backend.insert_transactions(user_id, [draft(1, date(2024, 3, 1)), draft(2, date(2024, 3, 2))])
    assert backend.delete_all_transactions(user_id) == 2
    assert backend.list_transactions(user_id) == []


def test_mock_backend_ships_demo_user():
    backend = MockBackend(auth_delay=0)
    session = backend.sign_in('demo@financeflow.com', 'demo123')
    assert session.user.onboarding_complete
    assert session.user.monthly_budget == 50000


def test_mock_backend_expire_session_notifies():
    backend = MockBackend(auth_delay=0)
    events = []
    backend.on_auth_state_change(events.append)
    backend.sign_in('demo@financeflow.com', 'demo123')
    backend.expire_session()
    assert events[-1] is None
    assert backend.get_session() is None


def test_mock_backend_simulates_latency(monkeypatch):
    delays = []
    monkeypatch.setattr('financeflow.backend.time.sleep', delays.append)
    backend = MockBackend(auth_delay=0.8)
    backend.sign_in('demo@financeflow.com', 'demo123')
    assert delays == [0.8]


def test_create_backend():
    assert isinstance(create_backend('mock'), MockBackend)
    assert isinstance(create_backend('sqlite'), SQLiteBackend)
    with pytest.raises(ValueError):
        create_backend('postgres')
