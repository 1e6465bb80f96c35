from datetime import date, datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from src.database import Base, get_db
from src.routers.ballots import models
from src.routers.ballots.main import today_override
from src.utils.jwt import CallerIdentity, create_access_token

VOTING_DAY = date(2026, 3, 10)
VOTER_EMAIL = 'voter@campus.edu'


@pytest.fixture
def engine():
    engine = create_engine(
        'sqlite://',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, 'connect')
    def _enable_foreign_keys(dbapi_connection, connection_record):
        dbapi_connection.execute('PRAGMA foreign_keys=ON')

    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(bind=engine, autocommit=False, autoflush=False)()
    yield session
    session.close()


@pytest.fixture
def caller():
    return CallerIdentity(user_id='user-1', email=VOTER_EMAIL)


class Builder:
    """Inserts fixture rows the way the officer screens would."""

    def __init__(self, db):
        self.db = db

    def _save(self, obj):
        self.db.add(obj)
        self.db.commit()
        self.db.refresh(obj)
        return obj

    def election(self, **kwargs):
        values = dict(
            name='Student Council 2026',
            start_date=datetime(2026, 3, 9, 8, 0),
            end_date=datetime(2026, 3, 12, 17, 0),
            is_archived=False,
        )
        values.update(kwargs)
        return self._save(models.Election(**values))

    def position(self, election, title='President', max_votes=1):
        return self._save(models.Position(
            election_id=election.election_id, title=title, max_votes=max_votes,
        ))

    def partylist(self, election, name='Bagong Sibol', acronym='BS'):
        return self._save(models.Partylist(
            election_id=election.election_id, name=name, acronym=acronym,
        ))

    def candidate(self, position, full_name='Juan Dela Cruz', status='approved', partylist=None):
        return self._save(models.Candidate(
            election_id=position.election_id,
            position_id=position.position_id,
            partylist_id=partylist.partylist_id if partylist else None,
            full_name=full_name,
            application_status=models.ApplicationStatusEnum(status),
        ))

    def voter(self, election, student_id, is_voted=False, source='masterlist', email=None):
        return self._save(models.Voter(
            election_id=election.election_id,
            student_id=student_id,
            is_voted=is_voted,
            email=email,
            source=models.VoterSourceEnum(source),
        ))


@pytest.fixture
def build(db):
    return Builder(db)


@pytest.fixture
def ballot_setup(build):
    """Open election with a President (1 seat) and Senator (2 seats) race."""
    election = build.election()
    president = build.position(election, 'President', 1)
    senator = build.position(election, 'Senator', 2)
    party = build.partylist(election)
    return {
        'election': election,
        'president': president,
        'senator': senator,
        'pres_a': build.candidate(president, 'Ana Reyes', partylist=party),
        'pres_b': build.candidate(president, 'Ben Santos'),
        'sen_a': build.candidate(senator, 'Carla Lim', partylist=party),
        'sen_b': build.candidate(senator, 'Dan Cruz'),
        'sen_c': build.candidate(senator, 'Eve Tan'),
        'sen_pending': build.candidate(senator, 'Finn Go', status='pending'),
    }


def count_rows(db, model):
    return db.query(model).count()


@pytest.fixture
def client(db):
    from main import app

    def _get_test_db():
        yield db

    app.dependency_overrides[get_db] = _get_test_db
    app.dependency_overrides[today_override] = lambda: VOTING_DAY
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def auth_headers(email=VOTER_EMAIL, role=None, uid='user-1'):
    claims = {'sub': email, 'uid': uid}
    if role:
        claims['role'] = role
    return {'Authorization': f'Bearer {create_access_token(claims)}'}
