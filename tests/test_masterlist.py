import pytest
from fastapi import HTTPException

from src.routers.ballots import models
from src.routers.masterlist import controller


def test_parse_student_ids():
    raw = '20-1-01457 20-1-01458\t20-1-01459\n\n20-1-01457  '
    assert controller.parse_student_ids(raw) == ['20-1-01457', '20-1-01458', '20-1-01459']


def test_add_skips_duplicates(db, build):
    election = build.election()
    build.voter(election, '20-1-01457')
    result = controller.add_to_masterlist(db, election.election_id, '20-1-01457 20-1-01458 20-1-01458')
    assert result == {'added': 1, 'skipped': 1}
    ids = {v.student_id for v in db.query(models.Voter).filter_by(election_id=election.election_id)}
    assert ids == {'20-1-01457', '20-1-01458'}


def test_add_promotes_self_registered_row(db, build):
    election = build.election()
    voter = build.voter(election, '21-2-00001', source='self_registered')
    result = controller.add_to_masterlist(db, election.election_id, '21-2-00001')
    assert result == {'added': 1, 'skipped': 0}
    db.refresh(voter)
    assert voter.source == models.VoterSourceEnum.masterlist


def test_add_nothing(db, build):
    election = build.election()
    with pytest.raises(HTTPException) as exc:
        controller.add_to_masterlist(db, election.election_id, '  \n ')
    assert exc.value.status_code == 400


def test_archived_election_rejects_writes(db, build):
    election = build.election(is_archived=True)
    with pytest.raises(HTTPException) as exc:
        controller.add_to_masterlist(db, election.election_id, '20-1-01457')
    assert exc.value.status_code == 409
    with pytest.raises(HTTPException):
        controller.clear_unvoted(db, election.election_id)


def test_remove_voter(db, build):
    election = build.election()
    voter = build.voter(election, '20-1-01457')
    controller.remove_voter(db, election.election_id, voter.voter_id)
    assert db.query(models.Voter).count() == 0


def test_remove_voted_voter_is_refused(db, build):
    election = build.election()
    voter = build.voter(election, '20-1-01457', is_voted=True)
    with pytest.raises(HTTPException) as exc:
        controller.remove_voter(db, election.election_id, voter.voter_id)
    assert exc.value.status_code == 409


def test_remove_missing_voter(db, build):
    election = build.election()
    with pytest.raises(HTTPException) as exc:
        controller.remove_voter(db, election.election_id, 123)
    assert exc.value.status_code == 404


def test_clear_keeps_voters_who_voted(db, build):
    election = build.election()
    build.voter(election, '20-1-01457', is_voted=True)
    build.voter(election, '20-1-01458')
    build.voter(election, '20-1-01459')
    assert controller.clear_unvoted(db, election.election_id) == 2
    remaining = [v.student_id for v in db.query(models.Voter).all()]
    assert remaining == ['20-1-01457']


def test_clear_keeps_unmarked_ballot_owner(db, build):
    election = build.election()
    voter = build.voter(election, '20-1-01457')
    db.add(models.Vote(voter_id=voter.voter_id))
    db.commit()
    assert controller.clear_unvoted(db, election.election_id) == 0


def test_summary(db, build):
    election = build.election()
    build.voter(election, '20-1-01458', is_voted=True)
    build.voter(election, '20-1-01457')
    summary = controller.masterlist_summary(db, election.election_id)
    assert (summary['total'], summary['voted'], summary['not_voted']) == (2, 1, 1)
    assert [v.student_id for v in summary['voters']] == ['20-1-01457', '20-1-01458']
