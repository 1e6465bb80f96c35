from sqlalchemy.exc import OperationalError

from src.routers.ballots import models
from src.routers.ballots.controller import get_ballot_sheet, get_election_results, submit_ballot
from src.routers.ballots.outcomes import BallotError, BallotReceipt, ErrorCode
from src.routers.ballots.recorder import BallotRecorder
from src.utils.jwt import CallerIdentity
from tests.conftest import VOTING_DAY, count_rows


def _raise_operational(*args, **kwargs):
    raise OperationalError('UPDATE', {}, Exception('connection reset'))


def _submit(db, setup, student_id, selections, caller):
    return submit_ballot(db, setup['election'].election_id, student_id, selections, caller, today=VOTING_DAY)


def _president(setup, *names):
    return {setup['president'].position_id: [setup[n].candidate_id for n in names]}


def test_student_outside_masterlist_is_refused(db, build, ballot_setup, caller):
    build.voter(ballot_setup['election'], '20-1-01457')
    result = _submit(db, ballot_setup, '20-1-01458', _president(ballot_setup, 'pres_a'), caller)
    assert isinstance(result, BallotError)
    assert result.code == ErrorCode.NOT_IN_MASTERLIST
    assert count_rows(db, models.Vote) == 0


def test_over_capacity_is_refused(db, ballot_setup, caller):
    result = _submit(db, ballot_setup, '20-1-01457', _president(ballot_setup, 'pres_a', 'pres_b'), caller)
    assert result.code == ErrorCode.TOO_MANY_SELECTIONS
    assert (result.detail['position'], result.detail['selected'], result.detail['max']) == ('President', 2, 1)


def test_second_ballot_is_refused(db, build, ballot_setup, caller):
    build.voter(ballot_setup['election'], '20-1-01457')
    first = _submit(db, ballot_setup, '20-1-01457', _president(ballot_setup, 'pres_a'), caller)
    assert isinstance(first, BallotReceipt)
    second = _submit(db, ballot_setup, '20-1-01457', _president(ballot_setup, 'pres_b'), caller)
    assert second.code == ErrorCode.ALREADY_VOTED
    assert count_rows(db, models.Vote) == 1


def test_pending_candidate_creates_no_vote(db, ballot_setup, caller):
    s = ballot_setup
    result = _submit(db, s, '20-1-01457', {s['senator'].position_id: [s['sen_pending'].candidate_id]}, caller)
    assert result.code == ErrorCode.CANDIDATE_NOT_APPROVED
    assert count_rows(db, models.Vote) == 0
    assert count_rows(db, models.VoteSelection) == 0


def test_open_mode_ballot_is_counted(db, ballot_setup, caller):
    s = ballot_setup
    selections = {
        s['president'].position_id: [s['pres_a'].candidate_id],
        s['senator'].position_id: [s['sen_a'].candidate_id, s['sen_b'].candidate_id],
    }
    receipt = _submit(db, s, '21-2-00001', selections, caller)
    assert isinstance(receipt, BallotReceipt)

    voter = db.query(models.Voter).filter_by(student_id='21-2-00001').one()
    assert voter.is_voted is True
    assert voter.source == models.VoterSourceEnum.self_registered
    assert db.query(models.Vote).filter_by(voter_id=voter.voter_id).count() == 1
    assert db.query(models.VoteSelection).filter_by(vote_id=receipt.vote_id).count() == 3

    tally = get_election_results(db, s['election'].election_id)
    assert tally.total_voters_who_voted == 1
    counts = {c.candidate_id: c.vote_count for p in tally.positions for c in p.candidates}
    assert counts[s['pres_a'].candidate_id] == 1
    assert counts[s['sen_a'].candidate_id] == 1
    assert counts[s['sen_b'].candidate_id] == 1
    assert counts[s['pres_b'].candidate_id] == 0


def test_failed_validation_leaves_retry_possible(db, ballot_setup, caller):
    s = ballot_setup
    assert _submit(db, s, '21-2-00001', {}, caller).code == ErrorCode.NO_SELECTIONS
    receipt = _submit(db, s, '21-2-00001', _president(s, 'pres_a'), caller)
    assert isinstance(receipt, BallotReceipt)
    assert db.query(models.Voter).filter_by(student_id='21-2-00001').count() == 1


def test_at_most_one_vote_per_student(db, build, ballot_setup):
    s = ballot_setup
    for attempt in range(4):
        caller = CallerIdentity(user_id=f'user-{attempt}', email=f'user{attempt}@campus.edu')
        _submit(db, s, '21-2-00009', _president(s, 'pres_a' if attempt % 2 else 'pres_b'), caller)
    owned = (
        db.query(models.Vote)
        .join(models.Voter, models.Voter.voter_id == models.Vote.voter_id)
        .filter(models.Voter.election_id == s['election'].election_id,
                models.Voter.student_id == '21-2-00009')
        .count()
    )
    assert owned == 1


def test_ballot_sheet(db, build, ballot_setup, caller):
    s = ballot_setup
    sheet = get_ballot_sheet(db, s['election'].election_id, caller, today=VOTING_DAY)
    assert sheet['voting_open'] is True
    assert sheet['already_voted'] is False
    assert sheet['election_type'] == 'University-Wide'
    senator = next(p for p in sheet['positions'] if p['title'] == 'Senator')
    assert [c['full_name'] for c in senator['candidates']] == ['Carla Lim', 'Dan Cruz', 'Eve Tan']

    _submit(db, s, '21-2-00001', _president(s, 'pres_a'), caller)
    sheet = get_ballot_sheet(db, s['election'].election_id, caller, today=VOTING_DAY)
    assert sheet['already_voted'] is True


def test_ballot_sheet_for_unknown_election(db, caller):
    assert get_ballot_sheet(db, 77, caller).code == ErrorCode.ELECTION_NOT_FOUND


def test_ballot_sheet_marks_archived_closed(db, build, caller):
    election = build.election(is_archived=True)
    sheet = get_ballot_sheet(db, election.election_id, caller, today=VOTING_DAY)
    assert sheet['voting_open'] is False


def test_resubmission_after_unmarked_ballot_is_already_voted(db, ballot_setup, caller, monkeypatch):
    s = ballot_setup
    with monkeypatch.context() as m:
        m.setattr(BallotRecorder, '_mark_voted', _raise_operational)
        receipt = _submit(db, s, '21-2-00001', _president(s, 'pres_a'), caller)
    assert receipt.voter_marked is False

    for _ in range(3):
        result = _submit(db, s, '21-2-00001', _president(s, 'pres_b'), caller)
        assert isinstance(result, BallotError)
        assert result.code == ErrorCode.ALREADY_VOTED
    assert count_rows(db, models.Vote) == 1
    tally = get_election_results(db, s['election'].election_id)
    assert tally.total_voters_who_voted == 1
