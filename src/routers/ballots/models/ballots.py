# src/routers/ballots/models/ballots.py
import enum
from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime, Enum, ForeignKey,
    CheckConstraint, UniqueConstraint, func,
)
from sqlalchemy.orm import relationship
from src.database import Base


class ElectionTypeEnum(str, enum.Enum):
    university_wide = "University-Wide"
    college_based = "College-Based"
    department_based = "Department-Based"


class ApplicationStatusEnum(str, enum.Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"


class VoterSourceEnum(str, enum.Enum):
    masterlist = "masterlist"
    self_registered = "self_registered"


# -------------------------
#  Election Table
# -------------------------
class Election(Base):
    __tablename__ = "elections"
    __table_args__ = (
        CheckConstraint("end_date > start_date", name="ck_elections_voting_window"),
        CheckConstraint(
            "candidacy_end_date IS NULL OR candidacy_end_date < start_date",
            name="ck_elections_filing_before_voting",
        ),
        CheckConstraint(
            "candidacy_start_date IS NULL OR candidacy_end_date IS NULL "
            "OR candidacy_start_date < candidacy_end_date",
            name="ck_elections_filing_window",
        ),
    )

    election_id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    election_type = Column(
        Enum(ElectionTypeEnum, name="election_type_enum",
             values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=ElectionTypeEnum.university_wide,
    )
    start_date = Column(DateTime, nullable=False)
    end_date = Column(DateTime, nullable=False)
    candidacy_start_date = Column(DateTime, nullable=True)
    candidacy_end_date = Column(DateTime, nullable=True)
    is_archived = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    # Relationships
    positions = relationship("Position", back_populates="election")
    voters = relationship("Voter", back_populates="election")

    def __repr__(self):
        return f"<Election(id={self.election_id}, name={self.name!r})>"


# -------------------------
#  Position Table
# -------------------------
class Position(Base):
    __tablename__ = "positions"
    __table_args__ = (
        CheckConstraint("max_votes > 0", name="ck_positions_max_votes"),
    )

    position_id = Column(Integer, primary_key=True, autoincrement=True)
    election_id = Column(Integer, ForeignKey("elections.election_id"), nullable=False, index=True)
    title = Column(String, nullable=False)
    max_votes = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime, server_default=func.now())

    # Relationships
    election = relationship("Election", back_populates="positions")
    candidates = relationship("Candidate", back_populates="position")


# -------------------------
#  Partylist Table
# -------------------------
class Partylist(Base):
    __tablename__ = "partylists"

    partylist_id = Column(Integer, primary_key=True, autoincrement=True)
    election_id = Column(Integer, ForeignKey("elections.election_id"), nullable=False)
    name = Column(String, nullable=False)
    acronym = Column(String, nullable=False)


# -------------------------
#  Candidate Table
# -------------------------
class Candidate(Base):
    __tablename__ = "candidates"

    candidate_id = Column(Integer, primary_key=True, autoincrement=True)
    election_id = Column(Integer, ForeignKey("elections.election_id"), nullable=False, index=True)
    position_id = Column(Integer, ForeignKey("positions.position_id"), nullable=False)
    partylist_id = Column(Integer, ForeignKey("partylists.partylist_id"), nullable=True)
    full_name = Column(String, nullable=False)
    student_id = Column(String, nullable=True)
    email = Column(String, nullable=True)
    application_status = Column(
        Enum(ApplicationStatusEnum, name="application_status_enum"),
        nullable=False,
        default=ApplicationStatusEnum.pending,
    )

    # Relationships
    position = relationship("Position", back_populates="candidates")
    partylist = relationship("Partylist")


# -------------------------
#  Voter Table (admission ledger)
# -------------------------
class Voter(Base):
    __tablename__ = "voters"
    __table_args__ = (
        UniqueConstraint("election_id", "student_id", name="uq_voters_election_student"),
    )

    voter_id = Column(Integer, primary_key=True, autoincrement=True)
    election_id = Column(Integer, ForeignKey("elections.election_id"), nullable=False, index=True)
    student_id = Column(String, nullable=False)
    email = Column(String, nullable=True)
    is_voted = Column(Boolean, nullable=False, default=False)
    source = Column(
        Enum(VoterSourceEnum, name="voter_source_enum"),
        nullable=False,
        default=VoterSourceEnum.masterlist,
    )
    created_at = Column(DateTime, server_default=func.now())

    # Relationships
    election = relationship("Election", back_populates="voters")

    def __repr__(self):
        return f"<Voter(id={self.voter_id}, student_id={self.student_id!r}, is_voted={self.is_voted})>"


# -------------------------
#  Vote Table
# -------------------------
class Vote(Base):
    __tablename__ = "votes"

    vote_id = Column(Integer, primary_key=True, autoincrement=True)
    # one ballot per voter row
    voter_id = Column(Integer, ForeignKey("voters.voter_id"), nullable=False, unique=True)
    created_at = Column(DateTime, server_default=func.now())


# -------------------------
#  VoteSelection Table
# -------------------------
class VoteSelection(Base):
    __tablename__ = "vote_selections"

    vote_id = Column(Integer, ForeignKey("votes.vote_id", ondelete="CASCADE"), primary_key=True)
    candidate_id = Column(Integer, ForeignKey("candidates.candidate_id"), primary_key=True)
    position_id = Column(Integer, ForeignKey("positions.position_id"), nullable=False)
