from __future__ import annotations

from loguru import logger
from sqlalchemy import func
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from jobboard.errors import PersistenceConflict
from jobboard.models.match import Match, MatchStatus

_ON_CONFLICT_INSERTS = {
    "sqlite": sqlite.insert,
    "postgresql": postgresql.insert,
}


def _clamp_score(score: int) -> int:
    return min(100, max(0, int(score)))


class MatchStore:
    """Owns persistence of match records, one row per (student_id, job_id)."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def find(self, student_id: int, job_id: int) -> Match | None:
        return (
            self.db.query(Match)
            .filter(Match.student_id == student_id, Match.job_id == job_id)
            .populate_existing()
            .first()
        )

    def get(self, match_id: int) -> Match | None:
        return self.db.query(Match).filter(Match.id == match_id).first()

    def upsert(
        self,
        student_id: int,
        job_id: int,
        score: int,
        status: MatchStatus = MatchStatus.PENDING,
    ) -> tuple[Match, bool]:
        """Insert or rescore the match for one pair.

        A rescored match always goes back to the review queue, so status is
        reset along with the score. Returns the stored row and whether it was
        newly created.
        """
        score = _clamp_score(score)
        status_value = MatchStatus(status).value
        created = self.find(student_id, job_id) is None

        insert = _ON_CONFLICT_INSERTS.get(self.db.get_bind().dialect.name)
        if insert is not None:
            stmt = insert(Match).values(student_id=student_id, job_id=job_id, match_score=score, status=status_value)
            stmt = stmt.on_conflict_do_update(
                index_elements=[Match.student_id, Match.job_id],
                set_={"match_score": score, "status": status_value, "updated_at": func.now()},
            )
            self.db.execute(stmt)
            self.db.commit()
        else:
            self._insert_or_update(student_id, job_id, score, status_value)

        record = self.find(student_id, job_id)
        if record is None:
            raise PersistenceConflict("Match row missing after upsert", candidate_id=student_id, job_id=job_id)
        return record, created

    def _insert_or_update(self, student_id: int, job_id: int, score: int, status: str) -> None:
        try:
            self.db.add(Match(student_id=student_id, job_id=job_id, match_score=score, status=status))
            self.db.commit()
            return
        except IntegrityError:
            self.db.rollback()
            logger.debug(f"Concurrent insert for student {student_id} job {job_id}, updating instead")

        updated = (
            self.db.query(Match)
            .filter(Match.student_id == student_id, Match.job_id == job_id)
            .update(
                {Match.match_score: score, Match.status: status, Match.updated_at: func.now()},
                synchronize_session=False,
            )
        )
        if not updated:
            self.db.rollback()
            raise PersistenceConflict("Could not insert or update match", candidate_id=student_id, job_id=job_id)
        self.db.commit()

    def list_for_student(self, student_id: int, limit: int = 50, offset: int = 0) -> tuple[int, list[Match]]:
        query = self.db.query(Match).filter(Match.student_id == student_id)
        total = query.count()
        rows = query.order_by(Match.match_score.desc(), Match.id.asc()).offset(offset).limit(limit).all()
        return total, rows

    def list_for_job(self, job_id: int, limit: int = 50, offset: int = 0) -> tuple[int, list[Match]]:
        query = self.db.query(Match).filter(Match.job_id == job_id)
        total = query.count()
        rows = query.order_by(Match.match_score.desc(), Match.id.asc()).offset(offset).limit(limit).all()
        return total, rows

    def set_status(self, match: Match, status: MatchStatus) -> Match:
        match.status = MatchStatus(status).value
        self.db.add(match)
        self.db.commit()
        self.db.refresh(match)
        return match

    def delete(self, match: Match) -> None:
        self.db.delete(match)
        self.db.commit()

    def delete_for_job(self, job_id: int) -> int:
        deleted = self.db.query(Match).filter(Match.job_id == job_id).delete(synchronize_session=False)
        self.db.commit()
        return int(deleted)
