import math
from typing import Any, Dict, List, Optional, Tuple

from fastapi import HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError

from reportcard.api.v1.schemas.mark import MarkEntryItem
from reportcard.core.logger import logger
from reportcard.domain.grading import clamp_0_100
from reportcard.domain.types import MarkKey
from reportcard.models import Mark


def parse_score(raw: Any) -> Optional[float]:
    """
    Validate a score as entered by a teacher.

    Numbers and numeric strings are accepted. ``None`` and blank strings mean
    "not entered" and give None.

    Raises:
        ValueError: the value is not a finite number within 0..100
    """
    if raw is None:
        return None
    if isinstance(raw, bool):
        raise ValueError("Score must be a number")
    if isinstance(raw, str):
        raw = raw.strip()
        if raw == "":
            return None
    try:
        score = float(raw)
    except (TypeError, ValueError) as e:
        raise ValueError("Score must be a number") from e
    if not math.isfinite(score):
        raise ValueError("Score must be a finite number")
    if score < 0 or score > 100:
        raise ValueError("Score must be between 0 and 100")
    return score


class MarkBook:
    """In-memory mark lookup for one student, year and term."""

    def __init__(self, scores: Dict[MarkKey, float]):
        self._scores = scores

    def __call__(self, key: MarkKey) -> Optional[float]:
        return self._scores.get(key)

    def __len__(self) -> int:
        return len(self._scores)


def _key_filter(key: MarkKey):
    paper_clause = Mark.paper_id.is_(None) if key.paper_id is None else Mark.paper_id == key.paper_id
    return (
        Mark.student_id == key.student_id,
        Mark.academic_year_id == key.academic_year_id,
        Mark.term_id == key.term_id,
        Mark.assessment_id == key.assessment_id,
        Mark.subject_id == key.subject_id,
        paper_clause,
    )


class MarkService:
    @staticmethod
    async def get_mark(key: MarkKey, db: AsyncSession) -> Optional[Mark]:
        result = await db.execute(select(Mark).where(*_key_filter(key)))
        return result.scalars().first()

    @staticmethod
    async def _write_mark(key: MarkKey, score100: float, db: AsyncSession) -> Mark:
        score = clamp_0_100(float(score100))
        existing_mark = await MarkService.get_mark(key, db)

        if existing_mark:
            existing_mark.score100 = score
            return existing_mark

        new_mark = Mark(
            student_id=key.student_id,
            academic_year_id=key.academic_year_id,
            term_id=key.term_id,
            assessment_id=key.assessment_id,
            subject_id=key.subject_id,
            paper_id=key.paper_id,
            score100=score,
        )
        db.add(new_mark)
        return new_mark

    @staticmethod
    async def upsert_mark(key: MarkKey, score100: Optional[float], db: AsyncSession) -> Optional[Mark]:
        """
        Store a score for a composite mark key, clamped to 0..100.

        A missing score does not clear an existing mark: nothing is written and
        the stored mark (if any) is returned unchanged.

        Args:
            key: Composite key of the mark
            score100: Score out of 100, or None when nothing was entered
            db: Async SQLAlchemy session

        Returns:
            Optional[Mark]: The stored mark, or None when there is none

        Raises:
            HTTPException: 500 - Database error
        """
        if score100 is None:
            return await MarkService.get_mark(key, db)

        try:
            mark = await MarkService._write_mark(key, score100, db)
            await db.commit()
            await db.refresh(mark)
            logger.info(
                f"[MARK UPDATE] Student {key.student_id}, subject {key.subject_id}, "
                f"assessment {key.assessment_id}: {mark.score100}"
            )
            return mark

        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"[MARK UPDATE] Database error: {str(e)}")
            raise HTTPException(
                status_code=500,
                detail="Error while saving mark"
            ) from e

    @staticmethod
    async def batch_update_marks(marks_data: List[MarkEntryItem], db: AsyncSession) -> Tuple[int, int]:
        """
        Batch entry of marks.

        Every score is validated before anything is written. Blank scores are
        skipped and leave stored marks untouched.

        Args:
            marks_data: Entries with their composite keys and raw scores
            db: Async SQLAlchemy session

        Returns:
            Tuple[int, int]: Number of written marks and number of skipped blank entries

        Raises:
            HTTPException: 400 - Invalid score
            HTTPException: 500 - Database error
        """
        parsed = []
        for item in marks_data:
            try:
                parsed.append((item, parse_score(item.score)))
            except ValueError as e:
                logger.warning(f"[MARK UPDATE] Invalid score for student {item.student_id}: {item.score} - {str(e)}")
                raise HTTPException(
                    status_code=400,
                    detail=f"Invalid score: {item.score}. {str(e)}"
                ) from e

        updated_count = 0
        skipped_count = 0

        try:
            for item, score in parsed:
                if score is None:
                    skipped_count += 1
                    continue

                key = MarkKey(
                    student_id=item.student_id,
                    academic_year_id=item.academic_year_id,
                    term_id=item.term_id,
                    assessment_id=item.assessment_id,
                    subject_id=item.subject_id,
                    paper_id=item.paper_id or None,
                )
                await MarkService._write_mark(key, score, db)
                # flush so a repeated key in the same batch finds the pending row
                await db.flush()
                updated_count += 1

            await db.commit()
            logger.info(f"[MARK UPDATE] Saved {updated_count} marks, skipped {skipped_count} blank entries")
            return updated_count, skipped_count

        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"[MARK UPDATE] Database error: {str(e)}")
            raise HTTPException(
                status_code=500,
                detail="Error while saving marks"
            ) from e

    @staticmethod
    async def load_mark_book(student_id: int, academic_year_id: int, term_id: int, db: AsyncSession) -> MarkBook:
        result = await db.execute(
            select(Mark).where(
                Mark.student_id == student_id,
                Mark.academic_year_id == academic_year_id,
                Mark.term_id == term_id,
            )
        )
        marks = result.scalars().all()
        logger.debug(f"[MARK BOOK] Loaded {len(marks)} marks for student {student_id}")
        return MarkBook({mark.key: mark.score100 for mark in marks})
