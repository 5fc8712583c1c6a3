"""
Assessment Service - Business logic for the assessment lifecycle:
start, incremental saves, submission with scoring, and abandonment
"""
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import ConflictError, InvalidStateError, NotFoundError, ValidationError
from app.models.assessment import Assessment, AssessmentStatus
from app.models.question import Question
from app.repositories.assessment_repo import AssessmentRepository
from app.repositories.question_repo import QuestionRepository
from app.services.assessment_engine import (
    calculate_scores,
    completion_percentage,
    compute_category_progress,
    empty_scores,
    ensure_transition,
    initial_category_progress,
    merge_responses,
)
from app.services.completion_dispatch import dispatch_completion_side_effects
from app.services.logging import log_major_event

logger = logging.getLogger(__name__)


class AssessmentService:
    """Service class for assessment business logic"""

    async def _get_owned(self, db: AsyncSession, user_id: int, assessment_id: int) -> Assessment:
        assessment = await AssessmentRepository(db).get_user_assessment(user_id, assessment_id)
        if not assessment:
            raise NotFoundError(f"Assessment {assessment_id} not found")
        return assessment

    async def start_assessment(self, db: AsyncSession, user_id: int) -> Tuple[Assessment, bool]:
        """
        Start a new assessment or return the user's active one

        Returns:
            (assessment, created) - created is False when an active assessment already existed
        """
        repo = AssessmentRepository(db)
        existing = await repo.get_active_assessment(user_id)
        if existing:
            logger.info(
                f"User {user_id} already has active assessment {existing.assessment_id}")
            return existing, False

        now = datetime.now(timezone.utc)
        try:
            assessment = await repo.create_assessment(
                user_id=user_id,
                status=AssessmentStatus.IN_PROGRESS.value,
                responses=[],
                current_step=1,
                current_category="interest",
                time_spent_minutes=0,
                category_progress=initial_category_progress(),
                questions_answered=0,
                total_questions=settings.TOTAL_QUESTIONS,
                completion_percentage=0,
                scores=empty_scores(),
                started_at=now,
                last_saved_at=now,
            )
        except ConflictError:
            # Lost a concurrent start; the winner's assessment is the active one
            existing = await repo.get_active_assessment(user_id)
            if existing is None:
                raise
            return existing, False

        await log_major_event(
            db,
            action="assessment_started",
            status="success",
            user=str(user_id),
            details=f"Assessment {assessment.assessment_id} started",
            entity=f"assessment:{assessment.assessment_id}",
            source="assessment_service",
        )
        await db.commit()
        return assessment, True

    async def save_progress(
        self,
        db: AsyncSession,
        user_id: int,
        assessment_id: int,
        responses: Iterable[Dict[str, Any]],
        current_step: Optional[int] = None,
        current_category: Optional[str] = None,
        time_spent_minutes: Optional[int] = None,
    ) -> Dict[str, Any]:
        """
        Merge a partial batch of answers into the assessment

        Raises:
            NotFoundError: Unknown assessment or unknown question id
            InvalidStateError: Assessment is completed or abandoned
        """
        assessment = await self._get_owned(db, user_id, assessment_id)
        if assessment.status == AssessmentStatus.COMPLETED.value:
            raise InvalidStateError("Cannot modify completed assessment")
        if assessment.status == AssessmentStatus.ABANDONED.value:
            raise InvalidStateError("Cannot modify abandoned assessment")

        incoming = [dict(r) for r in responses]
        question_repo = QuestionRepository(db)
        incoming_ids = {str(r["question_id"]) for r in incoming}
        known = await question_repo.get_question_map(incoming_ids)
        missing = sorted(incoming_ids - set(known))
        if missing:
            raise NotFoundError(f"Question {missing[0]} not found")

        now = datetime.now(timezone.utc)
        merged = merge_responses(assessment.responses, incoming, now=now)
        question_map = await question_repo.get_question_map(r["question_id"] for r in merged)
        categories = {qid: q.category for qid, q in question_map.items()}

        if assessment.status == AssessmentStatus.NOT_STARTED.value:
            ensure_transition(assessment.status, AssessmentStatus.IN_PROGRESS)
            assessment.status = AssessmentStatus.IN_PROGRESS.value
            assessment.started_at = assessment.started_at or now

        # JSON columns are reassigned, never mutated in place
        assessment.responses = merged
        assessment.questions_answered = len(merged)
        assessment.completion_percentage = completion_percentage(
            len(merged), assessment.total_questions)
        assessment.category_progress = compute_category_progress(merged, categories)
        assessment.last_saved_at = now
        if current_step is not None:
            assessment.current_step = current_step
        if current_category is not None:
            assessment.current_category = current_category
        if time_spent_minutes is not None:
            assessment.time_spent_minutes = time_spent_minutes

        assessment = await AssessmentRepository(db).save(assessment)
        logger.info(
            f"Saved progress for assessment {assessment_id}: {assessment.questions_answered}/{assessment.total_questions}")
        return {
            "assessment_id": assessment.assessment_id,
            "questions_answered": assessment.questions_answered,
            "completion_percentage": assessment.completion_percentage,
            "current_step": assessment.current_step,
            "current_category": assessment.current_category,
            "category_progress": assessment.category_progress,
            "last_saved_at": assessment.last_saved_at,
        }

    async def submit_assessment(self, db: AsyncSession, user_id: int, assessment_id: int) -> Dict[str, Any]:
        """
        Score and complete the assessment, then dispatch completion side effects

        Re-submitting a completed assessment returns the stored result unchanged.

        Raises:
            NotFoundError: Unknown assessment
            InvalidStateError: Assessment was abandoned
            ValidationError: Questions are still unanswered
        """
        assessment = await self._get_owned(db, user_id, assessment_id)

        if assessment.status == AssessmentStatus.COMPLETED.value:
            logger.info(f"Assessment {assessment_id} already submitted")
            return {
                "assessment_id": assessment.assessment_id,
                "status": assessment.status,
                "scores": assessment.scores,
                "completed_at": assessment.completed_at,
                "already_completed": True,
            }
        if assessment.status == AssessmentStatus.ABANDONED.value:
            raise InvalidStateError("Cannot submit an abandoned assessment")

        remaining = assessment.total_questions - (assessment.questions_answered or 0)
        if remaining > 0:
            raise ValidationError(
                f"Please answer all questions. {remaining} questions remaining.")

        ensure_transition(assessment.status, AssessmentStatus.COMPLETED)
        responses = assessment.responses or []
        question_map = await QuestionRepository(db).get_question_map(
            r["question_id"] for r in responses)

        assessment.scores = calculate_scores(responses, question_map)
        assessment.status = AssessmentStatus.COMPLETED.value
        assessment.completion_percentage = 100
        assessment.completed_at = datetime.now(timezone.utc)

        await log_major_event(
            db,
            action="assessment_submitted",
            status="success",
            user=str(user_id),
            details=f"Assessment {assessment_id} completed with {len(responses)} responses",
            entity=f"assessment:{assessment_id}",
            source="assessment_service",
        )
        assessment = await AssessmentRepository(db).save(assessment)
        logger.info(f"Assessment {assessment_id} submitted by user {user_id}")

        dispatch_completion_side_effects(assessment.assessment_id)

        return {
            "assessment_id": assessment.assessment_id,
            "status": assessment.status,
            "scores": assessment.scores,
            "completed_at": assessment.completed_at,
            "already_completed": False,
        }

    async def abandon_assessment(self, db: AsyncSession, user_id: int, assessment_id: int) -> Assessment:
        """Move a non-terminal assessment to abandoned"""
        assessment = await self._get_owned(db, user_id, assessment_id)
        ensure_transition(assessment.status, AssessmentStatus.ABANDONED)
        assessment.status = AssessmentStatus.ABANDONED.value

        await log_major_event(
            db,
            action="assessment_abandoned",
            status="success",
            user=str(user_id),
            details=f"Assessment {assessment_id} abandoned at {assessment.questions_answered} answers",
            entity=f"assessment:{assessment_id}",
            source="assessment_service",
        )
        assessment = await AssessmentRepository(db).save(assessment)
        logger.info(f"Assessment {assessment_id} abandoned")
        return assessment

    async def resume_assessment(self, db: AsyncSession, user_id: int) -> Assessment:
        assessment = await AssessmentRepository(db).get_in_progress_assessment(user_id)
        if not assessment:
            raise NotFoundError("No in-progress assessment found")
        return assessment

    async def list_my_assessments(self, db: AsyncSession, user_id: int) -> List[Assessment]:
        return await AssessmentRepository(db).get_assessments_by_user(user_id)

    async def get_assessment(self, db: AsyncSession, user_id: int, assessment_id: int) -> Assessment:
        return await self._get_owned(db, user_id, assessment_id)

    async def list_questions(self, db: AsyncSession, category: Optional[str] = None, active_only: bool = True) -> List[Question]:
        return await QuestionRepository(db).list_questions(category=category, active_only=active_only)


# Singleton instance
assessment_service = AssessmentService()
