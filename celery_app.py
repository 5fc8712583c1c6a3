from dotenv import load_dotenv
from sqlalchemy.orm import sessionmaker
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.pool import NullPool
from celery import Celery
import asyncio
import logging

from app.core.config import settings

load_dotenv()
logger = logging.getLogger(__name__)

celery = Celery(
    "career_assessment_tasks",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND
)
# Each task runs in its own event loop, so connections are never pooled across tasks
engine = create_async_engine(settings.DATABASE_URL, future=True, poolclass=NullPool)
AsyncSessionLocal = sessionmaker(
    engine, expire_on_commit=False, class_=AsyncSession)


async def _record_failure(db, assessment_id: int, user: str, step: str, error: Exception):
    from app.services.logging import log_major_event

    logger.error(
        f"[Celery] Completion {step} failed for assessment {assessment_id}: {str(error)}", exc_info=True)
    await log_major_event(
        db,
        action=f"completion_{step}",
        status="failed",
        user=user,
        details=str(error),
        entity=f"assessment:{assessment_id}",
        source="celery",
    )


async def send_completion_report(assessment_id: int, session_factory=None) -> str:
    """
    Ensure the analysis exists, render the PDF report and email it.

    Every failure is logged and audited; nothing is raised to the worker.
    """
    from app.models.assessment import AssessmentStatus
    from app.repositories.assessment_repo import AssessmentRepository
    from app.repositories.user_repo import get_user_by_id
    from app.services.analysis_service import analysis_service
    from app.services.logging import log_major_event
    from app.services.notification_service import get_notification_service
    from app.services.report_pdf_service import render_report

    session_factory = session_factory or AsyncSessionLocal
    async with session_factory() as db:
        assessment = await AssessmentRepository(db).get_assessment_by_id(assessment_id)
        if not assessment or assessment.status != AssessmentStatus.COMPLETED.value:
            logger.warning(
                f"[Celery] Assessment {assessment_id} is missing or not completed, skipping report")
            return "skipped"

        user = await get_user_by_id(db, assessment.user_id)
        if not user:
            logger.warning(f"[Celery] User for assessment {assessment_id} not found, skipping report")
            return "skipped"
        actor = str(user.user_id)

        analysis = assessment.ai_analysis
        try:
            analysis = (await analysis_service.ensure_analysis(db, assessment))["analysis"]
        except Exception as e:
            await db.rollback()
            await db.refresh(assessment)
            await db.refresh(user)
            await _record_failure(db, assessment_id, actor, "analysis", e)

        pdf_bytes = None
        try:
            pdf_bytes = render_report(assessment, user, analysis)
        except Exception as e:
            await _record_failure(db, assessment_id, actor, "report", e)

        outcome = "sent"
        try:
            status_code = get_notification_service().send_assessment_complete_email(user, pdf_bytes)
            await log_major_event(
                db,
                action="completion_email",
                status="success",
                user=actor,
                details=f"Completion email sent with status {status_code}, report attached: {pdf_bytes is not None}",
                entity=f"assessment:{assessment_id}",
                source="celery",
            )
        except Exception as e:
            outcome = "failed"
            await _record_failure(db, assessment_id, actor, "email", e)

        try:
            await db.commit()
        except Exception as e:
            logger.error(f"[Celery] Could not write audit entries for assessment {assessment_id}: {str(e)}")
        return outcome


@celery.task
def send_completion_report_task(assessment_id):
    logger.info(f"[Celery] Starting completion report task for assessment_id: {assessment_id}")
    try:
        return asyncio.run(send_completion_report(assessment_id))
    except Exception as e:
        logger.error(f"[Celery] Completion report task crashed for assessment {assessment_id}: {str(e)}", exc_info=True)
        return "failed"
