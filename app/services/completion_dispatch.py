"""
Fire-and-forget dispatch of the work that follows a submitted assessment
(analysis, PDF report, completion email).
"""
import logging

logger = logging.getLogger(__name__)


def dispatch_completion_side_effects(assessment_id: int) -> bool:
    """
    Enqueue the completion report task. Failures are logged, never raised.

    Returns:
        True if the task was enqueued
    """
    try:
        from celery_app import send_completion_report_task
        send_completion_report_task.delay(assessment_id)
    except Exception as e:
        logger.error(
            f"Failed to enqueue completion report for assessment {assessment_id}: {str(e)}", exc_info=True)
        return False
    logger.info(f"Enqueued completion report for assessment {assessment_id}")
    return True
