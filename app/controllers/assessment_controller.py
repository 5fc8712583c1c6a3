from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.exceptions import CareerCoreError, status_code_for
from app.core.security import get_current_user
from app.db.database import get_db
from app.models.question import QuestionCategory
from app.models.user import User
from app.schemas.assessment_schema import (
    AssessmentResponse,
    AssessmentSummary,
    ProgressSummary,
    QuestionResponse,
    SaveProgressRequest,
    StartAssessmentResponse,
    SubmitAssessmentResponse,
)
from app.services.assessment_service import assessment_service
from typing import List, Optional
import logging

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/start", response_model=StartAssessmentResponse)
async def start_assessment(current_user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    """Start a new assessment, or return the one already in progress"""
    try:
        assessment, created = await assessment_service.start_assessment(db, current_user.user_id)
    except CareerCoreError as e:
        raise HTTPException(status_code=status_code_for(e), detail=e.message)
    except Exception as e:
        logger.error(f"Error starting assessment for user {current_user.user_id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to start assessment: {str(e)}")

    return {
        "message": "Assessment started" if created else "Assessment already in progress",
        "created": created,
        "assessment": AssessmentResponse.model_validate(assessment),
    }


@router.get("/questions", response_model=List[QuestionResponse])
async def get_questions(
    category: Optional[QuestionCategory] = Query(None, description="Filter by category"),
    db: AsyncSession = Depends(get_db),
):
    try:
        questions = await assessment_service.list_questions(
            db, category=category.value if category else None)
    except Exception as e:
        logger.error(f"Error fetching questions: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to fetch questions: {str(e)}")
    return questions


@router.get("/resume", response_model=AssessmentResponse)
async def resume_assessment(current_user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    try:
        return await assessment_service.resume_assessment(db, current_user.user_id)
    except CareerCoreError as e:
        raise HTTPException(status_code=status_code_for(e), detail=e.message)
    except Exception as e:
        logger.error(f"Error resuming assessment: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to resume assessment: {str(e)}")


@router.get("/mine", response_model=List[AssessmentSummary])
async def get_my_assessments(current_user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    """The caller's assessments, newest first, without responses"""
    try:
        return await assessment_service.list_my_assessments(db, current_user.user_id)
    except Exception as e:
        logger.error(f"Error listing assessments: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to list assessments: {str(e)}")


@router.get("/{assessment_id}", response_model=AssessmentResponse)
async def get_assessment(assessment_id: int, current_user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    try:
        return await assessment_service.get_assessment(db, current_user.user_id, assessment_id)
    except CareerCoreError as e:
        raise HTTPException(status_code=status_code_for(e), detail=e.message)
    except Exception as e:
        logger.error(f"Error fetching assessment {assessment_id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to fetch assessment: {str(e)}")


@router.put("/{assessment_id}/save", response_model=ProgressSummary)
async def save_progress(
    assessment_id: int,
    payload: SaveProgressRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Merge a partial batch of answers; safe to retry"""
    try:
        return await assessment_service.save_progress(
            db,
            current_user.user_id,
            assessment_id,
            [r.model_dump() for r in payload.responses],
            current_step=payload.current_step,
            current_category=payload.current_category.value if payload.current_category else None,
            time_spent_minutes=payload.time_spent_minutes,
        )
    except CareerCoreError as e:
        raise HTTPException(status_code=status_code_for(e), detail=e.message)
    except Exception as e:
        logger.error(f"Error saving progress for assessment {assessment_id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to save progress: {str(e)}")


@router.post("/{assessment_id}/submit", response_model=SubmitAssessmentResponse)
async def submit_assessment(assessment_id: int, current_user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    try:
        result = await assessment_service.submit_assessment(db, current_user.user_id, assessment_id)
    except CareerCoreError as e:
        raise HTTPException(status_code=status_code_for(e), detail=e.message)
    except Exception as e:
        logger.error(f"Error submitting assessment {assessment_id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to submit assessment: {str(e)}")

    message = "Assessment already submitted" if result["already_completed"] else "Assessment submitted successfully"
    return {"message": message, **result}


@router.post("/{assessment_id}/abandon", response_model=AssessmentSummary)
async def abandon_assessment(assessment_id: int, current_user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    try:
        return await assessment_service.abandon_assessment(db, current_user.user_id, assessment_id)
    except CareerCoreError as e:
        raise HTTPException(status_code=status_code_for(e), detail=e.message)
    except Exception as e:
        logger.error(f"Error abandoning assessment {assessment_id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to abandon assessment: {str(e)}")
