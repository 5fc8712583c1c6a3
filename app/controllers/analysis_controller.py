from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.exceptions import CareerCoreError, status_code_for
from app.core.security import get_current_user
from app.db.database import get_db
from app.models.user import User
from app.schemas.analysis_schema import (
    AnalysisListResponse,
    GenerateAnalysisRequest,
    GeneratedAnalysisResponse,
    StoredAnalysisResponse,
)
from app.services.analysis_service import analysis_service
from typing import Optional
import logging

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/mine", response_model=AnalysisListResponse)
async def get_my_analyses(current_user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    try:
        analyses = await analysis_service.list_my_analyses(db, current_user.user_id)
    except Exception as e:
        logger.error(f"Error listing analyses: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to fetch analyses: {str(e)}")
    return {"analyses": analyses}


@router.post("/{assessment_id}/generate", response_model=GeneratedAnalysisResponse)
async def generate_analysis(
    assessment_id: int,
    payload: Optional[GenerateAnalysisRequest] = None,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Generate the career analysis of a completed assessment (cached unless regenerate)"""
    regenerate = payload.regenerate if payload else False
    try:
        result = await analysis_service.generate_analysis(
            db, current_user.user_id, assessment_id, regenerate=regenerate)
    except CareerCoreError as e:
        raise HTTPException(status_code=status_code_for(e), detail=e.message)
    except Exception as e:
        logger.error(f"Error generating analysis for assessment {assessment_id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to generate analysis: {str(e)}")

    message = "Analysis retrieved from cache" if result["cached"] else "Analysis generated successfully"
    return {"message": message, **result}


@router.get("/{assessment_id}", response_model=StoredAnalysisResponse)
async def get_analysis(assessment_id: int, current_user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    try:
        return await analysis_service.get_analysis(db, current_user.user_id, assessment_id)
    except CareerCoreError as e:
        raise HTTPException(status_code=status_code_for(e), detail=e.message)
    except Exception as e:
        logger.error(f"Error fetching analysis for assessment {assessment_id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to fetch analysis: {str(e)}")
