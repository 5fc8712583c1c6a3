from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.exceptions import CareerCoreError, status_code_for
from app.core.security import get_current_user
from app.db.database import get_db
from app.models.user import User
from app.schemas.opportunity_schema import (
    DeleteOpportunityResponse,
    OpportunityAnalysisResponse,
    OpportunityHistoryResponse,
    OpportunityRequest,
    OpportunityResult,
)
from app.services.opportunity_service import opportunity_service
import logging

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=OpportunityResult)
async def submit_analysis(payload: OpportunityRequest, current_user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    """Generate scholarship, education, career and skill recommendations"""
    try:
        analysis = await opportunity_service.submit_analysis(db, current_user, payload.model_dump())
    except CareerCoreError as e:
        raise HTTPException(status_code=status_code_for(e), detail=e.message)
    except Exception as e:
        logger.error(f"Error generating opportunity analysis: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to generate analysis: {str(e)}")
    return {
        "message": "Analysis completed successfully",
        "analysis": OpportunityAnalysisResponse.model_validate(analysis),
    }


@router.get("/history", response_model=OpportunityHistoryResponse)
async def get_history(current_user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    try:
        analyses = await opportunity_service.list_history(db, current_user.user_id)
    except Exception as e:
        logger.error(f"Error fetching opportunity history: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to fetch history: {str(e)}")
    return {"analyses": analyses}


@router.get("/{analysis_id}", response_model=OpportunityAnalysisResponse)
async def get_analysis(analysis_id: int, current_user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    try:
        return await opportunity_service.get_analysis(db, current_user.user_id, analysis_id)
    except CareerCoreError as e:
        raise HTTPException(status_code=status_code_for(e), detail=e.message)
    except Exception as e:
        logger.error(f"Error fetching opportunity analysis {analysis_id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to fetch analysis: {str(e)}")


@router.post("/{analysis_id}/regenerate", response_model=OpportunityResult)
async def regenerate_analysis(analysis_id: int, current_user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    try:
        analysis = await opportunity_service.regenerate_analysis(db, current_user, analysis_id)
    except CareerCoreError as e:
        raise HTTPException(status_code=status_code_for(e), detail=e.message)
    except Exception as e:
        logger.error(f"Error regenerating opportunity analysis {analysis_id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to regenerate analysis: {str(e)}")
    return {
        "message": "Analysis regenerated successfully",
        "analysis": OpportunityAnalysisResponse.model_validate(analysis),
    }


@router.delete("/{analysis_id}", response_model=DeleteOpportunityResponse)
async def delete_analysis(analysis_id: int, current_user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    try:
        await opportunity_service.delete_analysis(db, current_user.user_id, analysis_id)
    except CareerCoreError as e:
        raise HTTPException(status_code=status_code_for(e), detail=e.message)
    except Exception as e:
        logger.error(f"Error deleting opportunity analysis {analysis_id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to delete analysis: {str(e)}")
    return {"message": "Analysis deleted successfully"}
