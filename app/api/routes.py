from fastapi import APIRouter
from app.controllers import assessment_controller
from app.controllers import analysis_controller
from app.controllers import chat_controller
from app.controllers import opportunity_controller


router = APIRouter()


router.include_router(assessment_controller.router, prefix="/assessments", tags=["Assessments"])
router.include_router(analysis_controller.router, prefix="/analysis", tags=["Analysis"])
router.include_router(chat_controller.router, prefix="/ai/chat", tags=["AI Chat"])
router.include_router(opportunity_controller.router, prefix="/opportunity", tags=["Opportunity"])
