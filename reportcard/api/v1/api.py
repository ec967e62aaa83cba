from fastapi import APIRouter
from reportcard.api.v1.endpoints import assessment, scheme, subject, mark, remark, report

api_router = APIRouter()
api_router.include_router(assessment.router)
api_router.include_router(scheme.router)
api_router.include_router(subject.router)
api_router.include_router(mark.router)
api_router.include_router(remark.router)
api_router.include_router(report.router)
