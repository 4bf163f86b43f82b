from fastapi import APIRouter

from tempforms.api.v1.endpoints import forms, responses

api_v1_router = APIRouter()

api_v1_router.include_router(forms.router, prefix="/forms", tags=["forms"])
api_v1_router.include_router(responses.router, prefix="/responses", tags=["responses"])
