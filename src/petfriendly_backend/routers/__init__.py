from fastapi import APIRouter

from .actuator import router as actuator_router
from .adoption_requests import router as adoption_requests_router
from .auth import router as auth_router
from .contact_messages import router as contact_messages_router
from .foundations import router as foundations_router
from .pet_images import router as pet_images_router
from .pets import router as pets_router
from .users import router as users_router

api_router = APIRouter()

api_router.include_router(auth_router, prefix="/auth", tags=["auth"])
api_router.include_router(users_router, prefix="/users", tags=["users"])
api_router.include_router(foundations_router, prefix="/foundations", tags=["foundations"])
api_router.include_router(pets_router, prefix="/pets", tags=["pets"])
api_router.include_router(pet_images_router, prefix="/pet-images", tags=["pet-images"])
api_router.include_router(adoption_requests_router, prefix="/adoption-requests", tags=["adoption-requests"])
api_router.include_router(contact_messages_router, prefix="/contact-messages", tags=["contact-messages"])

__all__ = ["actuator_router", "api_router"]
