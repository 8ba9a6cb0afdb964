from fastapi import APIRouter
from app.core.config import settings

router = APIRouter()

@router.get("/vapid-public-key")
def get_vapid_public_key():
    """Chave pública que o service worker usa no pushManager.subscribe()"""
    return {"publicKey": settings.VAPID_PUBLIC_KEY}
