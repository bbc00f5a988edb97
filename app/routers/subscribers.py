from fastapi import APIRouter, HTTPException, Depends
from app.core.exceptions import NotFoundError, NotificationError, SubscriptionError
from app.models.subscriber import (
    AccessResponse,
    EmailRequest,
    SiteStatusResponse,
    SubscribeResponse,
    UnsubscribeResponse,
    normalize_email,
)
from app.services.email_sender import get_email_sender
from app.services.launch_controller import get_launch_controller
from app.services.subscriber_store import get_subscriber_store
from typing import Optional
import logging

logger = logging.getLogger(__name__)
router = APIRouter(tags=["subscribers"])

@router.post("/subscribe", response_model=SubscribeResponse)
async def subscribe(
    payload: Optional[EmailRequest] = None,
    store=Depends(get_subscriber_store),
    email_sender=Depends(get_email_sender),
    controller=Depends(get_launch_controller)
):
    """Subscribe an email and send the confirmation"""
    try:
        email = normalize_email(payload.email if payload else None)
        await store.create(email)
        controller.on_subscribed(email)
        
        result = await email_sender.send_confirmation(email)
        if not result["success"]:
            # the subscription is kept, only the confirmation is reported as failed
            raise NotificationError(f"Subscribed, but the confirmation email failed: {result.get('error')}")
        logger.info(f"Confirmation email sent: {result.get('message_id')}")
        
        return SubscribeResponse(message="Subscription successful, confirmation email sent.")
    
    except SubscriptionError:
        raise
    except Exception as e:
        logger.error(f"Error during subscription: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Server error")

@router.post("/unsubscribe", response_model=UnsubscribeResponse)
async def unsubscribe(
    payload: Optional[EmailRequest] = None,
    store=Depends(get_subscriber_store)
):
    """Remove a subscriber entirely"""
    try:
        email = normalize_email(payload.email if payload else None)
        if not await store.delete(email):
            raise NotFoundError("Email not found")
        logger.info(f"Unsubscribed: {email}")
        return UnsubscribeResponse(success=True)
    
    except SubscriptionError:
        raise
    except Exception as e:
        logger.error(f"Error during unsubscribe: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Server error")

@router.post("/check-access", response_model=AccessResponse, response_model_by_alias=True)
async def check_access(
    payload: Optional[EmailRequest] = None,
    store=Depends(get_subscriber_store)
):
    """Whether this subscriber has been let in, plus the global site status"""
    try:
        email = normalize_email(payload.email if payload else None)
        subscriber = await store.find_by_email(email)
        has_access = subscriber is not None and subscriber.is_active
        return AccessResponse(has_access=has_access, site_live=await store.is_site_live())
    
    except SubscriptionError:
        raise
    except Exception as e:
        logger.error(f"Error checking access: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Server error")

@router.get("/site-status", response_model=SiteStatusResponse, response_model_by_alias=True)
async def site_status(store=Depends(get_subscriber_store)):
    """The site is live once any subscriber has been activated"""
    try:
        return SiteStatusResponse(site_live=await store.is_site_live())
    except SubscriptionError:
        raise
    except Exception as e:
        logger.error(f"Error fetching site status: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Server error")
