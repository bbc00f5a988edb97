"""
Launch notification lifecycle.

Every subscriber starts out awaiting launch. A broadcast pass sends the
"website is live" email to each pending subscriber and, only after a
successful send, marks that subscriber active. Two triggers are supported:

fixed_delay
    One broadcast pass, ``LAUNCH_DELAY_SECONDS`` after start-up. It fires once
    per process. With ``NOTIFY_LATE_SIGNUPS`` enabled, people who subscribe
    after it fired while the site is live get the email straight away;
    otherwise they stay awaiting launch.

per_subscription
    Each subscription schedules a pass ``FOLLOW_UP_DELAY_SECONDS`` later. When
    it fires it gives up if more than ``FOLLOW_UP_WINDOW_SECONDS`` passed since
    it was scheduled, else it scans the whole pending set, skipping anyone whose
    follow-up was already sent.

Passes are serialised by a lock, so overlapping timers never mail the same
subscriber twice.
"""
import asyncio
import logging
import time
from enum import Enum
from typing import Any, Callable, Dict, Optional

from app.core.config import settings
from app.services.email_sender import get_email_sender
from app.services.launch_scheduler import LaunchScheduler, ScheduledTask
from app.services.subscriber_store import get_subscriber_store

logger = logging.getLogger(__name__)

class LaunchMode(str, Enum):
    FIXED_DELAY = "fixed_delay"
    PER_SUBSCRIPTION = "per_subscription"

class LaunchController:
    """Decides when the live notification goes out and flips subscribers to active."""
    
    def __init__(
        self,
        store,
        email_sender,
        scheduler: Optional[LaunchScheduler] = None,
        mode: Optional[str] = None,
        launch_delay: Optional[float] = None,
        follow_up_delay: Optional[float] = None,
        follow_up_window: Optional[float] = None,
        notify_late_signups: Optional[bool] = None,
        clock: Callable[[], float] = time.monotonic
    ):
        self.store = store
        self.email_sender = email_sender
        self.scheduler = scheduler or LaunchScheduler()
        self.mode = LaunchMode(mode or settings.LAUNCH_MODE)
        self.launch_delay = settings.LAUNCH_DELAY_SECONDS if launch_delay is None else launch_delay
        self.follow_up_delay = settings.FOLLOW_UP_DELAY_SECONDS if follow_up_delay is None else follow_up_delay
        self.follow_up_window = settings.FOLLOW_UP_WINDOW_SECONDS if follow_up_window is None else follow_up_window
        self.notify_late_signups = settings.NOTIFY_LATE_SIGNUPS if notify_late_signups is None else notify_late_signups
        self.clock = clock
        
        self._lock = asyncio.Lock()
        self._launch_task: Optional[ScheduledTask] = None
        self._launch_fired = False
    
    @property
    def launch_fired(self) -> bool:
        return self._launch_fired
    
    def start(self) -> Optional[ScheduledTask]:
        """Schedule the one-shot launch broadcast (fixed_delay mode only)."""
        if self.mode is not LaunchMode.FIXED_DELAY:
            logger.info("Launch mode per_subscription: broadcasts are scheduled on subscribe")
            return None
        if self._launch_task is not None:
            return self._launch_task
        
        logger.info(f"Waiting for {self.launch_delay} seconds before sending emails...")
        self._launch_task = self.scheduler.schedule("launch-broadcast", self.launch_delay, self._launch)
        return self._launch_task
    
    async def stop(self):
        await self.scheduler.shutdown()
    
    async def _launch(self) -> Dict[str, Any]:
        self._launch_fired = True
        return await self.run_broadcast_pass("launch")
    
    def on_subscribed(self, email: str) -> Optional[ScheduledTask]:
        """Hook for a new subscription; returns the scheduled task, if any."""
        if self.mode is LaunchMode.PER_SUBSCRIPTION:
            scheduled_at = self.clock()
            return self.scheduler.schedule(
                f"follow-up:{email}",
                self.follow_up_delay,
                lambda: self._follow_up(scheduled_at)
            )
        
        if self._launch_fired and self.notify_late_signups:
            return self.scheduler.schedule(
                f"late-signup:{email}",
                0,
                lambda: self._notify_late_signup(email)
            )
        return None
    
    async def _follow_up(self, scheduled_at: float) -> Dict[str, Any]:
        elapsed = self.clock() - scheduled_at
        if elapsed > self.follow_up_window:
            logger.info(f"Follow-up abandoned: {elapsed:.1f}s elapsed, window is {self.follow_up_window}s")
            return {"success": False, "abandoned": True, "elapsed": elapsed}
        return await self.run_broadcast_pass("follow-up")
    
    async def _notify_late_signup(self, email: str) -> Dict[str, Any]:
        async with self._lock:
            if not await self.store.is_site_live():
                logger.info(f"Site not live yet, {email} keeps waiting")
                return {"success": True, "status": "skipped", "email": email}
            
            subscriber = await self.store.find_by_email(email)
            if subscriber is None or not subscriber.is_awaiting_launch:
                return {"success": True, "status": "skipped", "email": email}
            
            status = await self._notify(email)
            return {"success": status == "sent", "status": status, "email": email}
    
    async def run_broadcast_pass(self, reason: str = "manual") -> Dict[str, Any]:
        """
        Send the live notification to every subscriber still awaiting launch.
        
        A failure for one subscriber is logged and the pass moves on to the next.
        
        Returns:
            Dict with processed / sent / failed / skipped counts
        """
        async with self._lock:
            results = {
                "processed": 0,
                "sent": 0,
                "failed": 0,
                "skipped": 0
            }
            
            try:
                subscribers = await self.store.find_awaiting_launch()
            except Exception as e:
                logger.error(f"Error while sending follow-up emails ({reason}): {e}")
                return {"success": False, "reason": reason, "error": str(e), **results}
            
            logger.info(f"Broadcast pass ({reason}): {len(subscribers)} subscriber(s) awaiting launch")
            
            for subscriber in subscribers:
                results["processed"] += 1
                if subscriber.follow_up_sent or not subscriber.is_awaiting_launch:
                    results["skipped"] += 1
                    continue
                try:
                    results[await self._notify(subscriber.email)] += 1
                except Exception as e:
                    logger.error(f"Error notifying {subscriber.email}: {e}")
                    results["failed"] += 1
            
            logger.info(f"All follow-up emails processed ({reason}): {results}")
            return {"success": True, "reason": reason, **results}
    
    async def _notify(self, email: str) -> str:
        result = await self.email_sender.send_live_notification(email)
        if not result.get("success"):
            logger.error(f"Follow-up email to {email} failed: {result.get('error')}")
            return "failed"
        
        logger.info(f"Follow-up email sent to: {email}")
        if not await self.store.mark_active(email):
            # unsubscribed while the email was in flight
            logger.warning(f"{email} was removed before it could be marked active")
        return "sent"

_controller_instance = None

def get_launch_controller() -> LaunchController:
    """Get the launch controller (lazy initialization)."""
    global _controller_instance
    if _controller_instance is None:
        _controller_instance = LaunchController(get_subscriber_store(), get_email_sender())
    return _controller_instance
