# app/scheduler.py
from apscheduler.schedulers.background import BackgroundScheduler
from .cache import session_cache, SESSION_CHECK_PERIOD
from .utils import logger

scheduler = BackgroundScheduler()
scheduler.add_job(session_cache.sweep, 'interval', seconds=SESSION_CHECK_PERIOD, id="session-sweep")

def start_scheduler():
    if not scheduler.running:
        scheduler.start()
        logger.info("Scheduler started, sweeping sessions every %ss", SESSION_CHECK_PERIOD)

def stop_scheduler():
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler stopped")
