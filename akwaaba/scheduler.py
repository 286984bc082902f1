# akwaaba/scheduler.py
import os
from apscheduler.schedulers.background import BackgroundScheduler
from .db import SessionLocal
from .rates import refresh_live_rates
from .utils import env_int, logger

SCHEDULER_ENABLED = os.getenv("SCHEDULER_ENABLED", "0") == "1"
RATES_REFRESH_HOURS = env_int("RATES_REFRESH_HOURS", 6)

scheduler = BackgroundScheduler()

def refresh_rates_job():
    db = SessionLocal()
    try:
        refresh_live_rates(db)
    except Exception as e:
        logger.exception("Currency rate refresh failed: %s", e)
    finally:
        db.close()

def start_scheduler():
    if not SCHEDULER_ENABLED or scheduler.running:
        return False
    scheduler.add_job(refresh_rates_job, 'interval', hours=RATES_REFRESH_HOURS, id="refresh-rates", replace_existing=True)
    scheduler.start()
    logger.info("Scheduler started, refreshing currency rates every %s hours", RATES_REFRESH_HOURS)
    return True

def stop_scheduler():
    if scheduler.running:
        scheduler.shutdown(wait=False)
