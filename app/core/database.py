from supabase import create_client, Client
from app.core.config import settings
from app.core.exceptions import StoreUnavailableError
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Global Supabase client, created by init_supabase() at start-up
supabase_service: Client = None

def check_environment_variables():
    """Make sure the store connection settings are present"""
    required_vars = {
        'SUPABASE_URL': settings.SUPABASE_URL,
        'SUPABASE_SERVICE_ROLE_KEY': settings.SUPABASE_SERVICE_ROLE_KEY
    }
    
    missing_vars = [name for name, value in required_vars.items() if not value]
    if missing_vars:
        error_msg = f"Missing required environment variables: {', '.join(missing_vars)}"
        logger.error(error_msg)
        raise ValueError(error_msg)
    
    logger.info("✅ Store environment variables present")
    return True

async def init_supabase():
    """Connect to Supabase.

    Failures are logged and swallowed so the API keeps serving; requests that
    need the store then fail one by one with StoreUnavailableError.
    """
    global supabase_service
    
    try:
        logger.info("🔧 Initialising Supabase connection...")
        check_environment_variables()
        
        logger.info(f"🔗 Connecting to Supabase: {settings.SUPABASE_URL[:50]}...")
        supabase_service = create_client(
            settings.SUPABASE_URL,
            settings.SUPABASE_SERVICE_ROLE_KEY
        )
        
        await check_subscribers_table()
        logger.info("✅ Supabase connection initialised")
        
    except Exception as e:
        logger.error(f"❌ Supabase connection failed: {e}")
        logger.warning("⚠️ Continuing without a store connection, subscriber endpoints will return 500")

async def check_subscribers_table():
    """Probe the subscribers table; a missing table is only a warning"""
    try:
        supabase_service.table(settings.SUBSCRIBERS_TABLE).select('email').limit(1).execute()
        logger.info(f"✅ {settings.SUBSCRIBERS_TABLE} table check passed")
    except Exception as e:
        if "does not exist" in str(e):
            logger.warning(f"⚠️ {settings.SUBSCRIBERS_TABLE} table does not exist, run scripts/create_subscribers_table.py")
        else:
            logger.warning(f"⚠️ {settings.SUBSCRIBERS_TABLE} table check failed: {e}")

def get_supabase_service() -> Client:
    """Return the service-role client or raise StoreUnavailableError"""
    if supabase_service is None:
        raise StoreUnavailableError("Subscriber store is not connected")
    return supabase_service
