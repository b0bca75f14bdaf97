"""Block until the database in DATABASE_URL accepts connections (imported by start_api)."""
import os, time

from sqlalchemy import create_engine, text
from sqlalchemy.engine import make_url

from app.core.config import settings

timeout_s = int(os.getenv("DB_WAIT_TIMEOUT", "60"))
url = make_url(settings.DATABASE_URL)
engine = create_engine(url, pool_pre_ping=True)
start = time.time()

print(f"[wait_for_db] Waiting for {url.get_backend_name()} at {url.host}:{url.port} db={url.database} (timeout={timeout_s}s)")
while True:
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        print("[wait_for_db] Database is ready.")
        break
    except Exception as e:
        if time.time() - start > timeout_s:
            print(f"[wait_for_db] Timed out waiting for DB. Last error: {e}")
            raise
        time.sleep(1)
engine.dispose()
