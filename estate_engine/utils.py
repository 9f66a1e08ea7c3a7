import hashlib, json
from datetime import datetime, date, timezone
from dateutil import tz

def sha256_json(obj) -> str:
    return hashlib.sha256(json.dumps(obj, sort_keys=True, default=str).encode()).hexdigest()

def now_utc() -> datetime:
    return datetime.now(timezone.utc)

def now_utc_iso() -> str:
    return now_utc().isoformat()

def ensure_aware(dt: datetime) -> datetime:
    # naive datetimes are taken as UTC
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt

def to_local_date(value: datetime | date, local_tz: str) -> date:
    if isinstance(value, datetime):
        tzinfo = tz.gettz(local_tz)
        return ensure_aware(value).astimezone(tzinfo).date()
    return value

def parse_datetime(val: str | datetime | None) -> datetime | None:
    if val is None or isinstance(val, datetime):
        return val
    return ensure_aware(datetime.fromisoformat(val))
