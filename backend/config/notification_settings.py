# Module-level settings for notification fan-out, email delivery and the
# weekly LIRF digest. Values are read from the environment (.env supported)
# once at import time; every setting has a working default except the
# Supabase and Resend credentials.

import os

from dotenv import load_dotenv

load_dotenv()

# Club identity used in subjects, templates and the sender address.
CLUB_NAME = os.getenv("CLUB_NAME", "Run Alcester")
NOTIFICATION_FROM_NAME = os.getenv("NOTIFICATION_FROM_NAME", "Run Alcester Bookings")
NOTIFICATION_FROM_EMAIL = os.getenv(
    "NOTIFICATION_FROM_EMAIL", "bookings@runalcester.co.uk"
)

# Base URL of the member portal, used for links in emails.
FRONTEND_BASE_URL = os.getenv(
    "FRONTEND_BASE_URL", "https://bookings.runalcester.co.uk"
).rstrip("/")

# Calendar days (quota window, digest weekday, day markers) are evaluated in
# the club's local timezone.
CLUB_TIMEZONE = os.getenv("CLUB_TIMEZONE", "Europe/London")

# Stay under the transport provider's 500/day cap.
DAILY_EMAIL_LIMIT = int(os.getenv("DAILY_EMAIL_LIMIT", "450"))

# Pause between consecutive sends to keep the provider's burst rate down.
EMAIL_SEND_DELAY_SECONDS = float(os.getenv("EMAIL_SEND_DELAY_SECONDS", "1.0"))

# Weekly digest: Monday=0 ... Friday=4.
DIGEST_WEEKDAY = int(os.getenv("DIGEST_WEEKDAY", "4"))
DIGEST_CHECK_INTERVAL_HOURS = int(os.getenv("DIGEST_CHECK_INTERVAL_HOURS", "1"))
DIGEST_LOOKAHEAD_DAYS = int(os.getenv("DIGEST_LOOKAHEAD_DAYS", "7"))
DIGEST_MARKER_RETENTION_DAYS = int(os.getenv("DIGEST_MARKER_RETENTION_DAYS", "7"))
DIGEST_MARKER_PATH = os.getenv(
    "DIGEST_MARKER_PATH",
    os.path.join(
        os.path.dirname(os.path.dirname(os.path.abspath(__file__))),
        "notifications",
        "state",
        "digest_markers.json",
    ),
)

# Access levels that receive the LIRF coverage digest.
DIGEST_ACCESS_LEVELS = ["lirf", "admin"]
