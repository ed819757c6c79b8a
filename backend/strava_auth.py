"""
Strava token bootstrap.
Run this once to obtain STRAVA_ACCESS_TOKEN / STRAVA_REFRESH_TOKEN for .env,
then again with --check to verify the client can page through your activities.

Usage:
    python strava_auth.py                 # print the authorization URL
    python strava_auth.py --code <CODE>   # exchange the code from the redirect URL
    python strava_auth.py --check         # fetch all activities with the .env tokens
"""
import argparse
import sys

from dotenv import load_dotenv

# Load environment variables before settings are imported
load_dotenv()

from activity_insights.config import settings  # noqa: E402
from activity_insights.errors import ActivityInsightsError  # noqa: E402
from activity_insights.strava.client import (  # noqa: E402
    TelemetryClient,
    exchange_authorization_code,
    get_authorize_url,
)


def main() -> int:
    parser = argparse.ArgumentParser(description="Strava token bootstrap")
    parser.add_argument("--code", help="authorization code from the redirect URL")
    parser.add_argument("--check", action="store_true", help="fetch all activities with the configured tokens")
    args = parser.parse_args()

    if not settings.strava_client_id or not settings.strava_client_secret:
        print("❌ STRAVA_CLIENT_ID and STRAVA_CLIENT_SECRET must be set in .env")
        return 1

    try:
        if args.code:
            creds = exchange_authorization_code(args.code)
            print("✅ Token exchange successful! Add these to .env:")
            print(f"STRAVA_ACCESS_TOKEN={creds.access_token}")
            print(f"STRAVA_REFRESH_TOKEN={creds.refresh_token}")
            return 0

        if args.check:
            print("🔍 Fetching all activities from Strava...")
            activities = TelemetryClient.from_settings().fetch_all_activities()
            rides = [a for a in activities if a.type == "Ride"]
            print(f"✅ Total activities: {len(activities)}")
            print(f"   Bike rides: {len(rides)}")
            return 0
    except (ActivityInsightsError, RuntimeError) as e:
        print(f"❌ {e}")
        return 1

    print("Open this URL, approve access, and copy the 'code' parameter from the redirect:")
    print(get_authorize_url(settings.strava_client_id))
    return 0


if __name__ == "__main__":
    sys.exit(main())
