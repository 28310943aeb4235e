import asyncio
import logging
import sys
from datetime import date

from marvin import MarvinClient, MarvinError, Settings
from marvin.config.load_config import load_settings

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


async def main(config_path: str = ""):
    print("--- Marvin API Smoke Test ---")
    # Токен берется из MARVIN_API_TOKEN (или .env / YAML)
    settings = load_settings(config_path) if config_path else Settings()
    if not settings.API_TOKEN:
        print("SKIPPED: set MARVIN_API_TOKEN to run against the real API")
        return

    client = MarvinClient(settings)

    try:
        print("\n1. Credentials:")
        print(f"   {await client.test_credentials()}")

        print("\n2. Profile:")
        profile = await client.get_me()
        print(f"   Email: {profile.email}. Reward balance: {profile.reward_points_balance}")

        # Независимые чтения можно запускать параллельно
        print("\n3. Categories / projects / labels:")
        categories, projects, labels = await asyncio.gather(
            client.get_only_categories(),
            client.get_only_projects(),
            client.get_labels(),
        )
        print(f"   {len(categories)} categories, {len(projects)} projects, {len(labels)} labels")

        print("\n4. Today:")
        items = await client.get_today_items(date.today().isoformat())
        print(f"   {len(items)} items scheduled")

        tracked = await client.get_tracked_item()
        print(f"   Tracking: {tracked.title if tracked else 'nothing'}")

        print("\nSUCCESS")
    except MarvinError as e:
        print(f"FAILED: {e} (status={e.status}, endpoint={e.endpoint}, retryable={e.is_retryable()})")


if __name__ == "__main__":
    asyncio.run(main(sys.argv[1] if len(sys.argv) > 1 else ""))
