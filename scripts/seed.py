"""Database seeder: sample users, posts and comments for local development."""
import asyncio
import argparse
import logging
import random
import time

from app.config import settings
from app.database import engine, async_session, Base
from app.log import configure_logging
from app.services import comment_service, post_service, user_service
from app.store import Store

import app.models  # noqa: F401

logger = logging.getLogger("seed")

TAGS = ["python", "fastapi", "postgresql", "docker", "testing", "performance",
        "security", "devops", "rest-api", "sqlalchemy"]
CATEGORIES = ["tutorial", "opinion", "news", "howto"]


async def seed(small: bool = False):
    num_users = 5 if small else 50
    num_posts = 20 if small else 2000
    max_comments = 2 if small else 5

    logger.info("Seeding: %d users, %d posts, up to %d comments per post",
                num_users, num_posts, max_comments)
    start = time.perf_counter()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    async with async_session() as session:
        store = Store(session)

        usernames = []
        for i in range(num_users):
            user = await user_service.create_user(store, {
                "username": f"user_{i:04d}",
                "email": f"user_{i:04d}@example.com",
                "password": f"password-{i}",
            })
            usernames.append(user["username"])

        total_comments = 0
        for i in range(num_posts):
            topic = random.choice(TAGS)
            post = await post_service.create_post(store, {
                "title": f"Post {i}: getting started with {topic}",
                "content": f"This is the full content of post {i}. " * 10,
                "category": random.choice(CATEGORIES),
                "tags": random.sample(TAGS, k=random.randint(0, 3)),
            })
            for _ in range(random.randint(0, max_comments)):
                await comment_service.create_comment(store, str(post["id"]), {
                    "author": random.choice(usernames),
                    "content": f"Thanks for writing about {topic}!",
                })
                total_comments += 1

        await session.commit()

    logger.info("Seeding complete in %.1fs: %d users, %d posts, %d comments",
                time.perf_counter() - start, num_users, num_posts, total_comments)


def main():
    parser = argparse.ArgumentParser(description="Seed the blog database")
    parser.add_argument("--small", action="store_true", help="Use a small dataset (20 posts)")
    args = parser.parse_args()
    configure_logging(settings.LOG_LEVEL)
    asyncio.run(seed(small=args.small))


if __name__ == "__main__":
    main()
