"""Copy portfolio data between backends and seed sample content."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional

from .base import DatabaseBackend
from .schema import TABLES

logger = logging.getLogger(__name__)


@dataclass
class TableTransfer:
    """Outcome of copying one table."""

    table: str
    source_rows: int = 0
    copied: int = 0
    failed: int = 0
    target_rows: Optional[int] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.failed == 0


def _insert_sql(table: str, columns: List[str], verb: str = "INSERT") -> str:
    placeholders = ", ".join("?" for _ in columns)
    return f"{verb} INTO {table} ({', '.join(columns)}) VALUES ({placeholders})"


async def count_rows(backend: DatabaseBackend, table: str) -> int:
    row = await backend.fetch_one(f"SELECT COUNT(*) AS count FROM {table}")
    return int(row["count"]) if row else 0


async def transfer_table(source: DatabaseBackend, target: DatabaseBackend, table: str) -> TableTransfer:
    """Replace ``table`` on ``target`` with the rows from ``source``.

    A failing row is counted and skipped; the rest of the table still copies.
    """
    result = TableTransfer(table=table)
    rows = await source.fetch_all(f"SELECT * FROM {table}")
    result.source_rows = len(rows)

    if not rows:
        logger.info(f"No data to transfer for {table}")
        result.target_rows = await count_rows(target, table)
        return result

    await target.execute(f"DELETE FROM {table}")

    columns = list(rows[0].keys())
    insert_sql = _insert_sql(table, columns)

    for row in rows:
        try:
            await target.execute(insert_sql, [row.get(col) for col in columns])
            result.copied += 1
        except Exception as e:
            logger.warning(f"Failed to insert row into {table}: {e}")
            result.failed += 1

    result.target_rows = await count_rows(target, table)
    logger.info(
        f"Transferred {table}: {result.copied}/{result.source_rows} rows "
        f"({result.target_rows} on target)"
    )
    return result


async def transfer_tables(
    source: DatabaseBackend,
    target: DatabaseBackend,
    tables: Iterable[str] = TABLES,
) -> List[TableTransfer]:
    """Copy every table in ``tables``; a failing table does not stop the others."""
    results: List[TableTransfer] = []
    for table in tables:
        try:
            results.append(await transfer_table(source, target, table))
        except Exception as e:
            logger.error(f"Error transferring {table}: {e}")
            results.append(TableTransfer(table=table, error=str(e)))
    return results


SAMPLE_PROFILE = {
    "id": 1,
    "name": "Tarin Agarwal",
    "title": "Full-Stack Developer & Game Developer",
    "bio": (
        "A passionate full-stack developer with expertise in modern web technologies "
        "and game development. I love creating innovative solutions that make a difference."
    ),
    "email": "tarinagarwal@gmail.com",
    "phone": "+1 (555) 123-4567",
    "location": "San Francisco, CA",
    "avatar_url": "https://images.pexels.com/photos/2379004/pexels-photo-2379004.jpeg?auto=compress&cs=tinysrgb&w=400",
    "resume_url": "https://example.com/resume.pdf",
    "linkedin_url": "https://www.linkedin.com/in/tarin-agarwal-810793267/",
    "github_url": "https://github.com/tarinagarwal",
    "twitter_url": "https://twitter.com/tarinagarwal",
}

SAMPLE_PROJECTS = [
    {
        "title": "E-Commerce Platform",
        "description": "A modern e-commerce platform built with React and Node.js",
        "long_description": (
            "A comprehensive e-commerce solution featuring user authentication, product "
            "management, shopping cart, payment integration, and admin dashboard."
        ),
        "technologies": "React, Node.js, MongoDB, Stripe",
        "github_url": "https://github.com/tarinagarwal/ecommerce",
        "live_url": "https://ecommerce-demo.com",
        "image_url": "https://images.pexels.com/photos/230544/pexels-photo-230544.jpeg?auto=compress&cs=tinysrgb&w=800",
        "featured": True,
    },
    {
        "title": "Task Management App",
        "description": "A collaborative task management application",
        "long_description": (
            "A full-featured task management application with real-time collaboration, "
            "project organization, deadline tracking, and team communication features."
        ),
        "technologies": "Vue.js, Express.js, PostgreSQL, Socket.io",
        "github_url": "https://github.com/tarinagarwal/taskmanager",
        "live_url": "https://taskmanager-demo.com",
        "image_url": "https://images.pexels.com/photos/3184291/pexels-photo-3184291.jpeg?auto=compress&cs=tinysrgb&w=800",
        "featured": True,
    },
]

SAMPLE_SKILLS = [
    {"name": "React", "category": "Frontend", "proficiency": 90, "icon": "Code", "years_experience": 3},
    {"name": "Node.js", "category": "Backend", "proficiency": 85, "icon": "Server", "years_experience": 3},
    {"name": "MongoDB", "category": "Database", "proficiency": 80, "icon": "Database", "years_experience": 2},
    {"name": "TypeScript", "category": "Frontend", "proficiency": 85, "icon": "Code", "years_experience": 2},
    {"name": "PostgreSQL", "category": "Database", "proficiency": 75, "icon": "Database", "years_experience": 2},
]


async def seed_sample_data(backend: DatabaseBackend) -> int:
    """Write the sample profile, projects and skills. Returns rows written."""
    written = 0

    profile_cols = list(SAMPLE_PROFILE.keys())
    await backend.execute(
        _insert_sql("profile", profile_cols, verb="INSERT OR REPLACE"),
        [SAMPLE_PROFILE[col] for col in profile_cols],
    )
    written += 1

    for project in SAMPLE_PROJECTS:
        cols = list(project.keys())
        await backend.execute(_insert_sql("projects", cols), [project[c] for c in cols])
        written += 1

    for skill in SAMPLE_SKILLS:
        cols = list(skill.keys())
        await backend.execute(_insert_sql("skills", cols), [skill[c] for c in cols])
        written += 1

    logger.info(f"Seeded {written} sample rows on {backend.kind.value} backend")
    return written
