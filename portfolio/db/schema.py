"""Portfolio table definitions."""

from __future__ import annotations

import logging
from typing import Tuple

from .base import DatabaseBackend

logger = logging.getLogger(__name__)

# Transfer order; no foreign keys between these tables
TABLES: Tuple[str, ...] = (
    "profile",
    "projects",
    "skills",
    "experience",
    "testimonials",
    "contact_submissions",
    "blog_posts",
)

SCHEMA_STATEMENTS: Tuple[str, ...] = (
    """
    CREATE TABLE IF NOT EXISTS projects (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        title TEXT NOT NULL,
        description TEXT NOT NULL,
        long_description TEXT,
        technologies TEXT NOT NULL,
        category TEXT,
        github_url TEXT,
        live_url TEXT,
        image_url TEXT,
        featured BOOLEAN DEFAULT 0,
        created_at DATETIME DEFAULT CURRENT_TIMESTAMP
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS skills (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL,
        category TEXT NOT NULL,
        proficiency INTEGER NOT NULL,
        icon TEXT,
        years_experience INTEGER
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS experience (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        company TEXT NOT NULL,
        position TEXT NOT NULL,
        description TEXT NOT NULL,
        start_date TEXT NOT NULL,
        end_date TEXT,
        location TEXT,
        technologies TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS testimonials (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL,
        position TEXT NOT NULL,
        company TEXT NOT NULL,
        content TEXT NOT NULL,
        avatar_url TEXT,
        rating INTEGER DEFAULT 5
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS blog_posts (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        title TEXT NOT NULL,
        excerpt TEXT NOT NULL,
        content TEXT NOT NULL,
        slug TEXT UNIQUE NOT NULL,
        published BOOLEAN DEFAULT 0,
        featured_image TEXT,
        tags TEXT,
        created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
        updated_at DATETIME DEFAULT CURRENT_TIMESTAMP
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS profile (
        id INTEGER PRIMARY KEY,
        name TEXT NOT NULL,
        title TEXT NOT NULL,
        bio TEXT NOT NULL,
        email TEXT NOT NULL,
        phone TEXT,
        location TEXT,
        avatar_url TEXT,
        resume_url TEXT,
        linkedin_url TEXT,
        github_url TEXT,
        twitter_url TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS contact_submissions (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL,
        email TEXT NOT NULL,
        subject TEXT NOT NULL,
        message TEXT NOT NULL,
        status TEXT DEFAULT 'unread',
        created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
        replied_at DATETIME,
        notes TEXT
    )
    """,
)


async def ensure_schema(backend: DatabaseBackend) -> None:
    """Create any missing portfolio tables on ``backend``."""
    for statement in SCHEMA_STATEMENTS:
        await backend.execute(statement)
    logger.debug("Schema ensured on %s backend", backend.kind.value)
