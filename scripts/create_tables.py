#!/usr/bin/env python3
"""
Create the BookBurst tables in the configured database.

Usage:
    python scripts/create_tables.py
    python scripts/create_tables.py --drop   # drop everything first
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from bookburst.core.config import get_settings
from bookburst.core.db import drop_models, engine, init_models


async def main(drop: bool) -> None:
    settings = get_settings()
    print(f"🗄️  Database: {settings.DATABASE_URL}")

    if drop:
        print("🧹 Dropping existing tables...")
        await drop_models()

    print("🔨 Creating tables...")
    await init_models()
    await engine.dispose()
    print("✅ Done")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create BookBurst tables")
    parser.add_argument("--drop", action="store_true", help="drop tables first")
    args = parser.parse_args()
    asyncio.run(main(args.drop))
