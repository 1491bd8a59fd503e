#!/usr/bin/env python3
"""
Seed the catalog with a handful of well-known books.

Books go through the normal de-duplication, so running the script twice does
not create duplicates.

Usage:
    python scripts/seed_books.py
"""

import asyncio
import sys
from datetime import date
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from bookburst.core.db import async_session, engine, init_models
from bookburst.schemas.book import BookCreate
from bookburst.services.book_service import BookService

SAMPLE_BOOKS = [
    {
        "title": "To Kill a Mockingbird",
        "author": "Harper Lee",
        "description": "A lawyer in a small Alabama town defends a Black man accused of a crime, seen through his young daughter's eyes.",
        "isbn": "9780061120084",
        "page_count": 324,
        "published_date": date(1960, 7, 11),
        "publisher": "J. B. Lippincott & Co.",
        "genre": ["Fiction", "Classics", "Historical Fiction"],
    },
    {
        "title": "1984",
        "author": "George Orwell",
        "description": "Winston Smith works for a totalitarian state that rewrites history and watches everyone.",
        "isbn": "9780451524935",
        "page_count": 328,
        "published_date": date(1949, 6, 8),
        "publisher": "Secker & Warburg",
        "genre": ["Science Fiction", "Dystopian", "Classics"],
    },
    {
        "title": "The Great Gatsby",
        "author": "F. Scott Fitzgerald",
        "description": "Nick Carraway's summer on Long Island with his mysterious, wealthy neighbour Jay Gatsby.",
        "isbn": "9780743273565",
        "page_count": 180,
        "published_date": date(1925, 4, 10),
        "publisher": "Charles Scribner's Sons",
        "genre": ["Fiction", "Classics", "Literature"],
    },
    {
        "title": "Pride and Prejudice",
        "author": "Jane Austen",
        "description": "Elizabeth Bennet and Mr. Darcy misjudge each other across the drawing rooms of Regency England.",
        "isbn": "9780141439518",
        "page_count": 432,
        "published_date": date(1813, 1, 28),
        "publisher": "T. Egerton, Whitehall",
        "genre": ["Romance", "Classics", "Historical Fiction"],
    },
    {
        "title": "The Hobbit",
        "author": "J.R.R. Tolkien",
        "description": "Bilbo Baggins leaves the Shire with a company of dwarves to reclaim a treasure guarded by a dragon.",
        "isbn": "9780547928227",
        "page_count": 310,
        "published_date": date(1937, 9, 21),
        "publisher": "George Allen & Unwin",
        "genre": ["Fantasy", "Adventure", "Classics"],
    },
    {
        "title": "Harry Potter and the Philosopher's Stone",
        "author": "J.K. Rowling",
        "description": "An orphan learns on his eleventh birthday that he is a wizard and starts school at Hogwarts.",
        "isbn": "9781408855652",
        "page_count": 223,
        "published_date": date(1997, 6, 26),
        "publisher": "Bloomsbury",
        "genre": ["Fantasy", "Young Adult", "Magic"],
    },
    {
        "title": "The Catcher in the Rye",
        "author": "J.D. Salinger",
        "description": "Holden Caulfield wanders New York for a few days after being expelled from prep school.",
        "isbn": "9780316769488",
        "page_count": 277,
        "published_date": date(1951, 7, 16),
        "publisher": "Little, Brown and Company",
        "genre": ["Fiction", "Classics", "Coming of Age"],
    },
    {
        "title": "The Alchemist",
        "author": "Paulo Coelho",
        "description": "A shepherd boy travels from Spain to the Egyptian desert in search of treasure.",
        "isbn": "9780062315007",
        "page_count": 197,
        "published_date": date(1988, 1, 1),
        "publisher": "HarperOne",
        "genre": ["Fiction", "Fantasy", "Philosophy", "Adventure"],
    },
    {
        "title": "The Da Vinci Code",
        "author": "Dan Brown",
        "description": "A symbologist and a cryptologist follow clues hidden in works of art after a murder at the Louvre.",
        "isbn": "9780307474278",
        "page_count": 597,
        "published_date": date(2003, 3, 18),
        "publisher": "Doubleday",
        "genre": ["Mystery", "Thriller", "Conspiracy"],
    },
    {
        "title": "The Lord of the Rings",
        "author": "J.R.R. Tolkien",
        "description": "Frodo and the Fellowship set out to destroy the One Ring before it returns to its maker.",
        "isbn": "9780618640157",
        "page_count": 1178,
        "published_date": date(1954, 7, 29),
        "publisher": "George Allen & Unwin",
        "genre": ["Fantasy", "Adventure", "Classics", "Epic"],
    },
]


async def seed_books() -> None:
    print("📚 Seeding books...")
    await init_models()

    created_count = 0
    async with async_session() as session:
        service = BookService(session)
        for book_data in SAMPLE_BOOKS:
            book, created = await service.create_book(BookCreate(**book_data))
            if created:
                created_count += 1
                print(f"  ✅ {book.title} by {book.author}")
            else:
                print(f"  ⚠️  {book.title} already exists")

    await engine.dispose()
    print(f"🎉 Seeded {created_count} new books ({len(SAMPLE_BOOKS)} in sample set)")


if __name__ == "__main__":
    asyncio.run(seed_books())
