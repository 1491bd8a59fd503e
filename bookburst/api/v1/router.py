from fastapi import APIRouter

from bookburst.api.v1 import books, bookshelf, explore, reviews, users

api_router = APIRouter()

api_router.include_router(users.router, prefix="/users", tags=["Users"])
api_router.include_router(books.router, prefix="/books", tags=["Books"])
api_router.include_router(bookshelf.router, prefix="/bookshelf", tags=["Bookshelf"])
api_router.include_router(reviews.router, prefix="/reviews", tags=["Reviews"])
api_router.include_router(explore.router, prefix="/explore", tags=["Explore"])
