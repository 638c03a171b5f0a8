# recipebox API Main Entry Point
import logging
import sys
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

from .errors import RecipeBoxError
from .settings import settings
from .routers.ready import router as ready_router
from .routers.users import router as users_router
from .routers.recipes import router as recipes_router
from .routers.friends import router as friends_router
from .routers.recipe_shares import router as recipe_shares_router
from .routers.share_links import router as share_links_router
from .routers.public import router as public_router
from .routers.shopping_lists import router as shopping_lists_router
from .routers.cookbooks import router as cookbooks_router
from .routers.meal_plans import router as meal_plans_router

# Configure structured logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[logging.StreamHandler(sys.stdout)]
)
logger = logging.getLogger("recipebox")

# Rate limiter (per-IP)
limiter = Limiter(key_func=get_remote_address, default_limits=[settings.default_rate_limit])

app = FastAPI(title="recipebox API", version="0.1.0")
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(RecipeBoxError)
async def recipebox_error_handler(request: Request, exc: RecipeBoxError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.detail}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "code": exc.code},
    )


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(ready_router, prefix="/api", tags=["ready"])
app.include_router(users_router, prefix="/api", tags=["users"])
app.include_router(recipes_router, prefix="/api", tags=["recipes"])
app.include_router(friends_router, prefix="/api/friends", tags=["friends"])
app.include_router(recipe_shares_router, prefix="/api/recipe-shares", tags=["recipe-shares"])
app.include_router(share_links_router, prefix="/api/share-links", tags=["share-links"])
app.include_router(public_router, prefix="/api/public", tags=["public"])
app.include_router(shopping_lists_router, prefix="/api/shopping-lists", tags=["shopping-lists"])
app.include_router(cookbooks_router, prefix="/api/cookbooks", tags=["cookbooks"])
app.include_router(meal_plans_router, prefix="/api/meal-plans", tags=["meal-plans"])
