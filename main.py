import uvicorn

from arena.core.config import settings


if __name__ == "__main__":
    uvicorn.run("arena.main:app", host=settings.HOST, port=settings.PORT, reload=True)
