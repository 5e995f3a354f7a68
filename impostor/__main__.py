# impostor/__main__.py
import uvicorn

from impostor import config

if __name__ == "__main__":
    uvicorn.run("impostor.main:app", host=config.HOST, port=config.PORT, log_level=config.LOG_LEVEL.lower())
