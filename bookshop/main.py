import uvicorn

from bookshop.adapters.http.fastapi.api import create_app
from bookshop.config import Settings, configure_logging

# uvicorn bookshop.main:app --reload
# http://127.0.0.1:8000/docs

settings = Settings.from_env()
configure_logging(settings.log_level)
app = create_app(settings)

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=settings.port)
