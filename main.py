import uvicorn
from fastapi import FastAPI
from src.config import APPNAME, VERSION, CORS_ORIGINS
from src.database import database
from src.utils.log_config import configure_logging
from fastapi.responses import RedirectResponse
from fastapi.middleware.cors import CORSMiddleware
from src.routers import ballots_router, masterlist_router

configure_logging()

# Defining the application
app = FastAPI(
    title=APPNAME,
    version=VERSION,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,  # List of allowed origins
    allow_credentials=True, # Allow cookies and credentials
    allow_methods=["*"],    # Allow all HTTP methods
    allow_headers=["*"],    # Allow all headers
)

# Including all the routes
app.include_router(ballots_router)
app.include_router(masterlist_router)

@app.get("/")
def main_function():
    """
    Redirect to documentation (`/docs/`).
    """
    return RedirectResponse(url="/docs/")


if __name__ == "__main__":
    database.create_all()
    uvicorn.run(app, host="0.0.0.0", port=5001)
